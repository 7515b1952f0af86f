"""Exceptions raised by the les-audit SDK.

The engine only raises for invalid call shapes. Missing reference data is
never an exception: it shows up as an absent category in the snapshot.
"""


class LesAuditError(Exception):
    """Base class for les-audit errors."""
    pass


class InvalidPeriodError(LesAuditError, ValueError):
    """Raised when a reconciliation period is not a real month."""
    pass


class ImplausibleProfileError(LesAuditError):
    """Raised by strict reconciliation when the rank/tenure check fails."""

    def __init__(self, paygrade: str, years_of_service: int, explanation: str):
        self.paygrade = paygrade
        self.years_of_service = years_of_service
        self.explanation = explanation
        super().__init__(explanation)


def check_period(month: int, year: int) -> None:
    """Raise InvalidPeriodError unless (month, year) is a calendar month."""
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidPeriodError(f"month must be 1-12, got {month!r}")
    if not isinstance(year, int) or year <= 0:
        raise InvalidPeriodError(f"year must be a positive integer, got {year!r}")
