"""Rank / years-of-service sanity checks.

Rejects pay grade and tenure combinations that are implausible enough to
suggest a data entry error (E01 with 20 years, O10 with 2 years) before
they corrupt an expected pay snapshot. Never raises: callers decide whether
a failed check blocks snapshot generation or is only a warning.
"""

from dataclasses import dataclass
from typing import Optional

from .schemas import normalize_paygrade


ENLISTED_GRADES = tuple(f"E{n:02d}" for n in range(1, 10))
WARRANT_GRADES = tuple(f"W{n:02d}" for n in range(1, 6))
OFFICER_GRADES = tuple(f"O{n:02d}" for n in range(1, 11))

JUNIOR_ENLISTED = ("E01", "E02", "E03", "E04")
JUNIOR_OFFICERS = ("O01", "O02")
FLAG_OFFICERS = ("O07", "O08", "O09", "O10")

JUNIOR_ENLISTED_MAX_YOS = 8
JUNIOR_OFFICER_MAX_YOS = 6
SENIOR_ENLISTED_MIN_YOS = {"E08": 12, "E09": 15}
FLAG_OFFICER_MIN_YOS = 18
MAX_YOS = 40


@dataclass(frozen=True)
class RankCheck:
    """Result of a rank/tenure sanity check."""

    valid: bool
    paygrade: str
    years_of_service: int
    explanation: Optional[str] = None


def is_officer(paygrade: str) -> bool:
    """Commissioned and warrant officers."""
    grade = normalize_paygrade(paygrade)
    return grade in OFFICER_GRADES or grade in WARRANT_GRADES


def is_enlisted(paygrade: str) -> bool:
    return normalize_paygrade(paygrade) in ENLISTED_GRADES


def is_known_paygrade(paygrade: str) -> bool:
    return is_officer(paygrade) or is_enlisted(paygrade)


def validate_rank_yos(paygrade: str, years_of_service: int) -> RankCheck:
    """Check a pay grade against years of service.

    Args:
        paygrade: Pay grade in any common form ("E5", "E-05", "E05")
        years_of_service: Completed years of service

    Returns:
        RankCheck with valid=False and a human-readable explanation when the
        combination is implausible
    """
    grade = normalize_paygrade(paygrade)

    def reject(explanation: str) -> RankCheck:
        return RankCheck(False, grade, years_of_service, explanation)

    if not is_known_paygrade(grade):
        return reject(f"Unrecognized pay grade '{paygrade}'. Use E01-E09, W01-W05 or O01-O10.")

    if years_of_service < 0:
        return reject(f"Years of service cannot be negative (got {years_of_service}).")

    if years_of_service > MAX_YOS:
        return reject(
            f"{years_of_service} years of service exceeds the {MAX_YOS}-year pay table. "
            f"Verify time in service."
        )

    if grade in JUNIOR_ENLISTED and years_of_service > JUNIOR_ENLISTED_MAX_YOS:
        return reject(
            f"{grade} with {years_of_service} years of service is highly unusual. "
            f"Junior enlisted typically promote to E05 within 4-6 years. "
            f"Verify rank and time in service."
        )

    min_yos = SENIOR_ENLISTED_MIN_YOS.get(grade)
    if min_yos is not None and years_of_service < min_yos:
        return reject(
            f"{grade} requires a minimum of ~{min_yos} years of service "
            f"(got {years_of_service}). Verify rank and YOS."
        )

    if grade in FLAG_OFFICERS and years_of_service < FLAG_OFFICER_MIN_YOS:
        return reject(
            f"{grade} (general/flag officer) requires a minimum of ~{FLAG_OFFICER_MIN_YOS} "
            f"years of service (got {years_of_service}). Verify rank and YOS."
        )

    if grade in JUNIOR_OFFICERS and years_of_service > JUNIOR_OFFICER_MAX_YOS:
        return reject(
            f"{grade} with {years_of_service} years of service is unusual. "
            f"Most officers promote to O03 within 4 years. Verify rank and YOS."
        )

    return RankCheck(True, grade, years_of_service)
