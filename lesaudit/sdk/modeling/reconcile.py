"""End-to-end reconciliation of one LES.

rank check -> expected snapshot -> comparison -> statement math check
"""

import logging
from typing import List, Optional

from ..errors import ImplausibleProfileError, check_period
from ..paygrade import validate_rank_yos
from ..rates import RateTables
from ..schemas import ComparisonThresholds, LineItem, MemberProfile
from .compare import compare_to_expected
from .expected import build_expected_snapshot
from .schemas import ReconciliationReport
from .statement import balance_statement

logger = logging.getLogger(__name__)


def reconcile(
    profile: MemberProfile,
    month: int,
    year: int,
    line_items: List[LineItem],
    rates: RateTables,
    thresholds: Optional[ComparisonThresholds] = None,
    strict: bool = False,
    raise_on_reject: bool = False,
) -> ReconciliationReport:
    """Audit one month's LES against the member's expected pay.

    Args:
        profile: Member profile
        month: 1-12
        year: Calendar year
        line_items: Parsed LES rows
        rates: Rate lookup adapter
        thresholds: Per-category tolerances (defaults if None)
        strict: Block snapshot generation when the rank/YOS check fails
        raise_on_reject: With strict, raise ImplausibleProfileError instead
            of returning a blocked report

    Returns:
        ReconciliationReport. When blocked, snapshot and comparison are None.

    Raises:
        InvalidPeriodError: If month/year is not a calendar month
        ImplausibleProfileError: If strict and raise_on_reject and the check fails
    """
    check_period(month, year)
    line_items = list(line_items)
    warnings: List[str] = []

    rank_check = validate_rank_yos(profile.paygrade, profile.years_of_service)
    statement = balance_statement(line_items) if line_items else None

    if not rank_check.valid:
        if strict:
            logger.info(f"rank check rejected {rank_check.paygrade}: {rank_check.explanation}")
            if raise_on_reject:
                raise ImplausibleProfileError(
                    rank_check.paygrade, rank_check.years_of_service, rank_check.explanation
                )
            return ReconciliationReport(
                month=month,
                year=year,
                rank_check=rank_check,
                statement_balance=statement,
                warnings=[rank_check.explanation],
            )
        logger.warning(f"proceeding despite rank check: {rank_check.explanation}")
        warnings.append(f"Expected pay may be unreliable: {rank_check.explanation}")

    snapshot = build_expected_snapshot(profile, month, year, rates)
    comparison = compare_to_expected(line_items, snapshot, thresholds)

    if statement is not None and statement.balanced is False:
        warnings.append(
            f"Statement does not add up: sections net to {statement.computed_net_cents} cents "
            f"but NET_PAY is {statement.stated_net_cents} cents."
        )

    return ReconciliationReport(
        month=month,
        year=year,
        rank_check=rank_check,
        snapshot=snapshot,
        comparison=comparison,
        statement_balance=statement,
        warnings=warnings,
    )
