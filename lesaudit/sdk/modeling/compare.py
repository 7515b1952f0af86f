"""Comparison engine: actual LES line items vs an expected snapshot.

Every evaluated category yields exactly one flag:

    expected known,   actual absent            -> <CAT>_MISSING
    expected known,   |delta| >  threshold     -> <CAT>_MISMATCH
    expected known,   |delta| <= threshold     -> <CAT>_VERIFIED
    expected unknown, actual present           -> <CAT>_UNEXPECTED

"Absent" means no rows for the (section, code) pair or rows summing to
zero. Deltas are signed from the member's point of view: positive means the
member ends up with less money than expected (earnings short, or
deductions/taxes over-collected).

Flags come out in a fixed order: allowances, deductions, taxes, net pay.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..codes import special_pay_codes
from ..schemas import (
    ComparisonResult,
    ComparisonThresholds,
    ExpectedSnapshot,
    LineItem,
    PayFlag,
    Severity,
    Totals,
)
from . import flags as F

logger = logging.getLogger(__name__)

EARNING = "earning"
CHARGE = "charge"

NET_PAY_CODE = "NET_PAY"


@dataclass(frozen=True)
class CategoryRule:
    """How one category is matched, measured and graded."""

    category: str
    section: str
    kind: str
    threshold: str
    missing_severity: Severity
    snapshot_field: Optional[str] = None
    unavailable_key: Optional[str] = None


ALLOWANCE_RULES = (
    CategoryRule("BASE_PAY", "ALLOWANCE", EARNING, "base_pay", "red", "base_pay_cents", "base_pay"),
    CategoryRule("BAH", "ALLOWANCE", EARNING, "bah", "red", "bah_cents", "bah"),
    CategoryRule("BAS", "ALLOWANCE", EARNING, "bas", "red", "bas_cents", "bas"),
    CategoryRule("COLA", "ALLOWANCE", EARNING, "cola", "yellow", "cola_cents", "cola"),
)

DEDUCTION_RULES = (
    CategoryRule("TSP", "DEDUCTION", CHARGE, "tsp", "yellow", "tsp_cents", "tsp"),
    CategoryRule("SGLI", "DEDUCTION", CHARGE, "sgli", "yellow", "sgli_cents", "sgli"),
    CategoryRule("DENTAL", "DEDUCTION", CHARGE, "dental", "yellow", "dental_cents", "dental"),
)

TAX_RULES = (
    CategoryRule("FICA", "TAX", CHARGE, "fica", "yellow", "fica_cents", "fica"),
    CategoryRule("MEDICARE", "TAX", CHARGE, "medicare", "yellow", "medicare_cents", "medicare"),
    CategoryRule("FITW", "TAX", CHARGE, "federal_tax", "yellow", "federal_tax_cents", "federal_tax"),
    CategoryRule("SITW", "TAX", CHARGE, "state_tax", "yellow", "state_tax_cents", "state_tax"),
)


def special_pay_rules(snapshot: ExpectedSnapshot) -> List[CategoryRule]:
    """Rules for expected special pays plus any catalogued special pay code.

    One rule per code. Codes already evaluated by a fixed rule are skipped.
    """
    fixed = {rule.category for rule in ALLOWANCE_RULES + DEDUCTION_RULES + TAX_RULES}
    codes: List[str] = []
    for code in [sp.code for sp in snapshot.special_pays] + special_pay_codes():
        if code in fixed or code in codes:
            continue
        codes.append(code)
    return [CategoryRule(code, "ALLOWANCE", EARNING, "special_pay", "red") for code in codes]


def sum_line_items(line_items: Iterable[LineItem]) -> Dict[Tuple[str, str], int]:
    """Sum amounts per (section, code)."""
    sums: Dict[Tuple[str, str], int] = defaultdict(int)
    for item in line_items:
        sums[(item.section, item.code)] += item.amount_cents
    return dict(sums)


def expected_for(rule: CategoryRule, snapshot: ExpectedSnapshot) -> Optional[int]:
    if rule.snapshot_field is not None:
        return getattr(snapshot, rule.snapshot_field)
    matching = [sp.cents for sp in snapshot.special_pays if sp.code == rule.category]
    return sum(matching) if matching else None


def signed_delta(rule: CategoryRule, expected: int, actual: int) -> int:
    """Positive when the member is short."""
    if rule.kind == EARNING:
        return expected - actual
    return actual - expected


def mismatch_severity(rule: CategoryRule, delta: int) -> Severity:
    if rule.category == "BAH":
        return "red"
    if rule.category in ("BASE_PAY", "SGLI") and delta > 0:
        return "red"
    return "yellow"


def evaluate_category(
    rule: CategoryRule,
    expected: Optional[int],
    actual: int,
    threshold: int,
    snapshot: ExpectedSnapshot,
) -> Optional[PayFlag]:
    """Classify one category. Returns None when there is nothing to evaluate."""
    present = actual != 0

    if expected is None:
        if not present:
            return None
        reason = snapshot.unavailable.get(rule.unavailable_key) if rule.unavailable_key else None
        return F.unexpected_flag(rule.category, actual, reason)

    if not present and expected != 0:
        delta = signed_delta(rule, expected, 0)
        return F.missing_flag(rule.category, rule.missing_severity, expected, delta, snapshot)

    delta = signed_delta(rule, expected, actual)
    if abs(delta) <= threshold:
        return F.verified_flag(rule.category, actual, delta)
    return F.mismatch_flag(
        rule.category, mismatch_severity(rule, delta), expected, actual, delta, snapshot
    )


def evaluate_net_pay(
    expected: Optional[int], actual: Optional[int], threshold: int
) -> Optional[PayFlag]:
    if expected is None and actual is None:
        return None
    if actual is None or expected is None:
        return F.net_pay_verification_needed_flag(expected, actual)
    delta = expected - actual
    if abs(delta) <= threshold:
        return F.net_pay_verified_flag(actual, delta)
    return F.net_pay_mismatch_flag(expected, actual, delta)


def compute_totals(line_items: List[LineItem], snapshot: ExpectedSnapshot) -> Totals:
    """Aggregate actual vs expected per bucket. NET_PAY rows never count toward a bucket."""
    buckets = {"ALLOWANCE": 0, "DEDUCTION": 0, "TAX": 0}
    net_rows = []
    for item in line_items:
        if item.code == NET_PAY_CODE:
            net_rows.append(item.amount_cents)
        elif item.section in buckets:
            buckets[item.section] += item.amount_cents

    actual_net = sum(net_rows) if net_rows and sum(net_rows) != 0 else None
    expected_net = snapshot.net_pay_cents
    net_delta = None
    if actual_net is not None and expected_net is not None:
        net_delta = expected_net - actual_net

    return Totals(
        actual_allowances_cents=buckets["ALLOWANCE"],
        expected_allowances_cents=snapshot.expected_allowances_cents,
        allowances_delta_cents=snapshot.expected_allowances_cents - buckets["ALLOWANCE"],
        actual_deductions_cents=buckets["DEDUCTION"],
        expected_deductions_cents=snapshot.expected_deductions_cents,
        deductions_delta_cents=snapshot.expected_deductions_cents - buckets["DEDUCTION"],
        actual_taxes_cents=buckets["TAX"],
        expected_taxes_cents=snapshot.expected_taxes_cents,
        taxes_delta_cents=snapshot.expected_taxes_cents - buckets["TAX"],
        actual_net_pay_cents=actual_net,
        expected_net_pay_cents=expected_net,
        net_pay_delta_cents=net_delta,
    )


def compare_to_expected(
    line_items: List[LineItem],
    snapshot: ExpectedSnapshot,
    thresholds: Optional[ComparisonThresholds] = None,
) -> ComparisonResult:
    """Compare actual line items against an expected snapshot.

    Args:
        line_items: Parsed LES rows (canonical codes)
        snapshot: Expected pay for the same month
        thresholds: Per-category tolerances (defaults if None)

    Returns:
        ComparisonResult with ordered flags and bucket totals
    """
    thresholds = thresholds or ComparisonThresholds()
    line_items = list(line_items)
    totals = compute_totals(line_items, snapshot)

    if not line_items:
        logger.debug("no line items, skipping per-category comparison")
        return ComparisonResult(flags=[], totals=totals)

    sums = sum_line_items(line_items)
    rules = (
        list(ALLOWANCE_RULES)
        + special_pay_rules(snapshot)
        + list(DEDUCTION_RULES)
        + list(TAX_RULES)
    )

    flags: List[PayFlag] = []
    for rule in rules:
        flag = evaluate_category(
            rule,
            expected_for(rule, snapshot),
            sums.get((rule.section, rule.category), 0),
            getattr(thresholds, rule.threshold),
            snapshot,
        )
        if flag is not None:
            flags.append(flag)

    net_flag = evaluate_net_pay(
        totals.expected_net_pay_cents, totals.actual_net_pay_cents, thresholds.net_pay
    )
    if net_flag is not None:
        flags.append(net_flag)

    if not flags and totals.actual_allowances_cents > 0:
        flags.append(F.all_verified_flag())

    logger.debug(f"comparison produced {len(flags)} flags")
    return ComparisonResult(flags=flags, totals=totals)
