"""Payroll tax calculations on monthly taxable gross.

FICA and Medicare are flat percentages of taxable gross (base pay, COLA and
special pays; BAH and BAS are never taxed). FICA caps at the annual wage
base divided by twelve. That cap is a monthly proration and does not track
year-to-date earnings.

Federal and state income tax are coarse estimates: the federal figure
annualizes monthly pay, subtracts the standard deduction and walks
cumulative bracket bands; the state figure applies one rate. They are
directional only and are compared with a wide tolerance.

All amounts are integer cents.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..schemas import Confidence
from .schemas import StateTaxRule, TaxParameters


NO_INCOME_TAX_STATES = frozenset({"AK", "FL", "NV", "SD", "TN", "TX", "WA", "WY", "NH"})

# 2025 federal parameters (annual cents). Bands are coarse: the top band
# absorbs everything above the last bound listed.
TAX_PARAMETERS_2025 = TaxParameters(
    year=2025,
    fica_rate=0.062,
    medicare_rate=0.0145,
    fica_wage_base_cents=17610000,
    w4_allowance_cents=480000,
    filing_status={
        "single": {
            "standard_deduction_cents": 1465000,
            "bands": [
                {"up_to_cents": 1160000, "rate": 0.10},
                {"up_to_cents": 4715000, "rate": 0.12},
                {"up_to_cents": 10052500, "rate": 0.22},
                {"up_to_cents": 19195000, "rate": 0.24},
                {"rate": 0.32},
            ],
        },
        "married": {
            "standard_deduction_cents": 2930000,
            "bands": [
                {"up_to_cents": 2320000, "rate": 0.10},
                {"up_to_cents": 9430000, "rate": 0.12},
                {"up_to_cents": 20105000, "rate": 0.22},
                {"rate": 0.24},
            ],
        },
        "head_of_household": {
            "standard_deduction_cents": 2190000,
            "bands": [
                {"up_to_cents": 1660000, "rate": 0.10},
                {"up_to_cents": 6370000, "rate": 0.12},
                {"rate": 0.22},
            ],
        },
    },
)

BUILTIN_TAX_PARAMETERS = {2025: TAX_PARAMETERS_2025}


def round_cents(amount) -> int:
    """Round a Decimal/float/int amount of cents half-up to whole cents."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_rate(cents: int, rate: float) -> int:
    """cents * rate, rounded half-up. Rates go through str() to avoid float drift."""
    return round_cents(Decimal(cents) * Decimal(str(rate)))


@dataclass(frozen=True)
class TaxEstimate:
    """A monthly income tax estimate with its confidence."""

    amount_cents: int
    confidence: Confidence
    method: str


def monthly_fica_wage_base(params: TaxParameters) -> int:
    """Annual Social Security wage base prorated to one month."""
    return params.fica_wage_base_cents // 12


def calc_fica(taxable_gross_cents: int, params: TaxParameters) -> int:
    """Social Security tax on taxable gross, capped at the monthly wage base."""
    wages = min(max(taxable_gross_cents, 0), monthly_fica_wage_base(params))
    return apply_rate(wages, params.fica_rate)


def calc_medicare(taxable_gross_cents: int, params: TaxParameters) -> int:
    """Medicare tax on taxable gross (no wage base)."""
    return apply_rate(max(taxable_gross_cents, 0), params.medicare_rate)


def estimate_federal_tax(
    monthly_taxable_cents: int,
    params: TaxParameters,
    filing_status: str = "single",
    w4_allowances: int = 0,
    czte_active: bool = False,
) -> TaxEstimate:
    """Estimate monthly federal income tax withholding.

    Args:
        monthly_taxable_cents: Taxable gross for the month
        params: Tax parameters for the year
        filing_status: 'single', 'married' or 'head_of_household'
        w4_allowances: Legacy W-4 allowances, each reduces annual tax by a flat amount
        czte_active: Combat Zone Tax Exclusion in effect

    Returns:
        TaxEstimate. CZTE is a known zero with high confidence.
    """
    if czte_active:
        return TaxEstimate(0, "high", "zero_czte")

    rules = params.filing_status.get(filing_status)
    status_known = rules is not None
    if rules is None:
        rules = params.filing_status["single"]

    annual_taxable = max(0, monthly_taxable_cents * 12 - rules.standard_deduction_cents)

    annual_tax = Decimal(0)
    lower = 0
    for band in rules.bands:
        upper = band.up_to_cents
        if upper is not None and annual_taxable > upper:
            annual_tax += Decimal(upper - lower) * Decimal(str(band.rate))
            lower = upper
            continue
        annual_tax += Decimal(annual_taxable - lower) * Decimal(str(band.rate))
        break

    annual_tax = max(Decimal(0), annual_tax - w4_allowances * params.w4_allowance_cents)
    monthly = round_cents(annual_tax / 12)

    if not status_known:
        confidence = "low"
    elif w4_allowances == 0 and filing_status in ("single", "married"):
        confidence = "high"
    elif w4_allowances <= 2:
        confidence = "medium"
    else:
        confidence = "low"

    return TaxEstimate(monthly, confidence, "estimated")


def estimate_state_tax(
    monthly_taxable_cents: int,
    state: Optional[str],
    rule: Optional[StateTaxRule],
) -> Optional[TaxEstimate]:
    """Estimate monthly state income tax withholding.

    Args:
        monthly_taxable_cents: Taxable gross for the month
        state: Two-letter state of legal residence
        rule: State rule from the rate tables, if any

    Returns:
        TaxEstimate, or None when the state is unknown or has no rule
    """
    if not state:
        return None

    if state.upper() in NO_INCOME_TAX_STATES:
        return TaxEstimate(0, "high", "no_income_tax")

    if rule is None:
        return None

    annual = Decimal(monthly_taxable_cents * 12) * Decimal(str(rule.rate_percent)) / 100
    monthly = round_cents(Decimal(round_cents(annual)) / 12)
    confidence = "medium" if rule.has_brackets else "high"
    return TaxEstimate(monthly, confidence, "estimated")


def combine_confidence(*levels: Optional[Confidence]) -> Optional[Confidence]:
    """Weakest of the given confidence levels (None entries ignored)."""
    present = [level for level in levels if level is not None]
    if not present:
        return None
    for level in ("low", "medium"):
        if level in present:
            return level
    return "high"
