"""Expected pay calculator.

Builds an ExpectedSnapshot for a member profile and month. Every category
is computed by its own function returning a Lookup and is guarded on its
own, so one failed table or lookup leaves the other categories intact.

Computation order:
  1. Base pay, BAH, BAS, COLA, special pays   (independent lookups)
  2. Taxable gross, total pay                  (derived)
  3. TSP, SGLI, dental                         (TSP needs total pay)
  4. FICA, Medicare, federal, state            (need taxable gross)
  5. Net pay                                   (needs everything above)

A category that cannot be supported by data stays None in the snapshot and
its reason is recorded in snapshot.unavailable. Nothing is ever defaulted
to zero or to an average.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from ..codes import canonicalize_code, is_special_pay
from ..errors import check_period
from ..paygrade import is_enlisted, is_officer
from ..rates import RateTables
from ..schemas import ExpectedSnapshot, ExpectedSpecialPay, MemberProfile
from ..taxes import (
    NO_INCOME_TAX_STATES,
    TaxParameters,
    apply_rate,
    calc_fica,
    calc_medicare,
    combine_confidence,
    estimate_federal_tax,
    estimate_state_tax,
    round_cents,
)

logger = logging.getLogger(__name__)


# BAS 2025 monthly rates
BAS_OFFICER_CENTS = 31698
BAS_ENLISTED_CENTS = 46025

# SGLI premium when coverage is elected but not in the premium table:
# $0.06 per $1,000 of coverage plus the $1.00 TSGLI rider.
SGLI_CENTS_PER_THOUSAND = 6
TSGLI_PREMIUM_CENTS = 100

# TRICARE Dental fallback premiums by plan tier
DENTAL_FALLBACK_CENTS = {"single": 1449, "family": 3766}

FOUND = "found"
ABSENT = "absent"
ERROR = "error"


@dataclass(frozen=True)
class Lookup:
    """Tagged result of one category computation.

    found: cents holds the value
    absent: no data supports a value (reason says why)
    error: the computation raised (reason holds the error)
    """

    status: str
    cents: Optional[int] = None
    reason: Optional[str] = None
    confidence: Optional[str] = None

    @classmethod
    def found(cls, cents: int, confidence: Optional[str] = None) -> "Lookup":
        return cls(FOUND, cents=cents, confidence=confidence)

    @classmethod
    def absent(cls, reason: str) -> "Lookup":
        return cls(ABSENT, reason=reason)

    @classmethod
    def error(cls, reason: str) -> "Lookup":
        return cls(ERROR, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status == FOUND


def guarded(category: str, compute: Callable[..., Lookup], *args) -> Lookup:
    """Run one category computation, turning any exception into Lookup.error."""
    try:
        result = compute(*args)
    except Exception as e:
        logger.warning(f"{category}: computation failed: {type(e).__name__}: {e}")
        return Lookup.error(f"{type(e).__name__}: {e}")
    if not result.is_found:
        logger.debug(f"{category}: {result.status} ({result.reason})")
    return result


def last_day_of_month(month: int, year: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


# =============================================================================
# Per-category computations
# =============================================================================


def lookup_base_pay(profile: MemberProfile, rates: RateTables) -> Lookup:
    cents = rates.base_pay(profile.paygrade, profile.years_of_service)
    if cents is None:
        return Lookup.absent(
            f"no base pay row for {profile.paygrade} at {profile.years_of_service} YOS"
        )
    return Lookup.found(cents)


def lookup_bah(profile: MemberProfile, cutoff: date, rates: RateTables) -> Lookup:
    if not profile.location_key:
        return Lookup.absent("no location on profile")
    cents = rates.housing_rate(
        profile.paygrade, profile.location_key, profile.has_dependents, cutoff
    )
    if cents is None:
        dep = "with" if profile.has_dependents else "without"
        return Lookup.absent(
            f"no BAH row for {profile.paygrade} {dep} dependents at "
            f"{profile.location_key} effective by {cutoff.isoformat()}"
        )
    return Lookup.found(cents)


def lookup_bas(profile: MemberProfile) -> Lookup:
    if is_officer(profile.paygrade):
        return Lookup.found(BAS_OFFICER_CENTS)
    if is_enlisted(profile.paygrade):
        return Lookup.found(BAS_ENLISTED_CENTS)
    return Lookup.absent(f"unrecognized pay grade {profile.paygrade}")


def lookup_cola(profile: MemberProfile, cutoff: date, rates: RateTables) -> Lookup:
    """COLA for the duty location. Absent is a legitimate "none due"."""
    if not profile.location_key:
        return Lookup.absent("no location on profile")
    cents = rates.cola_rate(
        profile.location_key, profile.paygrade, profile.has_dependents, cutoff
    )
    if cents is None:
        return Lookup.absent(f"no COLA for {profile.location_key}")
    return Lookup.found(cents)


def special_pay_code(raw: str) -> str:
    """Catalog code for a special pay election, else the election's own code."""
    canonical = canonicalize_code(raw)
    if canonical is not None and is_special_pay(canonical):
        return canonical
    return raw


def collect_special_pays(profile: MemberProfile) -> List[ExpectedSpecialPay]:
    """Enabled special pay elections with a positive monthly amount.

    Elections are keyed by catalog code ("HFP" and "HFP_IDP" are the same
    pay) and elections sharing a code are summed into one entry, kept in
    first-seen order.
    """
    totals: Dict[str, int] = {}
    for sp in profile.special_pays:
        if not sp.enabled or sp.monthly_cents <= 0:
            continue
        code = special_pay_code(sp.code)
        totals[code] = totals.get(code, 0) + sp.monthly_cents
    return [ExpectedSpecialPay(code=code, cents=cents) for code, cents in totals.items()]


def compute_tsp(profile: MemberProfile, total_pay: Optional[int]) -> Lookup:
    """TSP is a percentage of total pay, non-taxable allowances included."""
    if profile.tsp_contribution_rate <= 0:
        return Lookup.absent("no TSP election")
    if total_pay is None:
        return Lookup.absent("requires total pay")
    return Lookup.found(apply_rate(total_pay, profile.tsp_contribution_rate))


def lookup_sgli(profile: MemberProfile, rates: RateTables) -> Lookup:
    coverage = profile.sgli_coverage_cents
    if coverage <= 0:
        return Lookup.absent("SGLI declined")
    cents = rates.sgli_premium(coverage)
    if cents is None:
        per_thousand = Decimal(coverage) / Decimal(100 * 1000)
        cents = round_cents(per_thousand * SGLI_CENTS_PER_THOUSAND) + TSGLI_PREMIUM_CENTS
        logger.debug(f"sgli: no premium row for {coverage} cents coverage, using {cents}")
    return Lookup.found(cents)


def lookup_dental(profile: MemberProfile, rates: RateTables) -> Lookup:
    plan = profile.dental_plan
    if plan == "none":
        return Lookup.absent("no dental plan")
    cents = rates.dental_premium(plan)
    if cents is None:
        cents = DENTAL_FALLBACK_CENTS[plan]
    return Lookup.found(cents)


def lookup_tax_parameters(year: int, rates: RateTables) -> Optional[TaxParameters]:
    return rates.tax_parameters(year)


def compute_fica(taxable: Optional[int], params: Optional[TaxParameters]) -> Lookup:
    if taxable is None:
        return Lookup.absent("requires taxable gross")
    if params is None:
        return Lookup.absent("no tax parameters for year")
    return Lookup.found(calc_fica(taxable, params))


def compute_medicare(taxable: Optional[int], params: Optional[TaxParameters]) -> Lookup:
    if taxable is None:
        return Lookup.absent("requires taxable gross")
    if params is None:
        return Lookup.absent("no tax parameters for year")
    return Lookup.found(calc_medicare(taxable, params))


def compute_federal_tax(
    profile: MemberProfile, taxable: Optional[int], params: Optional[TaxParameters]
) -> Lookup:
    """Coarse federal withholding estimate; a known zero under CZTE."""
    if taxable is None:
        return Lookup.absent("requires taxable gross")
    if profile.czte_active:
        estimate = estimate_federal_tax(taxable, params, czte_active=True)
        return Lookup.found(estimate.amount_cents, estimate.confidence)
    if params is None:
        return Lookup.absent("no tax parameters for year")
    estimate = estimate_federal_tax(
        taxable,
        params,
        filing_status=profile.filing_status,
        w4_allowances=profile.w4_allowances,
    )
    return Lookup.found(estimate.amount_cents, estimate.confidence)


def compute_state_tax(
    profile: MemberProfile, taxable: Optional[int], year: int, rates: RateTables
) -> Lookup:
    state = profile.state_of_residence
    if taxable is None:
        return Lookup.absent("requires taxable gross")
    if not state:
        return Lookup.absent("no state of residence")
    rule = None if state in NO_INCOME_TAX_STATES else rates.state_tax_rule(state, year)
    estimate = estimate_state_tax(taxable, state, rule)
    if estimate is None:
        return Lookup.absent(f"no state tax rule for {state} {year}")
    return Lookup.found(estimate.amount_cents, estimate.confidence)


# =============================================================================
# Snapshot builder
# =============================================================================


def build_expected_snapshot(
    profile: MemberProfile,
    month: int,
    year: int,
    rates: RateTables,
) -> ExpectedSnapshot:
    """Compute expected pay for one profile and month.

    Args:
        profile: Member profile (rank/tenure should already be sanity-checked)
        month: 1-12
        year: Calendar year
        rates: Rate lookup adapter

    Returns:
        Sparse ExpectedSnapshot; unknown categories are None

    Raises:
        InvalidPeriodError: If month/year is not a calendar month
    """
    check_period(month, year)
    cutoff = last_day_of_month(month, year)
    unavailable: Dict[str, str] = {}

    def note(category: str, result: Lookup) -> Optional[int]:
        if result.is_found:
            return result.cents
        unavailable[category] = result.reason or result.status
        return None

    # 1. Independent pay lookups
    base_pay = note("base_pay", guarded("base_pay", lookup_base_pay, profile, rates))
    bah_result = guarded("bah", lookup_bah, profile, cutoff, rates)
    bah = bah_result.cents
    if profile.location_key and not bah_result.is_found:
        note("bah", bah_result)
    bas = note("bas", guarded("bas", lookup_bas, profile))

    cola_result = guarded("cola", lookup_cola, profile, cutoff, rates)
    cola = cola_result.cents
    if cola_result.status == ERROR:
        note("cola", cola_result)

    special_pays = collect_special_pays(profile)
    specials_total = sum(sp.cents for sp in special_pays)

    # 2. Derived totals
    taxable_gross = None
    if base_pay is None:
        unavailable["taxable_gross"] = "requires base pay"
    elif cola_result.status == ERROR:
        unavailable["taxable_gross"] = "COLA lookup failed"
    else:
        taxable_gross = base_pay + (cola or 0) + specials_total

    total_pay = None
    if taxable_gross is None:
        unavailable["total_pay"] = "requires taxable gross"
    elif bas is None:
        unavailable["total_pay"] = "requires BAS"
    elif profile.location_key and bah is None:
        unavailable["total_pay"] = "requires BAH"
    else:
        total_pay = taxable_gross + (bah or 0) + bas

    # 3. Deductions
    tsp_result = guarded("tsp", compute_tsp, profile, total_pay)
    sgli_result = guarded("sgli", lookup_sgli, profile, rates)
    dental_result = guarded("dental", lookup_dental, profile, rates)
    elected = {
        "tsp": profile.tsp_contribution_rate > 0,
        "sgli": profile.sgli_coverage_cents > 0,
        "dental": profile.dental_plan != "none",
    }
    deductions = {}
    for category, result in (("tsp", tsp_result), ("sgli", sgli_result), ("dental", dental_result)):
        deductions[category] = note(category, result) if elected[category] else None

    # 4. Taxes
    try:
        params = lookup_tax_parameters(year, rates)
    except Exception as e:
        logger.warning(f"tax_parameters: lookup failed: {type(e).__name__}: {e}")
        unavailable["tax_parameters"] = f"{type(e).__name__}: {e}"
        params = None
    else:
        if params is None:
            unavailable["tax_parameters"] = f"no tax parameters for {year}"

    fica = note("fica", guarded("fica", compute_fica, taxable_gross, params))
    medicare = note("medicare", guarded("medicare", compute_medicare, taxable_gross, params))

    federal_result = guarded("federal_tax", compute_federal_tax, profile, taxable_gross, params)
    federal_tax = note("federal_tax", federal_result)
    state_result = guarded("state_tax", compute_state_tax, profile, taxable_gross, year, rates)
    state_tax = note("state_tax", state_result)

    # 5. Net pay
    net_pay = None
    missing = [
        name for name, value in (
            ("total_pay", total_pay),
            ("fica", fica),
            ("medicare", medicare),
            ("federal_tax", federal_tax),
            ("state_tax", state_tax),
        )
        if value is None
    ]
    missing += [name for name, value in deductions.items() if elected[name] and value is None]
    if missing:
        unavailable["net_pay"] = "requires " + ", ".join(missing)
    else:
        net_pay = (
            total_pay
            - sum(v for v in deductions.values() if v is not None)
            - (federal_tax + state_tax + fica + medicare)
        )

    return ExpectedSnapshot(
        month=month,
        year=year,
        paygrade=profile.paygrade,
        years_of_service=profile.years_of_service,
        location_key=profile.location_key,
        has_dependents=profile.has_dependents,
        base_pay_cents=base_pay,
        bah_cents=bah,
        bas_cents=bas,
        cola_cents=cola,
        special_pays=special_pays,
        taxable_gross_cents=taxable_gross,
        total_pay_cents=total_pay,
        tsp_cents=deductions["tsp"],
        sgli_cents=deductions["sgli"],
        dental_cents=deductions["dental"],
        federal_tax_cents=federal_tax,
        state_tax_cents=state_tax,
        fica_cents=fica,
        medicare_cents=medicare,
        net_pay_cents=net_pay,
        tax_confidence=combine_confidence(federal_result.confidence, state_result.confidence),
        unavailable=unavailable,
    )
