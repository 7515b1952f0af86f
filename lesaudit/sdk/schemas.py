"""Pydantic schemas for les-audit data validation.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in profile and statement files cause clear errors rather than
silent ignoring. Value objects are frozen: a snapshot or result is never
mutated after construction.

All money amounts are integer cents.
"""

import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Section = Literal["ALLOWANCE", "TAX", "DEDUCTION", "ALLOTMENT", "DEBT", "ADJUSTMENT"]
SECTIONS = ("ALLOWANCE", "TAX", "DEDUCTION", "ALLOTMENT", "DEBT", "ADJUSTMENT")

Severity = Literal["red", "yellow", "green"]
FilingStatus = Literal["single", "married", "head_of_household"]
DentalPlan = Literal["none", "single", "family"]
Confidence = Literal["high", "medium", "low"]

_PAYGRADE_RE = re.compile(r"^([EOW])-?0?(\d{1,2})$")


def normalize_paygrade(value: str) -> str:
    """Normalize a pay grade to the canonical three-character form.

    Accepts "E5", "E-5", "e05", "O-3" and returns "E05", "O03".
    Values that do not look like a pay grade are returned upper-cased and
    left for the sanity validator to reject.
    """
    text = value.strip().upper()
    match = _PAYGRADE_RE.match(text)
    if not match:
        return text
    return f"{match.group(1)}{int(match.group(2)):02d}"


# =============================================================================
# Statement line items
# =============================================================================


class LineItem(BaseModel):
    """One row from a parsed pay statement.

    Several rows may share a (section, code) pair (split allowances, retro
    adjustments). Comparison always uses the sum of those rows.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    section: Section = Field(..., description="Statement section")
    code: str = Field(..., min_length=1, description="Canonical line code (e.g., 'BAH')")
    amount_cents: int = Field(..., description="Current period amount in cents")
    ytd_cents: int = Field(default=0, description="Year-to-date amount in cents")
    description: Optional[str] = Field(default=None, description="Raw statement text")

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()


# =============================================================================
# Member profile
# =============================================================================


class SpecialPayElection(BaseModel):
    """A toggleable special pay element (SDAP, HFP_IDP, FSA, FLPP, ...)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(..., min_length=1, description="Special pay code")
    enabled: bool = Field(default=True, description="Whether the member receives it")
    monthly_cents: int = Field(default=0, ge=0, description="Monthly amount in cents")

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()


class MemberProfile(BaseModel):
    """Inputs that drive the expected pay model.

    Pay grade and years of service must pass the rank/tenure sanity check
    before a snapshot built from them is trusted.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    paygrade: str = Field(..., description="Pay grade (E01-E09, W01-W05, O01-O10)")
    years_of_service: int = Field(..., description="Completed years of service")
    location_key: Optional[str] = Field(
        default=None, description="Military Housing Area code or ZIP code"
    )
    has_dependents: bool = Field(default=False)
    filing_status: FilingStatus = Field(default="single")
    state_of_residence: Optional[str] = Field(
        default=None, description="Two-letter state of legal residence"
    )
    tsp_contribution_rate: float = Field(
        default=0, ge=0, le=1,
        description="TSP election as a fraction of total pay (0.05 = 5%)",
    )
    sgli_coverage_cents: int = Field(
        default=0, ge=0, description="Elected SGLI coverage in cents (0 = declined)"
    )
    dental_plan: DentalPlan = Field(default="none")
    special_pays: List[SpecialPayElection] = Field(default_factory=list)
    w4_allowances: int = Field(default=0, ge=0, le=10)
    czte_active: bool = Field(
        default=False, description="Combat Zone Tax Exclusion in effect this month"
    )

    @field_validator("paygrade")
    @classmethod
    def canonical_paygrade(cls, v: str) -> str:
        return normalize_paygrade(v)

    @field_validator("location_key", "state_of_residence")
    @classmethod
    def upper_keys(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None


# =============================================================================
# Expected snapshot
# =============================================================================


class ExpectedSpecialPay(BaseModel):
    """Expected special pay amount."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str
    cents: int = Field(..., ge=0)


class ExpectedSnapshot(BaseModel):
    """Sparse expected pay for one profile and month.

    A category set to None means the data needed to compute it was not
    available. It does NOT mean zero.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., gt=0)
    paygrade: str
    years_of_service: int
    location_key: Optional[str] = None
    has_dependents: bool = False

    base_pay_cents: Optional[int] = None
    bah_cents: Optional[int] = None
    bas_cents: Optional[int] = None
    cola_cents: Optional[int] = None
    special_pays: List[ExpectedSpecialPay] = Field(default_factory=list)

    taxable_gross_cents: Optional[int] = None
    total_pay_cents: Optional[int] = None

    tsp_cents: Optional[int] = None
    sgli_cents: Optional[int] = None
    dental_cents: Optional[int] = None

    federal_tax_cents: Optional[int] = None
    state_tax_cents: Optional[int] = None
    fica_cents: Optional[int] = None
    medicare_cents: Optional[int] = None

    net_pay_cents: Optional[int] = None

    tax_confidence: Optional[Confidence] = Field(
        default=None, description="Confidence of the federal/state estimates"
    )
    unavailable: Dict[str, str] = Field(
        default_factory=dict, description="Category -> reason it could not be computed"
    )

    @property
    def special_pays_cents(self) -> int:
        return sum(sp.cents for sp in self.special_pays)

    @property
    def expected_allowances_cents(self) -> int:
        """Sum of populated pay categories (base pay, allowances, specials)."""
        return (
            (self.base_pay_cents or 0)
            + (self.bah_cents or 0)
            + (self.bas_cents or 0)
            + (self.cola_cents or 0)
            + self.special_pays_cents
        )

    @property
    def expected_deductions_cents(self) -> int:
        return (self.tsp_cents or 0) + (self.sgli_cents or 0) + (self.dental_cents or 0)

    @property
    def expected_taxes_cents(self) -> int:
        return (
            (self.federal_tax_cents or 0)
            + (self.state_tax_cents or 0)
            + (self.fica_cents or 0)
            + (self.medicare_cents or 0)
        )


# =============================================================================
# Comparison output
# =============================================================================


class PayFlag(BaseModel):
    """One finding from the comparison engine."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(..., description="Category + condition (e.g., 'BAH_MISMATCH')")
    category: str = Field(..., description="Category evaluated (e.g., 'BAH')")
    severity: Severity
    message: str = Field(..., description="What was observed")
    suggestion: str = Field(..., description="What the member should do next")
    delta_cents: Optional[int] = Field(
        default=None,
        description="Signed delta; positive means the member is underpaid",
    )
    ref_url: Optional[str] = None


class Totals(BaseModel):
    """Aggregate actual vs expected amounts per bucket.

    Deltas are expected minus actual.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    actual_allowances_cents: int
    expected_allowances_cents: int
    allowances_delta_cents: int
    actual_deductions_cents: int
    expected_deductions_cents: int
    deductions_delta_cents: int
    actual_taxes_cents: int
    expected_taxes_cents: int
    taxes_delta_cents: int
    actual_net_pay_cents: Optional[int] = None
    expected_net_pay_cents: Optional[int] = None
    net_pay_delta_cents: Optional[int] = None


class ComparisonResult(BaseModel):
    """Output of compare_to_expected."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    flags: List[PayFlag] = Field(default_factory=list)
    totals: Totals

    def by_severity(self, severity: Severity) -> List[PayFlag]:
        return [f for f in self.flags if f.severity == severity]

    def flag_for(self, category: str) -> Optional[PayFlag]:
        """First flag for a category, or None."""
        for flag in self.flags:
            if flag.category == category:
                return flag
        return None


class ComparisonThresholds(BaseModel):
    """Per-category materiality thresholds in cents.

    A difference whose magnitude is less than or equal to the threshold is
    within tolerance.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_pay: int = Field(default=5000, ge=0)
    bah: int = Field(default=5000, ge=0)
    bas: int = Field(default=1000, ge=0)
    cola: int = Field(default=2500, ge=0)
    special_pay: int = Field(default=2500, ge=0)
    tsp: int = Field(default=1000, ge=0)
    sgli: int = Field(default=100, ge=0)
    dental: int = Field(default=500, ge=0)
    fica: int = Field(default=300, ge=0)
    medicare: int = Field(default=300, ge=0)
    federal_tax: int = Field(default=15000, ge=0)
    state_tax: int = Field(default=10000, ge=0)
    net_pay: int = Field(default=5000, ge=0)
