"""Pydantic schemas for tax parameters.

These schemas validate the tax-parameters/*.yaml and state_tax.yaml rate
tables and provide typed access to FICA/Medicare rates, the Social Security
wage base, standard deductions and the coarse federal bracket bands.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaxBand(BaseModel):
    """Single federal bracket band (annual cents)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to_cents: Optional[int] = Field(default=None, description="Upper bound (None for top band)")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")


class FilingStatusTaxRules(BaseModel):
    """Standard deduction and bracket bands for one filing status."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    standard_deduction_cents: int = Field(..., ge=0)
    bands: List[TaxBand] = Field(..., min_length=1)

    @field_validator("bands")
    @classmethod
    def ascending_with_open_top(cls, v: List[TaxBand]) -> List[TaxBand]:
        """Bounds must rise strictly and only the last band may be open."""
        if v[-1].up_to_cents is not None:
            raise ValueError("last band must be open (no up_to_cents)")
        previous = 0
        for band in v[:-1]:
            if band.up_to_cents is None:
                raise ValueError("only the last band may omit up_to_cents")
            if band.up_to_cents <= previous:
                raise ValueError(
                    f"band bounds must be strictly ascending (got {band.up_to_cents} "
                    f"after {previous})"
                )
            previous = band.up_to_cents
        return v


class TaxParameters(BaseModel):
    """Federal payroll tax parameters for a year."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    year: int = Field(..., gt=0)
    fica_rate: float = Field(default=0.062, ge=0, le=1)
    medicare_rate: float = Field(default=0.0145, ge=0, le=1)
    fica_wage_base_cents: int = Field(..., gt=0, description="Annual Social Security wage base")
    w4_allowance_cents: int = Field(
        default=480000, ge=0, description="Annual withholding reduction per W-4 allowance"
    )
    filing_status: Dict[str, FilingStatusTaxRules] = Field(
        ..., description="Rules keyed by single / married / head_of_household"
    )

    @field_validator("filing_status")
    @classmethod
    def require_single(cls, v: Dict[str, FilingStatusTaxRules]) -> Dict[str, FilingStatusTaxRules]:
        if "single" not in v:
            raise ValueError("filing_status must include 'single' (used as fallback)")
        return v


class StateTaxRule(BaseModel):
    """State income tax withholding rule for a year."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    state: str = Field(..., min_length=2, max_length=2)
    year: int = Field(..., gt=0)
    rate_percent: float = Field(..., ge=0, le=100)
    has_brackets: bool = Field(
        default=False, description="True when rate_percent is a mid-range stand-in for brackets"
    )

    @field_validator("state")
    @classmethod
    def upper_state(cls, v: str) -> str:
        return v.upper()
