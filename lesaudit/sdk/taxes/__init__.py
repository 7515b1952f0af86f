"""taxes - Payroll tax calculations and income tax estimates.

Scope:
- FICA (Social Security) and Medicare on taxable gross
- Coarse federal and state income tax estimates (directional only)
- Schemas for year-specific tax parameters and state rules

Constraints:
- Pure calculation - no profile or rate table access
- Receives parameters, returns integer cents

Usage:
    from lesaudit.sdk.taxes import calc_fica, estimate_federal_tax

    fica = calc_fica(450000, params)
    estimate = estimate_federal_tax(450000, params, filing_status="married")
"""

from .schemas import TaxBand, FilingStatusTaxRules, TaxParameters, StateTaxRule

from .withholding import (
    BUILTIN_TAX_PARAMETERS,
    NO_INCOME_TAX_STATES,
    TAX_PARAMETERS_2025,
    TaxEstimate,
    apply_rate,
    calc_fica,
    calc_medicare,
    combine_confidence,
    estimate_federal_tax,
    estimate_state_tax,
    monthly_fica_wage_base,
    round_cents,
)

__all__ = [
    # Schemas
    "TaxBand",
    "FilingStatusTaxRules",
    "TaxParameters",
    "StateTaxRule",
    # Calculations
    "BUILTIN_TAX_PARAMETERS",
    "NO_INCOME_TAX_STATES",
    "TAX_PARAMETERS_2025",
    "TaxEstimate",
    "apply_rate",
    "calc_fica",
    "calc_medicare",
    "combine_confidence",
    "estimate_federal_tax",
    "estimate_state_tax",
    "monthly_fica_wage_base",
    "round_cents",
]
