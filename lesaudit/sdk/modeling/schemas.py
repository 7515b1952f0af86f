"""Modeling-specific schemas.

These schemas are used by the modeling layer and depend on core schemas
from lesaudit.sdk.schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..paygrade import RankCheck
from ..schemas import ComparisonResult, ExpectedSnapshot


class StatementBalance(BaseModel):
    """Internal arithmetic check of a statement against its own net pay line.

    computed_net = allowances - taxes - deductions - allotments - debts + adjustments
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowances_cents: int
    taxes_cents: int
    deductions_cents: int
    allotments_cents: int
    debts_cents: int
    adjustments_cents: int
    computed_net_cents: int
    stated_net_cents: Optional[int] = Field(
        default=None, description="NET_PAY printed on the statement (None if absent)"
    )
    difference_cents: Optional[int] = Field(
        default=None, description="stated_net - computed_net"
    )
    balanced: Optional[bool] = Field(
        default=None, description="None when there is no stated net pay to check against"
    )
    math_proof: str = Field(..., description="Printable arithmetic for the member")


class ReconciliationReport(BaseModel):
    """Everything one reconcile() call produced.

    snapshot and comparison are None when a strict run rejected the
    rank/tenure combination.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    month: int
    year: int
    rank_check: RankCheck
    snapshot: Optional[ExpectedSnapshot] = None
    comparison: Optional[ComparisonResult] = None
    statement_balance: Optional[StatementBalance] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def blocked(self) -> bool:
        """True if the rank check stopped snapshot generation."""
        return self.snapshot is None
