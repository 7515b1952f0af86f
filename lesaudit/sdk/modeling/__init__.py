"""modeling - Expected pay and LES reconciliation.

Scope:
- Compute expected pay for a profile and month (expected.py)
- Compare actual LES line items against expected pay (compare.py)
- Check that a statement adds up on its own terms (statement.py)
- Run the whole audit for one LES (reconcile.py)

Reconciliation Philosophy:
    "Unknown" and "zero" are different states. A category the reference
    data cannot support is left out of the snapshot and never guessed; the
    comparison then reports an actual amount in that category as
    UNEXPECTED rather than as an error, since it usually points at a gap
    in the profile or the rate tables rather than at a pay error.

Constraints:
- Pure and synchronous; rate tables are the only external access
- Uses taxes/ for payroll tax math
- Never raises for missing data, only for invalid periods

Usage:
    from lesaudit.sdk.modeling import build_expected_snapshot, compare_to_expected

    snapshot = build_expected_snapshot(profile, 6, 2025, rates)
    result = compare_to_expected(line_items, snapshot)
"""

from .compare import compare_to_expected, compute_totals

from .expected import Lookup, build_expected_snapshot, last_day_of_month

from .reconcile import reconcile

from .schemas import ReconciliationReport, StatementBalance

from .statement import balance_statement

__all__ = [
    # Schemas
    "ReconciliationReport",
    "StatementBalance",
    # Expected pay
    "Lookup",
    "build_expected_snapshot",
    "last_day_of_month",
    # Comparison
    "compare_to_expected",
    "compute_totals",
    # Statement
    "balance_statement",
    # End to end
    "reconcile",
]
