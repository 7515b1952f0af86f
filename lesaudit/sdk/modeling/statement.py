"""Statement math check.

Verifies that a statement adds up on its own terms, independent of any
expected pay model:

    net = allowances - taxes - deductions - allotments - debts + adjustments

The result carries a printable math proof so the member can follow the
arithmetic line by line.
"""

from typing import Iterable, Optional

from ..schemas import LineItem
from .flags import dollars
from .schemas import StatementBalance

BALANCE_TOLERANCE_CENTS = 100

NET_PAY_CODE = "NET_PAY"


def balance_statement(
    line_items: Iterable[LineItem],
    net_pay_cents: Optional[int] = None,
) -> StatementBalance:
    """Check a statement's sections against its net pay.

    Args:
        line_items: Parsed LES rows
        net_pay_cents: Stated net pay; defaults to the sum of NET_PAY rows

    Returns:
        StatementBalance. balanced is None when there is no stated net pay.
    """
    sections = {
        "ALLOWANCE": 0, "TAX": 0, "DEDUCTION": 0, "ALLOTMENT": 0, "DEBT": 0, "ADJUSTMENT": 0,
    }
    stated_rows = []
    for item in line_items:
        if item.code == NET_PAY_CODE:
            stated_rows.append(item.amount_cents)
            continue
        sections[item.section] += item.amount_cents

    if net_pay_cents is None and stated_rows:
        net_pay_cents = sum(stated_rows)

    computed = (
        sections["ALLOWANCE"]
        - sections["TAX"]
        - sections["DEDUCTION"]
        - sections["ALLOTMENT"]
        - sections["DEBT"]
        + sections["ADJUSTMENT"]
    )

    difference = None
    balanced = None
    if net_pay_cents is not None:
        difference = net_pay_cents - computed
        balanced = abs(difference) <= BALANCE_TOLERANCE_CENTS

    lines = [
        f"  Allowances   {dollars(sections['ALLOWANCE']):>14}",
        f"- Taxes        {dollars(sections['TAX']):>14}",
        f"- Deductions   {dollars(sections['DEDUCTION']):>14}",
        f"- Allotments   {dollars(sections['ALLOTMENT']):>14}",
        f"- Debts        {dollars(sections['DEBT']):>14}",
        f"{'+' if sections['ADJUSTMENT'] >= 0 else '-'} Adjustments  "
        f"{dollars(sections['ADJUSTMENT']):>14}",
        f"= Computed net {'-' if computed < 0 else ' '}{dollars(computed):>13}",
    ]
    if net_pay_cents is not None:
        lines.append(f"  Stated net   {dollars(net_pay_cents):>14}")
        status = "balanced" if balanced else "does not balance"
        lines.append(f"  Difference   {dollars(difference):>14} ({status})")
    else:
        lines.append("  Stated net   not on statement")

    return StatementBalance(
        allowances_cents=sections["ALLOWANCE"],
        taxes_cents=sections["TAX"],
        deductions_cents=sections["DEDUCTION"],
        allotments_cents=sections["ALLOTMENT"],
        debts_cents=sections["DEBT"],
        adjustments_cents=sections["ADJUSTMENT"],
        computed_net_cents=computed,
        stated_net_cents=net_pay_cents,
        difference_cents=difference,
        balanced=balanced,
        math_proof="\n".join(lines),
    )
