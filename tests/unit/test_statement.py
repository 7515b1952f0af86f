"""Tests for the statement math check."""

from lesaudit.sdk.modeling import balance_statement
from lesaudit.sdk.schemas import LineItem


def item(section, code, cents):
    return LineItem(section=section, code=code, amount_cents=cents)


BALANCED = [
    item("ALLOWANCE", "BASE_PAY", 380000),
    item("ALLOWANCE", "BAH", 270000),
    item("ALLOWANCE", "BAS", 46025),
    item("TAX", "FICA", 23560),
    item("TAX", "MEDICARE", 5510),
    item("TAX", "FITW", 29017),
    item("DEDUCTION", "TSP", 34801),
    item("DEDUCTION", "SGLI", 2600),
    item("ADJUSTMENT", "NET_PAY", 600537),
]


class TestBalanceStatement:

    def test_balanced_statement(self):
        result = balance_statement(BALANCED)
        assert result.allowances_cents == 696025
        assert result.taxes_cents == 58087
        assert result.deductions_cents == 37401
        assert result.adjustments_cents == 0
        assert result.computed_net_cents == 600537
        assert result.stated_net_cents == 600537
        assert result.difference_cents == 0
        assert result.balanced is True
        assert "(balanced)" in result.math_proof

    def test_all_sections_participate(self):
        items = BALANCED[:-1] + [
            item("ALLOTMENT", "ALLOT", 50000),
            item("DEBT", "DEBT REPAY", 10000),
            item("ADJUSTMENT", "BAH RETRO", 20000),
            item("ADJUSTMENT", "NET_PAY", 560537),
        ]
        result = balance_statement(items)
        assert result.allotments_cents == 50000
        assert result.debts_cents == 10000
        assert result.adjustments_cents == 20000
        assert result.computed_net_cents == 560537
        assert result.balanced is True

    def test_unbalanced_statement(self):
        items = BALANCED[:-1] + [item("ADJUSTMENT", "NET_PAY", 590537)]
        result = balance_statement(items)
        assert result.difference_cents == -10000
        assert result.balanced is False
        assert "does not balance" in result.math_proof

    def test_one_dollar_tolerance(self):
        items = BALANCED[:-1] + [item("ADJUSTMENT", "NET_PAY", 600637)]
        assert balance_statement(items).balanced is True
        items = BALANCED[:-1] + [item("ADJUSTMENT", "NET_PAY", 600638)]
        assert balance_statement(items).balanced is False

    def test_no_stated_net_pay(self):
        result = balance_statement(BALANCED[:-1])
        assert result.stated_net_cents is None
        assert result.balanced is None
        assert "not on statement" in result.math_proof

    def test_explicit_net_pay_argument_wins(self):
        result = balance_statement(BALANCED[:-1], net_pay_cents=600537)
        assert result.balanced is True
