"""Tests for the rank / years-of-service sanity check."""

import pytest

from lesaudit.sdk.paygrade import is_enlisted, is_officer, validate_rank_yos
from lesaudit.sdk.schemas import normalize_paygrade


class TestNormalizePaygrade:

    @pytest.mark.parametrize("raw,expected", [
        ("E5", "E05"),
        ("e-5", "E05"),
        ("E05", "E05"),
        ("O-3", "O03"),
        ("w2", "W02"),
        ("O10", "O10"),
    ])
    def test_normalizes_common_forms(self, raw, expected):
        assert normalize_paygrade(raw) == expected

    def test_unrecognized_value_is_uppercased_not_rejected(self):
        assert normalize_paygrade(" sgt ") == "SGT"


class TestGradeFamilies:

    def test_warrant_officers_count_as_officers(self):
        assert is_officer("W02")
        assert not is_enlisted("W02")

    def test_enlisted(self):
        assert is_enlisted("E7")
        assert not is_officer("E7")


class TestValidateRankYos:

    def test_typical_combinations_pass(self):
        for grade, yos in [("E05", 6), ("E01", 0), ("O03", 4), ("W02", 10), ("E09", 22)]:
            check = validate_rank_yos(grade, yos)
            assert check.valid, f"{grade}/{yos}: {check.explanation}"
            assert check.explanation is None

    def test_junior_enlisted_capped_at_eight_years(self):
        assert validate_rank_yos("E04", 8).valid
        check = validate_rank_yos("E01", 20)
        assert not check.valid
        assert "E01" in check.explanation
        assert "20 years" in check.explanation

    def test_senior_enlisted_floor(self):
        assert not validate_rank_yos("E08", 11).valid
        assert validate_rank_yos("E08", 12).valid
        assert not validate_rank_yos("E09", 14).valid
        assert validate_rank_yos("E09", 15).valid

    def test_flag_officers_need_eighteen_years(self):
        check = validate_rank_yos("O10", 2)
        assert not check.valid
        assert "flag officer" in check.explanation
        assert validate_rank_yos("O07", 18).valid

    def test_junior_officers_capped_at_six_years(self):
        assert validate_rank_yos("O02", 6).valid
        assert not validate_rank_yos("O01", 7).valid

    def test_unknown_grade_rejected(self):
        check = validate_rank_yos("X07", 3)
        assert not check.valid
        assert "Unrecognized pay grade" in check.explanation

    def test_negative_yos_rejected(self):
        check = validate_rank_yos("E05", -1)
        assert not check.valid
        assert "negative" in check.explanation

    def test_yos_beyond_pay_table_rejected(self):
        assert not validate_rank_yos("O06", 41).valid

    def test_returns_normalized_grade(self):
        check = validate_rank_yos("e-5", 6)
        assert check.paygrade == "E05"
        assert check.years_of_service == 6
