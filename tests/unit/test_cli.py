"""Tests for the les-audit CLI."""

import json

import pytest
from click.testing import CliRunner

from lesaudit.cli.__main__ import cli


MATCHING_STATEMENT = {
    "month": 6,
    "year": 2025,
    "line_items": [
        {"section": "ALLOWANCE", "code": "BASE PAY", "amount_cents": 380000},
        {"section": "ALLOWANCE", "code": "BAH W/DEP", "amount_cents": 270000},
        {"section": "ALLOWANCE", "code": "BAS", "amount_cents": 46025},
        {"section": "DEDUCTION", "code": "TSP", "amount_cents": 34801},
        {"section": "DEDUCTION", "code": "SGLI", "amount_cents": 2600},
        {"section": "TAX", "code": "SOCIAL SECURITY", "amount_cents": 23560},
        {"section": "TAX", "code": "MEDICARE", "amount_cents": 5510},
        {"section": "TAX", "code": "FED TAX WITHHELD", "amount_cents": 29017},
        {"code": "NET PAY", "amount_cents": 600537},
    ],
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def profile_file(tmp_path, profile_data, yaml_file):
    return yaml_file(tmp_path / "profile.yaml", profile_data)


@pytest.fixture
def statement_file(tmp_path, yaml_file):
    return yaml_file(tmp_path / "june.yaml", MATCHING_STATEMENT)


class TestCheckRank:

    def test_plausible(self, runner):
        result = runner.invoke(cli, ["check-rank", "E5", "6"])
        assert result.exit_code == 0
        assert "plausible" in result.stdout

    def test_implausible_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["check-rank", "E1", "20"])
        assert result.exit_code == 1
        assert "highly unusual" in result.stdout


class TestExpected:

    def test_json(self, runner, isolated_env, profile_file, rates_dir, expected_june):
        result = runner.invoke(cli, [
            "expected", "--month", "6", "--year", "2025",
            "--profile", str(profile_file), "--rates", str(rates_dir), "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        for field, cents in expected_june.items():
            assert data[field] == cents, field
        assert data["rank_check"] == {"valid": True, "explanation": None}

    def test_table(self, runner, isolated_env, profile_file, rates_dir):
        result = runner.invoke(cli, [
            "expected", "--month", "6", "--year", "2025",
            "--profile", str(profile_file), "--rates", str(rates_dir),
        ])
        assert result.exit_code == 0, result.output
        assert "NET PAY" in result.stdout
        assert "$6,005.37" in result.stdout

    def test_rates_dir_from_settings(self, runner, isolated_env, profile_file, rates_dir):
        runner.invoke(cli, ["settings", "set", "rates_dir", str(rates_dir)])
        result = runner.invoke(cli, [
            "expected", "--month", "6", "--year", "2025",
            "--profile", str(profile_file), "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["bah_cents"] == 270000

    def test_missing_configured_rates_dir(self, runner, isolated_env, profile_file, tmp_path):
        runner.invoke(cli, ["settings", "set", "rates_dir", str(tmp_path / "no-rates")])
        result = runner.invoke(cli, [
            "expected", "--month", "6", "--year", "2025", "--profile", str(profile_file),
        ])
        assert result.exit_code == 1
        assert "Rates directory not found" in result.output

    def test_malformed_profile(self, runner, isolated_env, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("paygrade: E05\nyears_of_service: [6\n")
        result = runner.invoke(cli, [
            "expected", "--month", "6", "--year", "2025", "--profile", str(profile),
        ])
        assert result.exit_code == 1
        assert "not valid YAML" in result.output

    def test_no_profile(self, runner, isolated_env):
        result = runner.invoke(cli, ["expected", "--month", "6", "--year", "2025"])
        assert result.exit_code == 1
        assert "No profile found" in result.output

    def test_month_range(self, runner, isolated_env, profile_file):
        result = runner.invoke(cli, [
            "expected", "--month", "13", "--year", "2025", "--profile", str(profile_file),
        ])
        assert result.exit_code == 2


class TestAudit:

    def test_matching_statement_json(self, runner, isolated_env, profile_file, rates_dir, statement_file):
        result = runner.invoke(cli, [
            "audit", str(statement_file),
            "--profile", str(profile_file), "--rates", str(rates_dir), "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        flags = [f["code"] for f in report["comparison"]["flags"]]
        assert flags[0] == "BASE_PAY_VERIFIED"
        assert flags[-1] == "NET_PAY_VERIFIED"
        assert all(f["severity"] == "green" for f in report["comparison"]["flags"])
        assert report["statement_balance"]["balanced"] is True
        assert report["warnings"] == []

    def test_table_output(self, runner, isolated_env, profile_file, rates_dir, statement_file):
        result = runner.invoke(cli, [
            "audit", str(statement_file), "--profile", str(profile_file), "--rates", str(rates_dir),
        ])
        assert result.exit_code == 0, result.output
        assert "Findings" in result.stdout
        assert "Statement Math" in result.stdout

    def test_threshold_override(self, runner, isolated_env, profile_file, rates_dir, tmp_path, yaml_file):
        statement = json.loads(json.dumps(MATCHING_STATEMENT))
        statement["line_items"][1]["amount_cents"] = 250000
        path = yaml_file(tmp_path / "short.yaml", statement)

        args = ["audit", str(path), "--profile", str(profile_file), "--rates", str(rates_dir),
                "--format", "json"]
        default = json.loads(runner.invoke(cli, args).stdout)
        relaxed = json.loads(runner.invoke(cli, args + ["--threshold", "bah=20000"]).stdout)

        def bah(report):
            return next(f for f in report["comparison"]["flags"] if f["category"] == "BAH")

        assert bah(default)["code"] == "BAH_MISMATCH"
        assert bah(default)["delta_cents"] == 20000
        assert bah(relaxed)["code"] == "BAH_VERIFIED"

    def test_bad_threshold_syntax(self, runner, isolated_env, profile_file, statement_file):
        result = runner.invoke(cli, [
            "audit", str(statement_file), "--profile", str(profile_file), "--threshold", "bah",
        ])
        assert result.exit_code == 2
        assert "CATEGORY=CENTS" in result.output

    def test_unknown_threshold_category(self, runner, isolated_env, profile_file, statement_file):
        result = runner.invoke(cli, [
            "audit", str(statement_file), "--profile", str(profile_file), "--threshold", "housing=5",
        ])
        assert result.exit_code == 1
        assert "Invalid thresholds" in result.output

    def test_statement_without_period(self, runner, isolated_env, profile_file, tmp_path, yaml_file):
        path = yaml_file(tmp_path / "bare.yaml", MATCHING_STATEMENT["line_items"])
        result = runner.invoke(cli, ["audit", str(path), "--profile", str(profile_file)])
        assert result.exit_code == 2
        assert "--month and --year" in result.output

    def test_malformed_statement(self, runner, isolated_env, profile_file, rates_dir, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("month: 6\nline_items: [{code: BAH\n")
        result = runner.invoke(cli, [
            "audit", str(path), "--profile", str(profile_file), "--rates", str(rates_dir),
        ])
        assert result.exit_code == 1
        assert "Cannot parse" in result.output

    def test_strict_blocks_implausible_profile(self, runner, isolated_env, profile_data, rates_dir,
                                               statement_file, tmp_path, yaml_file):
        profile_data.update(paygrade="E1", years_of_service=20)
        profile = yaml_file(tmp_path / "bad-profile.yaml", profile_data)
        result = runner.invoke(cli, [
            "audit", str(statement_file), "--profile", str(profile), "--rates", str(rates_dir),
            "--strict", "--format", "json",
        ])
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["snapshot"] is None
        assert report["rank_check"]["valid"] is False

    def test_strict_from_settings(self, runner, isolated_env, profile_data, rates_dir,
                                  statement_file, tmp_path, yaml_file):
        profile_data.update(paygrade="E1", years_of_service=20)
        profile = yaml_file(tmp_path / "bad-profile.yaml", profile_data)
        runner.invoke(cli, ["settings", "set", "strict_rank_check", "true"])
        result = runner.invoke(cli, [
            "audit", str(statement_file), "--profile", str(profile), "--rates", str(rates_dir),
        ])
        assert result.exit_code == 1
        assert "Audit blocked" in result.stdout


class TestSettingsCommands:

    def test_show_empty(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "show"])
        assert result.exit_code == 0
        assert "No settings configured" in result.stdout

    def test_set_parses_json(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "thresholds", '{"bah": 2500}'])
        assert result.exit_code == 0, result.output
        saved = json.loads(isolated_env["settings_file"].read_text())
        assert saved == {"thresholds": {"bah": 2500}}

    def test_set_unknown_key(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "colour", "blue"])
        assert result.exit_code == 2
        assert not isolated_env["settings_file"].exists()

    def test_set_invalid_threshold(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "thresholds", '{"bah": -5}'])
        assert result.exit_code == 1
        assert not isolated_env["settings_file"].exists()

    def test_strict_must_be_bool(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "strict_rank_check", "yes"])
        assert result.exit_code == 2

    def test_thresholds_listing(self, runner, isolated_env):
        runner.invoke(cli, ["settings", "set", "thresholds", '{"bah": 2500}'])
        result = runner.invoke(cli, ["settings", "thresholds"])
        assert result.exit_code == 0
        assert "bah: 2500 ($25.00)" in result.stdout
        assert "base_pay: 5000 ($50.00)" in result.stdout
