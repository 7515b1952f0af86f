"""Tests for settings, profile and threshold configuration."""

import json

import pytest

from lesaudit.sdk.config import (
    ConfigNotFoundError,
    ProfileInvalidError,
    ProfileNotFoundError,
    get_config_dir,
    get_profile_path,
    get_rates_path,
    get_setting,
    load_profile,
    load_settings,
    load_thresholds,
    save_profile,
    set_setting,
)
from lesaudit.sdk.schemas import MemberProfile


class TestConfigDir:

    def test_env_var_wins(self, isolated_env):
        assert get_config_dir() == isolated_env["config_dir"]

    def test_xdg_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LES_AUDIT_CONFIG_PATH", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_dir() == tmp_path / "les-audit"


class TestSettings:

    def test_missing_file_is_empty(self, isolated_env):
        assert load_settings() == {}
        assert get_setting("rates_dir", "fallback") == "fallback"

    def test_set_and_get(self, isolated_env):
        path = set_setting("strict_rank_check", True)
        assert path == isolated_env["settings_file"]
        assert json.loads(path.read_text()) == {"strict_rank_check": True}
        assert get_setting("strict_rank_check") is True

    def test_rates_path_default_and_setting(self, isolated_env, tmp_path):
        assert get_rates_path() == isolated_env["data_dir"] / "les-audit" / "rates"
        set_setting("rates_dir", str(tmp_path / "my-rates"))
        assert get_rates_path() == tmp_path / "my-rates"

    def test_configured_rates_dir_must_exist_when_required(self, isolated_env, tmp_path):
        set_setting("rates_dir", str(tmp_path / "missing-rates"))
        with pytest.raises(ConfigNotFoundError, match="Rates directory not found"):
            get_rates_path(require_exists=True)

        (tmp_path / "missing-rates").mkdir()
        assert get_rates_path(require_exists=True) == tmp_path / "missing-rates"

    def test_default_rates_dir_need_not_exist(self, isolated_env):
        assert not get_rates_path().exists()
        assert get_rates_path(require_exists=True) == get_rates_path()


class TestProfile:

    def test_no_profile(self, isolated_env):
        with pytest.raises(ProfileNotFoundError, match="No profile found"):
            load_profile()

    def test_load_from_config_dir(self, isolated_env, profile_data, yaml_file):
        yaml_file(isolated_env["config_dir"] / "profile.yaml", profile_data)
        profile = load_profile()
        assert profile.paygrade == "E05"
        assert profile.location_key == "WA408"

    def test_profile_setting_overrides_location(self, isolated_env, profile_data, tmp_path, yaml_file):
        custom = yaml_file(tmp_path / "elsewhere" / "me.yaml", profile_data)
        set_setting("profile", str(custom))
        assert get_profile_path() == custom
        assert load_profile().years_of_service == 6

    def test_configured_profile_missing(self, isolated_env, tmp_path):
        set_setting("profile", str(tmp_path / "gone.yaml"))
        with pytest.raises(ProfileNotFoundError, match="configured path"):
            load_profile()

    def test_unknown_field_rejected(self, isolated_env, profile_data, yaml_file):
        profile_data["pay_grade"] = "E05"
        path = yaml_file(isolated_env["config_dir"] / "profile.yaml", profile_data)
        with pytest.raises(ProfileInvalidError, match="pay_grade"):
            load_profile(path)

    def test_malformed_yaml_rejected(self, isolated_env):
        path = isolated_env["config_dir"] / "profile.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("paygrade: E05\nyears_of_service: [6\n")
        with pytest.raises(ProfileInvalidError, match="not valid YAML"):
            load_profile()

    def test_save_and_reload(self, isolated_env, profile):
        path = save_profile(profile)
        assert path == isolated_env["config_dir"] / "profile.yaml"
        assert load_profile(path) == profile
        # Defaults are not written out
        assert "dental_plan" not in path.read_text()


class TestThresholds:

    def test_defaults(self, isolated_env):
        thresholds = load_thresholds()
        assert thresholds.bah == 5000
        assert thresholds.federal_tax == 15000

    def test_settings_then_overrides(self, isolated_env):
        set_setting("thresholds", {"bah": 2500, "sgli": 50})
        thresholds = load_thresholds({"bah": 1000})
        assert thresholds.bah == 1000
        assert thresholds.sgli == 50
        assert thresholds.bas == 1000

    def test_unknown_category(self, isolated_env):
        with pytest.raises(ValueError, match="Invalid thresholds"):
            load_thresholds({"housing": 100})

    def test_negative_value(self, isolated_env):
        with pytest.raises(ValueError):
            load_thresholds({"bah": -1})


class TestProfileSchema:

    def test_normalizes_keys(self, profile_data):
        profile_data.update(location_key=" wa408 ", state_of_residence="tx")
        profile = MemberProfile(**profile_data)
        assert profile.location_key == "WA408"
        assert profile.state_of_residence == "TX"

    def test_tsp_rate_bounds(self, profile_data):
        profile_data["tsp_contribution_rate"] = 1.5
        with pytest.raises(ValueError):
            MemberProfile(**profile_data)
