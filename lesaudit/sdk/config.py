"""Configuration management for LES Audit.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - rates_dir: directory holding the rate tables
   - thresholds: per-category comparison tolerances in cents
   - strict_rank_check: block audits when the rank/YOS check fails
   - profile: path to profile.yaml (optional, if not colocated)

2. profile.yaml - The member profile (pay grade, location, elections)

Config directory resolution:
1. LES_AUDIT_CONFIG_PATH environment variable (if set)
2. ~/.config/les-audit/ (XDG_CONFIG_HOME fallback)

Profile resolution:
1. settings.json "profile" key (if set)
2. profile.yaml in the config directory

Rate tables default to XDG_DATA_HOME/les-audit/rates/.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .errors import LesAuditError
from .schemas import ComparisonThresholds, MemberProfile

logger = logging.getLogger(__name__)


APP_NAME = "les-audit"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"
RATES_DIRNAME = "rates"

KNOWN_SETTINGS = ("rates_dir", "thresholds", "strict_rank_check", "profile")


class ConfigNotFoundError(LesAuditError):
    """Raised when a configured location does not exist."""
    pass


class ProfileNotFoundError(LesAuditError):
    """Raised when no profile is found."""
    pass


class ProfileInvalidError(LesAuditError):
    """Raised when profile.yaml does not validate."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. LES_AUDIT_CONFIG_PATH environment variable
    2. ~/.config/les-audit/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("LES_AUDIT_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Args:
        key: Setting key
        value: Value to set

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Args:
        require_exists: If True, raises ProfileNotFoundError if not found

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = load_settings().get("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Update with: les-audit settings set profile /path/to/profile.yaml"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found. Checked:\n"
            f"  1. settings.json 'profile' key (not set)\n"
            f"  2. {profile_path} (not found)\n\n"
            f"Create {profile_path} or pass --profile /path/to/profile.yaml"
        )

    return profile_path


def load_profile(path: Optional[Path] = None) -> MemberProfile:
    """Load and validate the member profile.

    Args:
        path: Explicit profile path (uses configured profile if not specified)

    Returns:
        Validated MemberProfile

    Raises:
        ProfileNotFoundError: If the profile file does not exist
        ProfileInvalidError: If the file does not validate
    """
    if path is None:
        path = get_profile_path(require_exists=True)
    path = Path(path)
    if not path.exists():
        raise ProfileNotFoundError(f"Profile not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ProfileInvalidError(f"Profile {path} is not valid YAML:\n{e}") from e

    try:
        return MemberProfile.model_validate(data)
    except ValidationError as e:
        raise ProfileInvalidError(f"Profile {path} is invalid:\n{e}") from e


def save_profile(profile: MemberProfile, path: Optional[Path] = None) -> Path:
    """Save the member profile to profile.yaml.

    Returns:
        Path to the saved profile file
    """
    if path is None:
        path = get_profile_path(require_exists=False)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(
            profile.model_dump(mode="json", exclude_defaults=True),
            f,
            default_flow_style=False,
            sort_keys=False,
        )

    return path


def get_rates_path(require_exists: bool = False) -> Path:
    """Rate tables directory: rates_dir setting, else XDG_DATA_HOME/les-audit/rates.

    Args:
        require_exists: If True, a configured rates_dir must exist

    Raises:
        ConfigNotFoundError: If require_exists=True and the configured rates_dir is missing
    """
    rates_dir = get_setting("rates_dir")
    if rates_dir:
        rates_path = Path(rates_dir).expanduser()
        if require_exists and not rates_path.is_dir():
            raise ConfigNotFoundError(
                f"Rates directory not found at configured path: {rates_path}\n\n"
                f"Update with: les-audit settings set rates_dir /path/to/rates"
            )
        return rates_path

    xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    return Path(xdg_data_home) / APP_NAME / RATES_DIRNAME


def load_thresholds(overrides: Optional[Dict[str, int]] = None) -> ComparisonThresholds:
    """Comparison thresholds: defaults <- settings.json <- explicit overrides.

    Raises:
        ValueError: If a category is unknown or a value is not a non-negative integer
    """
    merged: Dict[str, Any] = {}
    merged.update(get_setting("thresholds") or {})
    merged.update(overrides or {})
    if merged:
        logger.debug(f"threshold overrides: {merged}")
    try:
        return ComparisonThresholds.model_validate(merged)
    except ValidationError as e:
        raise ValueError(f"Invalid thresholds: {e}") from e
