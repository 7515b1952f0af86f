"""Settings CLI commands for LES Audit.

Manages settings.json - rates directory, thresholds, strict mode, profile path.
"""

import json

import click

from lesaudit.sdk import (
    get_rates_path,
    get_settings_path,
    load_settings,
    load_thresholds,
    set_setting,
)
from lesaudit.sdk.config import KNOWN_SETTINGS


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - rates_dir: directory holding the rate tables
    - thresholds: per-category tolerances in cents (JSON object)
    - strict_rank_check: true/false, block audits on implausible rank/YOS
    - profile: path to profile.yaml
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  rates_dir: {get_rates_path()}")


@settings.command("set")
@click.argument("key")
@click.argument("value")
def settings_set(key, value):
    """Set a setting.

    VALUE is parsed as JSON when possible, so booleans, numbers and objects
    keep their type.

    \b
    Examples:
        les-audit settings set rates_dir ~/les-rates
        les-audit settings set strict_rank_check true
        les-audit settings set thresholds '{"bah": 2500}'
    """
    if key not in KNOWN_SETTINGS:
        raise click.BadParameter(
            f"Unknown setting '{key}'. Choose from: {', '.join(KNOWN_SETTINGS)}",
            param_hint="KEY",
        )

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    if key == "thresholds":
        if not isinstance(parsed, dict):
            raise click.BadParameter("thresholds must be a JSON object", param_hint="VALUE")
        try:
            load_thresholds(parsed)
        except ValueError as e:
            raise click.ClickException(str(e))
    if key == "strict_rank_check" and not isinstance(parsed, bool):
        raise click.BadParameter("strict_rank_check must be true or false", param_hint="VALUE")

    path = set_setting(key, parsed)
    click.echo(f"Set {key}: {parsed}")
    click.echo(f"Saved to: {path}")


@settings.command("thresholds")
def settings_thresholds():
    """Show effective comparison thresholds (defaults merged with settings)."""
    try:
        thresholds = load_thresholds()
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo("Comparison thresholds:")
    for name, cents in thresholds.model_dump().items():
        click.echo(f"  {name}: {cents} (${cents / 100:,.2f})")
