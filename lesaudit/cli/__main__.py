"""LES Audit CLI - Command-line interface for military pay reconciliation."""

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console

from lesaudit import __version__
from lesaudit.sdk import (
    LesAuditError,
    YamlRateTables,
    build_expected_snapshot,
    get_rates_path,
    get_setting,
    load_profile,
    load_statement,
    load_thresholds,
    reconcile,
    validate_rank_yos,
)

from .renderers.audit_renderer import render_rank_check, render_report, render_snapshot
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="les-audit")
def cli():
    """LES Audit - Check a Leave and Earnings Statement against expected pay.

    Configuration is loaded from (in order):

    \b
    1. LES_AUDIT_CONFIG_PATH environment variable
    2. ~/.config/les-audit/ (XDG default)

    Rate tables are read from the 'rates_dir' setting or
    ~/.local/share/les-audit/rates/.
    """
    pass


cli.add_command(settings_group)


def _load_inputs(profile_path, rates_dir):
    """Profile and rate tables for a command, as click errors on failure."""
    try:
        profile = load_profile(Path(profile_path) if profile_path else None)
        rates_path = Path(rates_dir) if rates_dir else get_rates_path(require_exists=True)
    except LesAuditError as e:
        raise click.ClickException(str(e))
    rates = YamlRateTables(rates_path)
    return profile, rates


def _parse_threshold_overrides(values) -> dict:
    overrides = {}
    for value in values:
        name, sep, cents = value.partition("=")
        if not sep or not cents.strip().lstrip("-").isdigit():
            raise click.BadParameter(
                f"'{value}' is not CATEGORY=CENTS (e.g. bah=2500)", param_hint="--threshold"
            )
        overrides[name.strip().lower()] = int(cents)
    return overrides


@cli.command("check-rank")
@click.argument("paygrade")
@click.argument("yos", type=int)
def check_rank(paygrade, yos):
    """Check that PAYGRADE and YOS (years of service) are plausible together.

    Exits with status 1 when the combination is rejected.

    \b
    Examples:
        les-audit check-rank E5 6
        les-audit check-rank O-3 4
    """
    check = validate_rank_yos(paygrade, yos)
    render_rank_check(Console(), check)
    if not check.valid:
        raise SystemExit(1)


@cli.command("expected")
@click.option("--month", type=click.IntRange(1, 12), required=True, help="Month (1-12)")
@click.option("--year", type=int, required=True, help="Year (e.g., 2025)")
@click.option("--profile", "profile_path", type=click.Path(exists=True, dir_okay=False),
              help="Profile YAML (default: configured profile.yaml)")
@click.option("--rates", "rates_dir", type=click.Path(file_okay=False),
              help="Rate tables directory (default: rates_dir setting)")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def expected(month, year, profile_path, rates_dir, output_format):
    """Show expected pay for a month.

    Categories that the rate tables cannot support are left blank and listed
    with the reason; they are never guessed.

    \b
    Examples:
        les-audit expected --month 6 --year 2025
        les-audit expected --month 6 --year 2025 --format json
    """
    profile, rates = _load_inputs(profile_path, rates_dir)

    check = validate_rank_yos(profile.paygrade, profile.years_of_service)
    try:
        snapshot = build_expected_snapshot(profile, month, year, rates)
    except LesAuditError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        output = snapshot.model_dump(mode="json")
        output["rank_check"] = {"valid": check.valid, "explanation": check.explanation}
        click.echo(json.dumps(output, indent=2))
        return

    console = Console(width=120)
    if not check.valid:
        render_rank_check(console, check)
    render_snapshot(console, snapshot)


@cli.command("audit")
@click.argument("statement", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", type=click.IntRange(1, 12), help="Month (default: from statement file)")
@click.option("--year", type=int, help="Year (default: from statement file)")
@click.option("--profile", "profile_path", type=click.Path(exists=True, dir_okay=False),
              help="Profile YAML (default: configured profile.yaml)")
@click.option("--rates", "rates_dir", type=click.Path(file_okay=False),
              help="Rate tables directory (default: rates_dir setting)")
@click.option("--threshold", "threshold_values", multiple=True, metavar="CAT=CENTS",
              help="Override a comparison threshold (repeatable), e.g. bah=2500")
@click.option("--strict/--no-strict", default=None,
              help="Block the audit if rank/YOS is implausible (default: strict_rank_check setting)")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format (default: table)")
def audit(statement, month, year, profile_path, rates_dir, threshold_values, strict, output_format):
    """Audit a parsed LES (STATEMENT YAML) against expected pay.

    STATEMENT is a YAML list of line items (section, code, amount_cents) or
    a mapping with 'month', 'year' and 'line_items'.

    \b
    Examples:
        les-audit audit june.yaml --month 6 --year 2025
        les-audit audit june.yaml --threshold bah=2500 --format json
    """
    try:
        parsed = load_statement(statement)
    except ValueError as e:
        raise click.ClickException(str(e))

    month = month or parsed["month"]
    year = year or parsed["year"]
    if not month or not year:
        raise click.UsageError("--month and --year are required when the statement omits them")

    try:
        thresholds = load_thresholds(_parse_threshold_overrides(threshold_values))
    except ValueError as e:
        raise click.ClickException(str(e))

    if strict is None:
        strict = bool(get_setting("strict_rank_check", False))

    profile, rates = _load_inputs(profile_path, rates_dir)

    try:
        report = reconcile(
            profile, month, year, parsed["line_items"], rates,
            thresholds=thresholds, strict=strict,
        )
    except LesAuditError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    else:
        render_report(Console(width=120), report)

    if report.blocked:
        raise SystemExit(1)


def main():
    """Entry point for the CLI."""
    # Configure logging based on LOG_LEVEL environment variable
    log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    cli()


if __name__ == "__main__":
    main()
