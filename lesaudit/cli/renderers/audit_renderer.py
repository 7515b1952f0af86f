"""Rich renderer for expected pay snapshots and LES audits.

Transforms SDK models into formatted Rich tables.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from lesaudit.sdk import ExpectedSnapshot, RankCheck, ReconciliationReport
from lesaudit.sdk.schemas import ComparisonResult

SEVERITY_STYLES = {"red": "red", "yellow": "yellow", "green": "green"}


def render_rank_check(console: Console, check: RankCheck) -> None:
    if check.valid:
        console.print(
            f"[green]{check.paygrade} with {check.years_of_service} YOS is plausible.[/green]"
        )
        return
    console.print(Panel(
        f"[red]{check.explanation}[/red]",
        title=f"Implausible: {check.paygrade} / {check.years_of_service} YOS",
        border_style="red",
    ))


def render_snapshot(console: Console, snapshot: ExpectedSnapshot) -> None:
    """Render an expected pay snapshot as a table plus unavailable notes."""
    table = Table(
        title=f"Expected Pay: {snapshot.year}-{snapshot.month:02d} "
              f"({snapshot.paygrade}, {snapshot.years_of_service} YOS)",
        box=box.ROUNDED,
    )
    table.add_column("", style="bold", min_width=22)
    table.add_column("Monthly", justify="right", min_width=12)

    table.add_row("[bold]ALLOWANCES[/bold]", "")
    table.add_row("  Base Pay", _fmt(snapshot.base_pay_cents))
    table.add_row("  BAH", _fmt(snapshot.bah_cents))
    table.add_row("  BAS", _fmt(snapshot.bas_cents))
    table.add_row("  COLA", _fmt(snapshot.cola_cents))
    for sp in snapshot.special_pays:
        table.add_row(f"  {sp.code}", _fmt(sp.cents))
    table.add_row("  [dim]Taxable Gross[/dim]", f"[dim]{_fmt(snapshot.taxable_gross_cents)}[/dim]")
    table.add_row("  [dim]Total Pay[/dim]", f"[dim]{_fmt(snapshot.total_pay_cents)}[/dim]")
    table.add_row("", "")

    table.add_row("[bold]DEDUCTIONS[/bold]", "")
    table.add_row("  TSP", _fmt(snapshot.tsp_cents))
    table.add_row("  SGLI", _fmt(snapshot.sgli_cents))
    table.add_row("  Dental", _fmt(snapshot.dental_cents))
    table.add_row("", "")

    confidence = f" ({snapshot.tax_confidence} confidence)" if snapshot.tax_confidence else ""
    table.add_row(f"[bold]TAXES[/bold]{confidence}", "")
    table.add_row("  Social Security", _fmt(snapshot.fica_cents))
    table.add_row("  Medicare", _fmt(snapshot.medicare_cents))
    table.add_row("  Federal Income Tax", _fmt(snapshot.federal_tax_cents))
    table.add_row("  State Income Tax", _fmt(snapshot.state_tax_cents))
    table.add_row("", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(snapshot.net_pay_cents)}[/bold green]",
    )
    console.print(table)

    if snapshot.unavailable:
        notes = "\n".join(f"{k}: {v}" for k, v in snapshot.unavailable.items())
        console.print(Panel(f"[yellow]{notes}[/yellow]", title="Not computed", border_style="yellow"))


def render_comparison(console: Console, result: ComparisonResult) -> None:
    """Render flags (worst first as emitted) and bucket totals."""
    if not result.flags:
        console.print("[dim]No line items to compare.[/dim]")
    else:
        flags = Table(title="Findings", box=box.ROUNDED, show_lines=True)
        flags.add_column("Flag", style="bold")
        flags.add_column("Delta", justify="right")
        flags.add_column("Finding")
        for flag in result.flags:
            style = SEVERITY_STYLES[flag.severity]
            finding = f"{flag.message}\n[dim]{flag.suggestion}[/dim]"
            if flag.ref_url:
                finding += f"\n[dim]{flag.ref_url}[/dim]"
            flags.add_row(f"[{style}]{flag.code}[/{style}]", _fmt_delta(flag.delta_cents), finding)
        console.print(flags)

    t = result.totals
    totals = Table(title="Totals", box=box.ROUNDED)
    totals.add_column("Bucket", style="bold")
    totals.add_column("Actual", justify="right")
    totals.add_column("Expected", justify="right")
    totals.add_column("Delta", justify="right")
    totals.add_row("Allowances", _fmt(t.actual_allowances_cents), _fmt(t.expected_allowances_cents),
                   _fmt_delta(t.allowances_delta_cents))
    totals.add_row("Deductions", _fmt(t.actual_deductions_cents), _fmt(t.expected_deductions_cents),
                   _fmt_delta(t.deductions_delta_cents))
    totals.add_row("Taxes", _fmt(t.actual_taxes_cents), _fmt(t.expected_taxes_cents),
                   _fmt_delta(t.taxes_delta_cents))
    totals.add_row("Net Pay", _fmt(t.actual_net_pay_cents), _fmt(t.expected_net_pay_cents),
                   _fmt_delta(t.net_pay_delta_cents))
    console.print(totals)


def render_report(console: Console, report: ReconciliationReport) -> None:
    """Render a full reconciliation report."""
    for warning in report.warnings:
        console.print(Panel(f"[yellow]{warning}[/yellow]", title="Note", border_style="yellow"))

    if report.blocked:
        render_rank_check(console, report.rank_check)
        console.print("[red]Audit blocked: fix the pay grade or years of service and retry.[/red]")
        return

    render_comparison(console, report.comparison)

    if report.statement_balance is not None:
        balance = report.statement_balance
        if balance.balanced is None:
            border = "dim"
        else:
            border = "green" if balance.balanced else "red"
        console.print(Panel(balance.math_proof, title="Statement Math", border_style=border))


def _fmt(cents: Optional[int]) -> str:
    """Format cents as currency; None is shown as a dash."""
    if cents is None:
        return "-"
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


def _fmt_delta(cents: Optional[int]) -> str:
    if cents is None:
        return ""
    if cents == 0:
        return "$0.00"
    return f"{'+' if cents > 0 else '-'}${abs(cents) / 100:,.2f}"
