"""Shared CLI helpers."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import AggregateReport

console = Console()

# Failed files listed before the output is truncated
MAX_FAILURES_SHOWN = 20


def summary_table(report: AggregateReport) -> Table:
    """Run summary: discovered/analyzed/skipped/failed file counts."""
    counts = report.counts
    table = Table(title="Run summary", show_header=True, header_style="bold cyan")
    table.add_column("Files", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("discovered", str(counts.discovered))
    table.add_row("analyzed", f"[green]{counts.analyzed}[/green]")
    table.add_row("skipped", f"[dim]{counts.skipped}[/dim]")
    table.add_row("failed", f"[red]{counts.failed}[/red]" if counts.failed else "0")
    return table


def print_failures(report: AggregateReport) -> None:
    failures = report.failures
    if not failures:
        return
    console.print(f"\n[bold red]Failed files ({len(failures)}):[/bold red]")
    for failure in failures[:MAX_FAILURES_SHOWN]:
        console.print(
            f"  [red]x[/red] {escape(failure.path)}: "
            f"[dim]{failure.error_kind}[/dim] {escape(failure.reason)}",
            highlight=False,
        )
    if len(failures) > MAX_FAILURES_SHOWN:
        console.print(f"  [dim]... and {len(failures) - MAX_FAILURES_SHOWN} more[/dim]")
