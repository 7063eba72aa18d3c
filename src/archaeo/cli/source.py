"""``archaeo source``: extract metrics from a source file or tree."""

from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
import typer
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from ..api import run
from ..config import FORMAT_ALIASES, load_config
from ..exceptions import ArchaeoError, NoFilesDiscoveredError
from ..logging_config import setup_logging, verbosity_from_flags
from . import app, version_callback
from ._common import console, print_failures, summary_table


@app.command()
def source(
    path: Path = typer.Option(
        ...,
        "-p",
        "--path",
        help="Source file or directory to analyze",
    ),
    output_path: Path = typer.Option(
        ...,
        "-o",
        "--output-path",
        help="Directory that receives the artifacts (created if missing)",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "-f",
        "--fmt",
        help="Output format: tabular (csv) or hierarchical (json)",
        click_type=click.Choice(sorted(FORMAT_ALIASES), case_sensitive=False),
    ),
    no_flatten: bool = typer.Option(
        False,
        "--no-flatten",
        help="Keep scope trees nested (implies hierarchical output)",
    ),
    extended: bool = typer.Option(
        False,
        "--extended",
        help="Add sum/average/min/max of function metrics to every scope",
    ),
    split: bool = typer.Option(
        False,
        "--split",
        help="Write one metrics artifact per analyzed file",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: CPU count, at most 8)",
        min=1,
        max=64,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
):
    """
    Extract complexity metrics from C/C++ sources.

    Exits 0 whenever artifacts were written, even if some files failed;
    failed files are listed in the artifacts and below the summary.

    [bold cyan]Examples:[/bold cyan]

      archaeo source -p src/ -o metrics/

      archaeo source -p src/ -o metrics/ -f json --extended

      archaeo source -p lib/foo.cpp -o out/ --split
    """
    log_path = str(log_file) if log_file else None
    logger = setup_logging(verbosity_from_flags(verbose, quiet), log_file=log_path)

    try:
        settings = load_config(
            config_file=config,
            output_format=fmt,
            flatten=False if no_flatten else None,
            extended=True if extended else None,
            split_per_file=True if split else None,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )
        # A configuration file or ARCHAEO_VERBOSITY may set the level
        if settings.verbosity != verbosity_from_flags(verbose, quiet):
            logger = setup_logging(settings.verbosity, log_file=log_path)

        if not settings.flatten and settings.output_format == "tabular":
            logger.warning("Tabular output requires flattening; writing hierarchical output")
            settings = replace(settings, output_format="hierarchical")

        show_progress = settings.verbosity != "quiet"
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
            MofNCompleteColumn(),
            console=console,
            transient=True,
            disable=not show_progress,
        ) as progress:
            task_id = progress.add_task("Discovering files...", total=None)

            def _on_discovered(descriptors):
                progress.update(task_id, description="Analyzing", total=len(descriptors))

            def _on_result(_result):
                progress.advance(task_id)

            outcome = run(
                path,
                output_path,
                config=settings,
                on_discovered=_on_discovered,
                on_result=_on_result,
            )

    except NoFilesDiscoveredError as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        raise typer.Exit(1)

    except ArchaeoError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        raise typer.Exit(130)

    report = outcome.report
    if settings.verbosity != "quiet":
        console.print(summary_table(report))
        print_failures(report)
        console.print(
            f"\n[green]Wrote {len(outcome.artifacts)} artifact(s) to[/green] "
            f"{escape(str(output_path))}"
        )
