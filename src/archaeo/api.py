"""Public API for archaeo.

``analyze()`` runs discovery, dispatch and aggregation and returns the
report; ``run()`` additionally serializes it into an output directory.

Example:
    >>> from archaeo import analyze, run
    >>>
    >>> report = analyze("src/")
    >>> report.counts.analyzed
    12
    >>>
    >>> from archaeo.config import load_config
    >>> outcome = run("src/", "out/", config=load_config(output_format="json"))
    >>> [p.name for p in outcome.artifacts]
    ['metrics.json']
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .config import AnalysisConfig
from .exceptions import NoFilesDiscoveredError
from .formatters import get_formatter
from .logging_config import get_logger
from .models import AggregateReport, FileDescriptor, FileResult
from .pipeline import Dispatcher, aggregate
from .scanning import discover

logger = get_logger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class RunOutcome:
    """Report of a run plus the artifacts written for it."""

    report: AggregateReport
    artifacts: list[Path]


def analyze(
    path: PathLike,
    config: Optional[AnalysisConfig] = None,
    on_discovered: Optional[Callable[[list[FileDescriptor]], None]] = None,
    on_result: Optional[Callable[[FileResult], None]] = None,
) -> AggregateReport:
    """Extract metrics for a file or directory tree.

    Args:
        path: Source file or directory
        config: Run configuration (defaults if None)
        on_discovered: Called once with the descriptors before dispatch
        on_result: Called as each file completes (progress reporting)

    Returns:
        AggregateReport; per-file failures are recorded in it, not raised

    Raises:
        InvalidPathError: If the path does not exist
        UnsupportedLanguageError: If a single file has an unsupported extension
    """
    config = config or AnalysisConfig()
    discovered = discover(path, config)
    descriptors = list(discovered.descriptors)
    if on_discovered is not None:
        on_discovered(descriptors)

    dispatcher = Dispatcher(max_workers=config.effective_workers, extended=config.extended)
    results = dispatcher.dispatch(descriptors, on_result=on_result)
    return aggregate(results, discovered.skipped, root=str(path))


def run(
    path: PathLike,
    output_dir: PathLike,
    config: Optional[AnalysisConfig] = None,
    on_discovered: Optional[Callable[[list[FileDescriptor]], None]] = None,
    on_result: Optional[Callable[[FileResult], None]] = None,
) -> RunOutcome:
    """Analyze ``path`` and write artifacts into ``output_dir``.

    Raises:
        NoFilesDiscoveredError: If discovery finds nothing to analyze
        SerializationError: If the output directory is not writable
    """
    config = config or AnalysisConfig()
    report = analyze(path, config, on_discovered=on_discovered, on_result=on_result)
    if report.counts.discovered == 0:
        raise NoFilesDiscoveredError(Path(path), skipped=report.counts.skipped)

    formatter = get_formatter(
        config.output_format,
        extended=config.extended,
        split_per_file=config.split_per_file,
    )
    artifacts = formatter.write(report, Path(output_dir))
    logger.info("Wrote %d artifacts to %s", len(artifacts), output_dir)
    return RunOutcome(report=report, artifacts=artifacts)
