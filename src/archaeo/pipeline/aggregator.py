"""Aggregator: folds per-file results into an AggregateReport.

Runs single-threaded over the complete, ordered result list, so no shared
accumulators exist while workers are running.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from ..analyzers.metrics import order_metric_names
from ..logging_config import get_logger
from ..models import (
    SCOPE_KINDS,
    SCOPE_SEPARATOR,
    AggregateReport,
    AnalysisSuccess,
    FileResult,
    FlatRecord,
    MetricSummary,
    RunCounts,
    SkippedFile,
    Summary,
)

logger = get_logger(__name__)


def flatten(result: AnalysisSuccess) -> list[FlatRecord]:
    """Flatten one file's scope tree, depth-first pre-order.

    The unit scope is named after the file; nested scopes get their
    ``::``-joined qualified name.
    """
    file_path = result.descriptor.rel_path
    records: list[FlatRecord] = []
    for names, scope in result.scope.walk():
        if scope.kind == "unit":
            name, parent = file_path, ""
        else:
            name = SCOPE_SEPARATOR.join(names)
            parent = SCOPE_SEPARATOR.join(names[:-1]) or file_path
        records.append(
            FlatRecord(
                file=file_path,
                kind=scope.kind,
                name=name,
                parent=parent,
                start_line=scope.start_line,
                end_line=scope.end_line,
                metrics=dict(scope.metrics),
            )
        )
    return records


def summarize(records: Iterable[FlatRecord]) -> Summary:
    """Per scope kind, per metric statistics.

    A metric missing from a scope is left out of that metric's statistics
    instead of counting as zero. Kinds are never mixed.
    """
    values: dict[str, dict[str, list[float]]] = {}
    for record in records:
        by_metric = values.setdefault(record.kind, {})
        for metric, value in record.metrics.items():
            by_metric.setdefault(metric, []).append(value)

    summary: Summary = {}
    for kind in _ordered_kinds(values):
        by_metric = values[kind]
        summary[kind] = {
            metric: _statistics(by_metric[metric]) for metric in order_metric_names(by_metric)
        }
    return summary


def aggregate(
    results: Sequence[FileResult],
    skipped: Sequence[SkippedFile] = (),
    root: str = "",
) -> AggregateReport:
    """Build the report for a run.

    Args:
        results: One result per discovered file, in discovery order
        skipped: Files skipped during discovery
        root: The analyzed input path, recorded in the report
    """
    records: list[FlatRecord] = []
    analyzed = 0
    for result in results:
        if isinstance(result, AnalysisSuccess):
            analyzed += 1
            records.extend(flatten(result))

    counts = RunCounts(
        discovered=len(results),
        analyzed=analyzed,
        skipped=len(skipped),
        failed=len(results) - analyzed,
    )
    logger.info(
        "Aggregated %d records from %d files (%d failed, %d skipped)",
        len(records),
        counts.analyzed,
        counts.failed,
        counts.skipped,
    )
    return AggregateReport(
        root=root,
        results=tuple(results),
        skipped=tuple(skipped),
        records=tuple(records),
        summary=summarize(records),
        counts=counts,
    )


def _statistics(values: list[float]) -> MetricSummary:
    array = np.asarray(values, dtype=np.float64)
    total = float(array.sum())
    return MetricSummary(
        count=int(array.size),
        sum=total,
        mean=total / array.size,
        min=float(array.min()),
        max=float(array.max()),
    )


def _ordered_kinds(kinds: Iterable[str]) -> list[str]:
    known = [k for k in SCOPE_KINDS if k in kinds]
    return known + sorted(k for k in kinds if k not in SCOPE_KINDS)
