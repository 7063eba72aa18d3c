"""Data models shared across the pipeline.

Discovery produces ``FileDescriptor``s, the dispatcher turns each one into a
``FileResult`` (``AnalysisSuccess`` holding a ``ScopeMetrics`` tree, or
``AnalysisFailure``), and the aggregator folds them into an
``AggregateReport``. Everything here is immutable once built.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

MetricValue = Union[int, float]

# Scope kinds, outermost first
SCOPE_KINDS: tuple[str, ...] = ("unit", "namespace", "class", "struct", "function")

# Separator for qualified scope names, e.g. "Dog::makeSound"
SCOPE_SEPARATOR = "::"


@dataclass(frozen=True)
class FileDescriptor:
    """A file selected for analysis.

    Attributes:
        path: Path to the file as found on disk
        rel_path: POSIX path relative to the discovery root (file name for
            single-file input)
        language: Language tag (``c`` or ``cpp``); None when unknown
        size_bytes: File size reported by stat
        error: Discovery-level failure; the dispatcher reports it instead of
            analyzing the file
    """

    path: Path
    rel_path: str
    language: Optional[str]
    size_bytes: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class ScopeMetrics:
    """One lexical scope and its metrics.

    Children mirror lexical nesting, so the structure is a tree owned by its
    root. ``metrics`` must be treated as read-only.
    """

    kind: str
    name: str
    start_line: int
    end_line: int
    metrics: dict[str, MetricValue] = field(default_factory=dict)
    children: tuple[ScopeMetrics, ...] = ()

    def contains(self, other: ScopeMetrics) -> bool:
        """True if ``other``'s span lies within this scope's span."""
        return self.start_line <= other.start_line and other.end_line <= self.end_line

    def is_well_nested(self) -> bool:
        """Check the containment invariant over the whole tree."""
        if self.start_line > self.end_line:
            return False
        return all(self.contains(child) and child.is_well_nested() for child in self.children)

    def walk(
        self, parents: tuple[str, ...] = ()
    ) -> Iterator[tuple[tuple[str, ...], ScopeMetrics]]:
        """Depth-first pre-order traversal.

        Yields ``(names, scope)`` where ``names`` is the tuple of enclosing
        scope names (unit excluded) followed by the scope's own name.
        """
        names = parents if self.kind == "unit" else parents + (self.name,)
        yield names, self
        for child in self.children:
            yield from child.walk(names)

    def scope_count(self) -> int:
        """Number of scopes in this tree, including the root."""
        return 1 + sum(child.scope_count() for child in self.children)


@dataclass(frozen=True)
class AnalysisSuccess:
    """Outcome of a file that was analyzed."""

    descriptor: FileDescriptor
    scope: ScopeMetrics

    ok = True

    @property
    def path(self) -> str:
        return self.descriptor.rel_path


@dataclass(frozen=True)
class AnalysisFailure:
    """Outcome of a file that could not be analyzed.

    Attributes:
        descriptor: The file that failed
        error_kind: Exception class name (e.g. ``ParsingError``)
        reason: Human-readable description
    """

    descriptor: FileDescriptor
    error_kind: str
    reason: str

    ok = False

    @property
    def path(self) -> str:
        return self.descriptor.rel_path


FileResult = Union[AnalysisSuccess, AnalysisFailure]


@dataclass(frozen=True)
class SkippedFile:
    """A file left out of analysis on purpose (unsupported or oversized)."""

    path: str
    reason: str


@dataclass(frozen=True)
class FlatRecord:
    """A single scope flattened for tabular output.

    Attributes:
        file: Relative path of the originating file
        kind: Scope kind
        name: Qualified scope name (``Outer::inner``); the file path for units
        parent: Qualified name of the enclosing scope, empty for units
        start_line: First line of the scope (1-indexed)
        end_line: Last line of the scope (1-indexed)
        metrics: Metric values present on the scope
    """

    file: str
    kind: str
    name: str
    parent: str
    start_line: int
    end_line: int
    metrics: dict[str, MetricValue]


@dataclass(frozen=True)
class MetricSummary:
    """Aggregate statistics for one metric over one scope kind."""

    count: int
    sum: float
    mean: float
    min: float
    max: float

    def to_dict(self) -> dict[str, MetricValue]:
        return {
            "count": self.count,
            "sum": self.sum,
            "mean": self.mean,
            "min": self.min,
            "max": self.max,
        }


@dataclass(frozen=True)
class RunCounts:
    """File counts for a run."""

    discovered: int
    analyzed: int
    skipped: int
    failed: int

    def to_dict(self) -> dict[str, int]:
        return {
            "discovered": self.discovered,
            "analyzed": self.analyzed,
            "skipped": self.skipped,
            "failed": self.failed,
        }


# scope kind -> metric name -> statistics
Summary = dict[str, dict[str, MetricSummary]]


@dataclass(frozen=True)
class AggregateReport:
    """Complete output of a run.

    Attributes:
        root: The analyzed input path
        results: One FileResult per discovered file, in discovery order
        skipped: Files skipped before analysis
        records: Flattened scope records of all successful files
        summary: Per scope kind, per metric statistics
        counts: Discovered/analyzed/skipped/failed file counts
    """

    root: str
    results: tuple[FileResult, ...]
    skipped: tuple[SkippedFile, ...]
    records: tuple[FlatRecord, ...]
    summary: Summary
    counts: RunCounts

    @property
    def successes(self) -> list[AnalysisSuccess]:
        return [r for r in self.results if isinstance(r, AnalysisSuccess)]

    @property
    def failures(self) -> list[AnalysisFailure]:
        return [r for r in self.results if isinstance(r, AnalysisFailure)]

    @property
    def function_summary(self) -> dict[str, MetricSummary]:
        """Statistics over function-level scopes only."""
        return self.summary.get("function", {})

    def metric_names(self) -> list[str]:
        """Union of metric names across all records, in canonical order."""
        from .analyzers.metrics import order_metric_names

        names: set[str] = set()
        for record in self.records:
            names.update(record.metrics)
        return order_metric_names(names)

    def records_by_file(self) -> dict[str, list[FlatRecord]]:
        """Group records by originating file, preserving order."""
        grouped: dict[str, list[FlatRecord]] = {}
        for record in self.records:
            grouped.setdefault(record.file, []).append(record)
        return grouped
