"""CSV formatter for archaeo."""

import csv
import io
from typing import Dict, Iterable, List, Sequence

from .base import BaseFormatter
from ..models import AggregateReport, FlatRecord, MetricValue

RECORD_COLUMNS = ["file", "kind", "name", "parent", "start_line", "end_line"]
FAILURE_COLUMNS = ["file", "language", "error_kind", "reason"]
SUMMARY_COLUMNS = ["scope_kind", "metric", "count", "sum", "mean", "min", "max"]

FAILURES_ARTIFACT = "failures.csv"
SUMMARY_ARTIFACT = "summary.csv"


class CsvFormatter(BaseFormatter):
    """Render reports as CSV: one row per flattened scope record."""

    suffix = ".csv"

    def format(self, report: AggregateReport) -> Dict[str, str]:
        artifacts: Dict[str, str] = {}
        metric_names = report.metric_names()

        if self.split_per_file and report.successes:
            grouped = report.records_by_file()
            names = self.file_artifact_names(
                (s.path for s in report.successes),
                reserved=(FAILURES_ARTIFACT, SUMMARY_ARTIFACT),
            )
            for path, name in names.items():
                artifacts[name] = _records_table(grouped.get(path, []), metric_names)
        else:
            # Also the header-only artifact of a split run with no successes
            artifacts[self.artifact_name("metrics")] = _records_table(
                report.records, metric_names
            )

        artifacts[FAILURES_ARTIFACT] = self._failures_table(report)
        artifacts[SUMMARY_ARTIFACT] = self._summary_table(report)
        return artifacts

    def _failures_table(self, report: AggregateReport) -> str:
        rows = [
            [f.path, f.descriptor.language or "", f.error_kind, f.reason]
            for f in report.failures
        ]
        return _table(FAILURE_COLUMNS, rows)

    def _summary_table(self, report: AggregateReport) -> str:
        rows = []
        for kind, metrics in report.summary.items():
            for metric, stats in metrics.items():
                rows.append(
                    [
                        kind,
                        metric,
                        stats.count,
                        _cell(stats.sum),
                        _cell(stats.mean),
                        _cell(stats.min),
                        _cell(stats.max),
                    ]
                )
        return _table(SUMMARY_COLUMNS, rows)


def _records_table(records: Sequence[FlatRecord], metric_names: List[str]) -> str:
    rows = []
    for r in records:
        row = [r.file, r.kind, r.name, r.parent, r.start_line, r.end_line]
        row.extend(_cell(r.metrics[m]) if m in r.metrics else "" for m in metric_names)
        rows.append(row)
    return _table(RECORD_COLUMNS + metric_names, rows)


def _table(header: List[str], rows: Iterable[list]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()


def _cell(value: MetricValue) -> str:
    # Full float precision
    return repr(value) if isinstance(value, float) else str(value)
