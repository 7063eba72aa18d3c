"""JSON formatter for archaeo."""

import json
from typing import Any, Dict

from .base import BaseFormatter
from ..analyzers.metrics import order_metric_names
from ..models import AggregateReport, AnalysisSuccess, ScopeMetrics

SUMMARY_ARTIFACT = "summary.json"


class JsonFormatter(BaseFormatter):
    """Render reports as JSON documents mirroring the scope trees."""

    suffix = ".json"

    def format(self, report: AggregateReport) -> Dict[str, str]:
        if not self.split_per_file:
            data = {
                "root": report.root,
                "files": [_file_entry(s) for s in report.successes],
                **_report_tail(report),
            }
            return {self.artifact_name("metrics"): _dumps(data)}

        artifacts: Dict[str, str] = {}
        names = self.file_artifact_names(
            (s.path for s in report.successes), reserved=(SUMMARY_ARTIFACT,)
        )
        for success in report.successes:
            artifacts[names[success.path]] = _dumps(_file_entry(success))
        artifacts[SUMMARY_ARTIFACT] = _dumps({"root": report.root, **_report_tail(report)})
        return artifacts


def _file_entry(success: AnalysisSuccess) -> Dict[str, Any]:
    descriptor = success.descriptor
    return {
        "path": descriptor.rel_path,
        "language": descriptor.language,
        "size_bytes": descriptor.size_bytes,
        "scope": scope_to_dict(success.scope),
    }


def scope_to_dict(scope: ScopeMetrics) -> Dict[str, Any]:
    """Nested dict for a scope tree, metrics in canonical order."""
    return {
        "kind": scope.kind,
        "name": scope.name,
        "start_line": scope.start_line,
        "end_line": scope.end_line,
        "metrics": {name: scope.metrics[name] for name in order_metric_names(scope.metrics)},
        "children": [scope_to_dict(child) for child in scope.children],
    }


def _report_tail(report: AggregateReport) -> Dict[str, Any]:
    return {
        "failures": [
            {
                "file": f.path,
                "language": f.descriptor.language,
                "error_kind": f.error_kind,
                "reason": f.reason,
            }
            for f in report.failures
        ],
        "skipped": [{"file": s.path, "reason": s.reason} for s in report.skipped],
        "summary": {
            "counts": report.counts.to_dict(),
            "metrics": {
                kind: {metric: stats.to_dict() for metric, stats in metrics.items()}
                for kind, metrics in report.summary.items()
            },
        },
    }


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, allow_nan=False) + "\n"
