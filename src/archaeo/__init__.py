"""
archaeo - code metrics extraction for C and C++

Walks a source tree, parses every C/C++ file with tree-sitter, computes
complexity and size metrics per lexical scope (translation unit, namespace,
class, struct, function) and writes them as CSV rows or a JSON tree.
"""

__version__ = "0.3.2"

from .api import RunOutcome, analyze, run
from .config import AnalysisConfig, load_config
from .models import AggregateReport, ScopeMetrics

__all__ = [
    "analyze",  # Main entry point
    "run",  # Analyze and write artifacts
    "RunOutcome",
    "AnalysisConfig",
    "load_config",
    "AggregateReport",
    "ScopeMetrics",
]
