"""Output formatters for archaeo."""

from .base import BaseFormatter
from .csv_formatter import CsvFormatter
from .json_formatter import JsonFormatter
from ..config import normalize_format


def get_formatter(
    name: str, extended: bool = False, split_per_file: bool = False
) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: "tabular" or "hierarchical" (aliases "csv" and "json")
        extended: Use extended artifact names
        split_per_file: Write one metrics artifact per analyzed file

    Returns:
        Formatter instance

    Raises:
        InvalidConfigError: If name is not recognized
    """
    formatters = {
        "tabular": CsvFormatter,
        "hierarchical": JsonFormatter,
    }
    cls = formatters[normalize_format(name)]
    return cls(extended=extended, split_per_file=split_per_file)


__all__ = [
    "BaseFormatter",
    "CsvFormatter",
    "JsonFormatter",
    "get_formatter",
]
