"""Analysis pipeline: dispatch files to analyzers and aggregate results."""

from .aggregator import aggregate, flatten, summarize
from .dispatcher import Dispatcher

__all__ = ["Dispatcher", "aggregate", "flatten", "summarize"]
