"""Exception hierarchy for archaeo."""

from .analysis import (
    AnalysisError,
    DiscoveryError,
    FileAccessError,
    NoFilesDiscoveredError,
    ParsingError,
    UnsupportedLanguageError,
)
from .base import ArchaeoError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .output import SerializationError

__all__ = [
    "ArchaeoError",
    "AnalysisError",
    "DiscoveryError",
    "FileAccessError",
    "ParsingError",
    "UnsupportedLanguageError",
    "NoFilesDiscoveredError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "SerializationError",
]
