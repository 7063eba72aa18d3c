"""Analysis-related exceptions: discovery, file access, parsing."""

from pathlib import Path
from typing import List

from .base import ArchaeoError


class AnalysisError(ArchaeoError):
    """Base class for analysis-related errors."""

    pass


class DiscoveryError(AnalysisError):
    """Raised when a path cannot be inspected while walking the input tree."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot inspect path: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when file content cannot be parsed."""

    def __init__(self, filepath: Path, language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            details={"filepath": str(filepath), "language": language, "reason": reason},
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when attempting to analyze an unsupported language."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages


class NoFilesDiscoveredError(AnalysisError):
    """Raised when discovery produced nothing to analyze."""

    def __init__(self, root: Path, skipped: int = 0):
        super().__init__(
            f"No analyzable source files found under {root}",
            details={"root": str(root), "skipped": str(skipped)},
        )
        self.root = root
        self.skipped = skipped
