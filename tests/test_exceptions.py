"""Tests for the archaeo exception hierarchy."""

from pathlib import Path

import pytest

from archaeo.exceptions import (
    AnalysisError,
    ArchaeoError,
    ConfigurationError,
    DiscoveryError,
    FileAccessError,
    InvalidConfigError,
    InvalidPathError,
    NoFilesDiscoveredError,
    ParsingError,
    SerializationError,
    UnsupportedLanguageError,
)


class TestHierarchy:
    """Every error derives from ArchaeoError via its category."""

    @pytest.mark.parametrize(
        "error",
        [
            DiscoveryError(Path("a"), "denied"),
            FileAccessError(Path("a.c"), "denied"),
            ParsingError(Path("a.c"), "c", "syntax error"),
            UnsupportedLanguageError("rust", ["c", "cpp"]),
            NoFilesDiscoveredError(Path("src")),
        ],
    )
    def test_analysis_errors(self, error):
        assert isinstance(error, AnalysisError)
        assert isinstance(error, ArchaeoError)

    @pytest.mark.parametrize(
        "error",
        [InvalidPathError(Path("x"), "missing"), InvalidConfigError("workers", 0, "too low")],
    )
    def test_configuration_errors(self, error):
        assert isinstance(error, ConfigurationError)

    def test_serialization_error(self):
        error = SerializationError(Path("out"), "read-only")
        assert isinstance(error, ArchaeoError)
        assert not isinstance(error, AnalysisError)
        assert error.reason == "read-only"


class TestMessages:
    def test_details_rendered(self):
        error = ArchaeoError("boom", details={"a": "1", "b": "2"})
        assert str(error) == "boom (a=1, b=2)"

    def test_no_details(self):
        assert str(ArchaeoError("boom")) == "boom"

    def test_parsing_error_fields(self):
        error = ParsingError(Path("src/a.c"), "c", "syntax error at line 3, column 1")
        assert error.language == "c"
        assert "syntax error at line 3" in str(error)

    def test_unsupported_language_lists_supported(self):
        error = UnsupportedLanguageError(".rs", ["c", "cpp"])
        assert "c, cpp" in str(error)
