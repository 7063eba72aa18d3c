"""Language analyzers, keyed by language tag."""

from .base import BaseAnalyzer
from .c_analyzer import CFamilyAnalyzer
from ..exceptions import UnsupportedLanguageError

ANALYZERS: dict[str, type[BaseAnalyzer]] = {
    "c": CFamilyAnalyzer,
    "cpp": CFamilyAnalyzer,
}


def get_analyzer(language: str, extended: bool = False) -> BaseAnalyzer:
    """Get an analyzer instance for a language tag.

    Args:
        language: Language tag, e.g. "c" or "cpp"
        extended: Add per-scope sum/average/min/max of function metrics

    Raises:
        UnsupportedLanguageError: If no analyzer handles the tag
    """
    cls = ANALYZERS.get(language)
    if cls is None:
        raise UnsupportedLanguageError(language, sorted(ANALYZERS))
    return cls(extended=extended)


def supported_languages() -> list[str]:
    """Language tags with a registered analyzer."""
    return sorted(ANALYZERS)


__all__ = [
    "BaseAnalyzer",
    "CFamilyAnalyzer",
    "ANALYZERS",
    "get_analyzer",
    "supported_languages",
]
