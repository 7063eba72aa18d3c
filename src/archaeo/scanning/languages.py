"""Language configurations: the single source of truth for recognized sources.

Adding a new language:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. Register an analyzer for its tag in ``archaeo.analyzers``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import UnsupportedLanguageError


@dataclass(frozen=True)
class LanguageConfig:
    """Everything discovery and parsing need to know about a language."""

    name: str
    extensions: tuple[str, ...]
    # Name of the tree-sitter grammar module's language function
    grammar: str


LANGUAGES: dict[str, LanguageConfig] = {
    "c": LanguageConfig(
        name="c",
        extensions=(".c",),
        grammar="tree_sitter_c",
    ),
    # Headers go through the C++ grammar, which accepts C declarations too
    "cpp": LanguageConfig(
        name="cpp",
        extensions=(".cc", ".cpp", ".cxx", ".c++", ".h", ".hh", ".hpp", ".hxx"),
        grammar="tree_sitter_cpp",
    ),
}

_EXTENSION_LANGUAGE: dict[str, str] = {
    ext: cfg.name for cfg in LANGUAGES.values() for ext in cfg.extensions
}


def detect_language(path: "Path | str") -> Optional[str]:
    """Return the language tag for a path, or None if unrecognized."""
    suffix = Path(path).suffix.lower()
    return _EXTENSION_LANGUAGE.get(suffix)


def get_language_config(name: str) -> LanguageConfig:
    """Look up a language by tag.

    Raises:
        UnsupportedLanguageError: If the tag is not in LANGUAGES
    """
    try:
        return LANGUAGES[name]
    except KeyError:
        raise UnsupportedLanguageError(name, sorted(LANGUAGES))


def supported_extensions() -> list[str]:
    """All recognized file extensions, sorted."""
    return sorted(_EXTENSION_LANGUAGE)
