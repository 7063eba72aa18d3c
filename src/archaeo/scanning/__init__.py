"""Source discovery and parsing."""

from .discovery import DiscoveryResult, discover
from .languages import LANGUAGES, LanguageConfig, detect_language, get_language_config

__all__ = [
    "DiscoveryResult",
    "discover",
    "LANGUAGES",
    "LanguageConfig",
    "detect_language",
    "get_language_config",
]
