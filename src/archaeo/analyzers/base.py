"""Base analyzer interface: source text in, scope metric tree out."""

from abc import ABC, abstractmethod

from ..models import ScopeMetrics


class BaseAnalyzer(ABC):
    """Abstract base class for language-specific analyzers.

    Implementations must be deterministic for identical input and must not
    keep per-call state on the instance, since one analyzer may serve
    several worker threads at once.
    """

    languages: tuple[str, ...] = ()

    def __init__(self, extended: bool = False):
        self.extended = extended

    @abstractmethod
    def analyze(self, source: bytes, language: str, name: str = "") -> ScopeMetrics:
        """Compute the metric tree for one file.

        Args:
            source: Raw file contents
            language: Language tag, one of ``self.languages``
            name: Name given to the unit (file-level) scope

        Returns:
            The unit scope with nested namespace/class/function scopes

        Raises:
            ParsingError: If the source does not parse cleanly
            AnalysisError: If metrics cannot be computed
        """
