"""Dispatcher: fans file descriptors out to analyzers and collects results.

Every descriptor yields exactly one FileResult. Failures of any kind are
caught per file and returned as ``AnalysisFailure`` so sibling work is never
aborted. Results come back in discovery order, whatever order the workers
finish in.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ..analyzers import BaseAnalyzer, get_analyzer
from ..config import DEFAULT_WORKERS
from ..exceptions import (
    AnalysisError,
    ArchaeoError,
    DiscoveryError,
    FileAccessError,
    UnsupportedLanguageError,
)
from ..logging_config import get_logger
from ..models import AnalysisFailure, AnalysisSuccess, FileDescriptor, FileResult

logger = get_logger(__name__)

AnalyzerFactory = Callable[[str, bool], BaseAnalyzer]
ResultCallback = Callable[[FileResult], None]


class Dispatcher:
    """Runs analyzers over files on a bounded thread pool.

    Attributes:
        max_workers: Pool size
        extended: Passed to analyzers to request extended metrics
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        extended: bool = False,
        analyzer_factory: AnalyzerFactory = get_analyzer,
    ) -> None:
        self.max_workers = max_workers or DEFAULT_WORKERS
        self.extended = extended
        self._analyzer_factory = analyzer_factory

    def dispatch(
        self,
        descriptors: Sequence[FileDescriptor],
        on_result: Optional[ResultCallback] = None,
    ) -> list[FileResult]:
        """Analyze every descriptor.

        Args:
            descriptors: Files in discovery order
            on_result: Called on the calling thread as each file completes,
                in completion order (progress reporting)

        Returns:
            One FileResult per descriptor, index-aligned with ``descriptors``
        """
        if not descriptors:
            return []

        analyzers = self._build_analyzers(descriptors)
        results: list[Optional[FileResult]] = [None] * len(descriptors)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._analyze_one, descriptor, analyzers): index
                for index, descriptor in enumerate(descriptors)
            }
            for future in as_completed(futures):
                index = futures[future]
                result = future.result()
                results[index] = result
                if on_result is not None:
                    on_result(result)

        failed = sum(1 for r in results if r is not None and not r.ok)
        logger.info("Analyzed %d files (%d failed)", len(results) - failed, failed)
        return [r for r in results if r is not None]

    def _build_analyzers(
        self, descriptors: Sequence[FileDescriptor]
    ) -> dict[str, BaseAnalyzer]:
        # Built up front so workers only read from the mapping
        analyzers: dict[str, BaseAnalyzer] = {}
        for language in sorted({d.language for d in descriptors if d.language}):
            try:
                analyzers[language] = self._analyzer_factory(language, self.extended)
            except UnsupportedLanguageError as e:
                logger.warning("%s", e)
        return analyzers

    def _analyze_one(
        self, descriptor: FileDescriptor, analyzers: dict[str, BaseAnalyzer]
    ) -> FileResult:
        """Analyze a single file, converting every error into a failure."""
        try:
            return self._run_analyzer(descriptor, analyzers)
        except ArchaeoError as e:
            return self._failure(descriptor, type(e).__name__, str(e))
        except Exception as e:
            # Analyzer internals must not take sibling files down with them
            logger.debug("Unexpected error analyzing %s", descriptor.rel_path, exc_info=True)
            return self._failure(descriptor, AnalysisError.__name__, f"{type(e).__name__}: {e}")

    def _run_analyzer(
        self, descriptor: FileDescriptor, analyzers: dict[str, BaseAnalyzer]
    ) -> FileResult:
        if descriptor.error is not None:
            return self._failure(descriptor, DiscoveryError.__name__, descriptor.error)

        analyzer = analyzers.get(descriptor.language or "")
        if analyzer is None:
            raise UnsupportedLanguageError(str(descriptor.language), sorted(analyzers))

        logger.debug("Analyzing %s (%s)", descriptor.rel_path, descriptor.language)
        try:
            source = descriptor.path.read_bytes()
        except OSError as e:
            raise FileAccessError(descriptor.path, e.strerror or str(e))

        scope = analyzer.analyze(source, descriptor.language, name=descriptor.rel_path)
        if not scope.is_well_nested():
            raise AnalysisError(
                f"Scope spans are not nested in {descriptor.rel_path}",
                details={"filepath": descriptor.rel_path},
            )
        return AnalysisSuccess(descriptor=descriptor, scope=scope)

    @staticmethod
    def _failure(descriptor: FileDescriptor, error_kind: str, reason: str) -> AnalysisFailure:
        logger.warning("Failed to process %s: %s", descriptor.rel_path, reason)
        return AnalysisFailure(descriptor=descriptor, error_kind=error_kind, reason=reason)
