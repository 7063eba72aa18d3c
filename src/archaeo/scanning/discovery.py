"""File discovery: turns an input path into an ordered list of descriptors.

Discovery runs sequentially and completes before any analysis starts; the
dispatcher relies on the stable order produced here to reassemble results.

Policies:
    - Symlinks (files and directories) are ignored unless
      ``follow_symlinks`` is set; when followed, each real directory is
      walked at most once so link cycles terminate.
    - Files with an unrecognized extension are skipped, not failed.
    - Files larger than ``max_file_size_mb`` are skipped, not failed.
    - Paths whose metadata cannot be read become descriptors carrying an
      ``error``; the walk continues.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import AnalysisConfig
from ..file_ops import should_skip_file
from ..exceptions import DiscoveryError, InvalidPathError, UnsupportedLanguageError
from ..logging_config import get_logger
from ..models import FileDescriptor, SkippedFile
from .languages import LANGUAGES, detect_language

logger = get_logger(__name__)

UNSUPPORTED_REASON = "unsupported language"
OVERSIZED_REASON = "exceeds size limit"


@dataclass(frozen=True)
class DiscoveryResult:
    """Descriptors to analyze plus the files left out on purpose."""

    root: Path
    descriptors: tuple[FileDescriptor, ...]
    skipped: tuple[SkippedFile, ...] = field(default_factory=tuple)


def discover(root: "Path | str", config: Optional[AnalysisConfig] = None) -> DiscoveryResult:
    """Discover analyzable source files under ``root``.

    Args:
        root: A single source file or a directory to walk recursively
        config: Filtering and walking options (defaults if None)

    Returns:
        DiscoveryResult with descriptors sorted lexically by path

    Raises:
        InvalidPathError: If ``root`` does not exist or is neither file nor dir
        UnsupportedLanguageError: If ``root`` is a file with an unknown extension
    """
    config = config or AnalysisConfig()
    root = Path(root)

    if not os.path.lexists(root):
        raise InvalidPathError(root, "path does not exist")

    if root.is_file():
        logger.info("Single file found: %s", root)
        return _single_file(root, config)

    if not root.is_dir():
        raise InvalidPathError(root, "not a regular file or directory")

    return _walk(root, config)


def _single_file(path: Path, config: AnalysisConfig) -> DiscoveryResult:
    language = detect_language(path)
    if language is None:
        raise UnsupportedLanguageError(path.suffix or path.name, sorted(LANGUAGES))

    descriptor = _describe(path, path.name, language)
    if descriptor.error is None and descriptor.size_bytes > config.max_file_size_bytes:
        logger.warning("Skipping %s: exceeds %.1f MB limit", path, config.max_file_size_mb)
        skipped = (SkippedFile(path=path.name, reason=OVERSIZED_REASON),)
        return DiscoveryResult(root=path, descriptors=(), skipped=skipped)
    return DiscoveryResult(root=path, descriptors=(descriptor,))


def _describe(path: Path, rel_path: str, language: Optional[str]) -> FileDescriptor:
    try:
        size = path.stat().st_size
    except OSError as e:
        error = DiscoveryError(path, e.strerror or str(e))
        logger.warning("%s", error)
        return FileDescriptor(path=path, rel_path=rel_path, language=language, error=str(error))
    return FileDescriptor(path=path, rel_path=rel_path, language=language, size_bytes=size)


def _walk(root: Path, config: AnalysisConfig) -> DiscoveryResult:
    logger.info("Walking directory: %s", root)

    descriptors: dict[str, FileDescriptor] = {}
    skipped: dict[str, SkippedFile] = {}
    seen_real: set[str] = set()
    visited_dirs: set[str] = set()

    def _on_error(err: OSError) -> None:
        # os.walk reports unreadable directories here instead of raising
        path = Path(err.filename) if err.filename else root
        rel = _relative(path, root)
        error = DiscoveryError(path, err.strerror or str(err))
        logger.warning("%s", error)
        descriptors.setdefault(
            rel, FileDescriptor(path=path, rel_path=rel, language=None, error=str(error))
        )

    for dirpath, dirnames, filenames in os.walk(
        root, onerror=_on_error, followlinks=config.follow_symlinks
    ):
        current = Path(dirpath)

        if config.follow_symlinks:
            real_dir = os.path.realpath(dirpath)
            if real_dir in visited_dirs:
                dirnames[:] = []
                continue
            visited_dirs.add(real_dir)

        dirnames[:] = sorted(
            d
            for d in dirnames
            if (config.allow_hidden_files or not d.startswith("."))
            and (config.follow_symlinks or not (current / d).is_symlink())
        )

        for filename in sorted(filenames):
            if not config.allow_hidden_files and filename.startswith("."):
                continue

            path = current / filename
            rel = _relative(path, root)

            if path.is_symlink() and not config.follow_symlinks:
                logger.debug("Ignoring symlink: %s", rel)
                continue
            if should_skip_file(rel, config.exclude_patterns):
                logger.debug("Excluded by pattern: %s", rel)
                continue

            language = detect_language(path)
            if language is None:
                logger.debug("Skipping %s: %s", rel, UNSUPPORTED_REASON)
                skipped[rel] = SkippedFile(path=rel, reason=UNSUPPORTED_REASON)
                continue

            descriptor = _describe(path, rel, language)
            if descriptor.error is None:
                if descriptor.size_bytes > config.max_file_size_bytes:
                    logger.warning(
                        "Skipping %s: %d bytes exceeds %.1f MB limit",
                        rel,
                        descriptor.size_bytes,
                        config.max_file_size_mb,
                    )
                    skipped[rel] = SkippedFile(path=rel, reason=OVERSIZED_REASON)
                    continue
                # Deduplicate files reachable through several followed links
                real = os.path.realpath(path)
                if real in seen_real:
                    continue
                seen_real.add(real)

            descriptors[rel] = descriptor

    ordered = tuple(descriptors[key] for key in sorted(descriptors))
    logger.info("Discovered %d files (%d skipped)", len(ordered), len(skipped))
    return DiscoveryResult(
        root=root,
        descriptors=ordered,
        skipped=tuple(skipped[key] for key in sorted(skipped)),
    )


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
