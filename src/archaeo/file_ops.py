"""
Safe file operations for archaeo.

Artifacts are written atomically: content goes to a temporary file in the
destination directory which then replaces the target in one rename.
"""

import contextlib
import os
import tempfile
from pathlib import Path, PurePosixPath

from .exceptions import SerializationError

ARTIFACT_MODE = 0o644


def prepare_output_dir(path: Path) -> Path:
    """
    Make sure ``path`` is a writable directory, creating it if needed.

    Raises:
        SerializationError: If the path is not a directory or not writable
    """
    if path.exists() and not path.is_dir():
        raise SerializationError(path, "destination exists and is not a directory")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SerializationError(path, f"cannot create directory: {e.strerror or e}")

    if not os.access(path, os.W_OK | os.X_OK):
        raise SerializationError(path, "directory is not writable")

    return path


def atomic_write_text(filepath: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to ``filepath`` atomically.

    Line endings are written exactly as given.

    Raises:
        SerializationError: If the file cannot be written
    """
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
        os.chmod(tmp_name, ARTIFACT_MODE)
        os.replace(tmp_name, filepath)
    except OSError as e:
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        raise SerializationError(filepath, f"write failed: {e.strerror or e}")


def should_skip_file(rel_path: str, exclude_patterns: list[str]) -> bool:
    """
    Check if a file should be skipped based on exclusion patterns.

    Patterns are matched right-anchored against the POSIX relative path.
    """
    pure = PurePosixPath(rel_path)
    return any(pure.match(pattern) for pattern in exclude_patterns)
