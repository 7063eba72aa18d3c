"""
Logging configuration for archaeo.

Console records go to stderr through rich, so progress bars and the summary
table on stdout never interleave with diagnostics. An optional log file
receives every record down to DEBUG, tagged with the worker thread that
emitted it, whatever the console verbosity.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "archaeo"

# Console level per AnalysisConfig.verbosity
CONSOLE_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


def verbosity_from_flags(verbose: bool = False, quiet: bool = False) -> str:
    """Map the CLI flags to a verbosity name; ``quiet`` wins over ``verbose``."""
    if quiet:
        return "quiet"
    return "verbose" if verbose else "normal"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Route archaeo's log records to the console and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call,
    so the CLI can re-apply a verbosity read from a configuration file.

    Args:
        verbosity: One of ``quiet``, ``normal`` or ``verbose``
        log_file: Optional file that records are appended to

    Returns:
        The ``archaeo`` package logger

    Raises:
        KeyError: If ``verbosity`` is not a known level name
    """
    console_level = CONSOLE_LEVELS[verbosity]
    verbose = verbosity == "verbose"

    console_handler = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    handlers: list[logging.Handler] = [console_handler]

    # The root level gates every handler, so a log file lowers it to DEBUG
    # while the console handler keeps its own threshold
    root_level = console_level
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)
        root_level = logging.DEBUG

    logging.basicConfig(
        level=root_level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(root_level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for a module, placed under the ``archaeo`` namespace.

    ``get_logger(__name__)`` inside the package returns the module logger
    unchanged; any other name is prefixed, e.g. ``"tests"`` becomes
    ``"archaeo.tests"``.
    """
    if name is None:
        return logging.getLogger(PACKAGE_LOGGER)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
