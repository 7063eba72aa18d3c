"""Configuration loading and management for archaeo.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.archaeo.toml)
    3. Project config (./archaeo.toml)
    4. Explicit config file
    5. Environment variables (ARCHAEO_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(output_format="json", extended=True)
    >>> config.output_format
    'hierarchical'
    >>> config.extended
    True
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ArchaeoError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["tabular", "hierarchical"]

OUTPUT_FORMATS: tuple[str, ...] = ("tabular", "hierarchical")

# Format names accepted from the command line and config files
FORMAT_ALIASES: dict[str, str] = {
    "tabular": "tabular",
    "csv": "tabular",
    "hierarchical": "hierarchical",
    "json": "hierarchical",
}

# Worker count when none is configured: CPU count, capped at 8
DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

ENV_PREFIX = "ARCHAEO_"


def normalize_format(name: str) -> str:
    """Map a format name or alias onto one of OUTPUT_FORMATS.

    Raises:
        InvalidConfigError: If the name is not a known format or alias
    """
    canonical = FORMAT_ALIASES.get(name.strip().lower())
    if canonical is None:
        raise InvalidConfigError(
            "output_format", name, f"expected one of {', '.join(sorted(FORMAT_ALIASES))}"
        )
    return canonical


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one metrics extraction run.

    Attributes:
        Performance tuning:
            workers: Number of parallel workers (None = auto-detect)

        Output control:
            output_format: "tabular" (CSV rows) or "hierarchical" (JSON tree)
            flatten: Flatten scope trees into records; tabular output requires it
            extended: Add per-scope sum/average/min/max of function metrics
            split_per_file: Write one artifact per analyzed file
            verbosity: Logging verbosity level

        File filtering:
            max_file_size_mb: Files above this size are skipped, not analyzed
            exclude_patterns: Glob patterns (relative paths) to exclude

        Walking:
            allow_hidden_files: Include hidden files and directories
            follow_symlinks: Follow symbolic links during discovery
    """

    # Performance tuning
    workers: Optional[int] = None

    # Output control
    output_format: OutputFormat = "tabular"
    flatten: bool = True
    extended: bool = False
    split_per_file: bool = False
    verbosity: Verbosity = "normal"

    # File filtering
    max_file_size_mb: float = 10.0
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            ".git/*",
            "build/*",
            "cmake-build-*/*",
            "node_modules/*",
        ]
    )

    # Walking
    allow_hidden_files: bool = False
    follow_symlinks: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")

        # Normalize aliases such as "csv" and "json"
        object.__setattr__(self, "output_format", normalize_format(self.output_format))

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )

        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def effective_workers(self) -> int:
        """Worker pool size actually used by the dispatcher."""
        return self.workers if self.workers is not None else DEFAULT_WORKERS


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep lower-priority values.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ArchaeoError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".archaeo.toml"
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / "archaeo.toml"
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ArchaeoError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides.pop("verbose"):
            overrides["verbosity"] = "verbose"
    if "quiet" in overrides:
        if overrides.pop("quiet"):
            overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ArchaeoError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict[str, Any]:
    try:
        data = _load_toml_file(path)
    except ArchaeoError:
        raise
    except Exception as e:
        raise ArchaeoError(f"Invalid {label} '{path}': {e}")
    # Settings may live at top level or under an [archaeo] table
    section = data.get("archaeo", data)
    if not isinstance(section, dict):
        raise ArchaeoError(f"Invalid {label} '{path}': [archaeo] must be a table")
    return dict(section)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ARCHAEO_* environment variables.

    Supported environment variables:
        ARCHAEO_WORKERS: int
        ARCHAEO_OUTPUT_FORMAT: tabular/hierarchical (or csv/json)
        ARCHAEO_FLATTEN: bool (true/false/1/0)
        ARCHAEO_EXTENDED: bool
        ARCHAEO_SPLIT_PER_FILE: bool
        ARCHAEO_VERBOSITY: quiet/normal/verbose
        ARCHAEO_MAX_FILE_SIZE_MB: float
        ARCHAEO_ALLOW_HIDDEN_FILES: bool
        ARCHAEO_FOLLOW_SYMLINKS: bool

    Returns:
        Dict of field_name -> parsed_value for any ARCHAEO_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the field type is not settable from the
        environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # List types (exclude_patterns) are too complex for env vars
    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        # Python 3.10 ships without tomllib
        import tomli as tomllib  # type: ignore[no-redef]

    with open(path, "rb") as f:
        return tomllib.load(f)
