"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from archaeo.config import (
    DEFAULT_WORKERS,
    AnalysisConfig,
    load_config,
    normalize_format,
)
from archaeo.exceptions import ArchaeoError, InvalidConfigError


class TestAnalysisConfig:
    """Test defaults and validation."""

    def test_defaults(self):
        """Default config writes flattened tabular output."""
        config = AnalysisConfig()
        assert config.output_format == "tabular"
        assert config.flatten is True
        assert config.extended is False
        assert config.split_per_file is False
        assert config.effective_workers == DEFAULT_WORKERS

    def test_default_workers_bounded(self):
        """Auto-detected worker count is between 1 and 8."""
        assert 1 <= DEFAULT_WORKERS <= 8

    def test_format_aliases_normalized(self):
        """csv and json are aliases of tabular and hierarchical."""
        assert AnalysisConfig(output_format="csv").output_format == "tabular"
        assert AnalysisConfig(output_format="json").output_format == "hierarchical"

    def test_unknown_format_rejected(self):
        """Unknown output format raises InvalidConfigError."""
        with pytest.raises(InvalidConfigError):
            AnalysisConfig(output_format="xml")

    def test_zero_workers_rejected(self):
        with pytest.raises(InvalidConfigError):
            AnalysisConfig(workers=0)

    def test_non_positive_size_rejected(self):
        with pytest.raises(InvalidConfigError):
            AnalysisConfig(max_file_size_mb=0)

    def test_max_file_size_bytes(self):
        assert AnalysisConfig(max_file_size_mb=1.0).max_file_size_bytes == 1024 * 1024

    def test_frozen(self):
        """Config cannot be mutated after creation."""
        config = AnalysisConfig()
        with pytest.raises(AttributeError):
            config.extended = True  # type: ignore[misc]


class TestNormalizeFormat:
    def test_case_insensitive(self):
        assert normalize_format("JSON") == "hierarchical"

    def test_unknown(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            normalize_format("yaml")
        assert exc_info.value.key == "output_format"


class TestLoadConfig:
    """Test merging of files, environment and overrides."""

    def test_no_sources_gives_defaults(self):
        assert load_config() == AnalysisConfig()

    def test_overrides_applied(self):
        config = load_config(output_format="json", extended=True, workers=2)
        assert config.output_format == "hierarchical"
        assert config.extended is True
        assert config.workers == 2

    def test_none_overrides_ignored(self):
        """Unset CLI options do not clobber lower-priority values."""
        config = load_config(output_format=None, workers=None)
        assert config.output_format == "tabular"
        assert config.workers is None

    def test_verbosity_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_explicit_file(self, tmp_path):
        config_file = tmp_path / "custom.toml"
        config_file.write_text('output_format = "json"\nextended = true\n')
        config = load_config(config_file=config_file)
        assert config.output_format == "hierarchical"
        assert config.extended is True

    def test_archaeo_table(self, tmp_path):
        """Settings may live under an [archaeo] table."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[archaeo]\nsplit_per_file = true\nworkers = 3\n")
        config = load_config(config_file=config_file)
        assert config.split_per_file is True
        assert config.workers == 3

    def test_project_file_discovered(self, tmp_path, monkeypatch):
        """./archaeo.toml is picked up from the working directory."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "archaeo.toml").write_text('exclude_patterns = ["vendor/*"]\n')
        assert load_config().exclude_patterns == ["vendor/*"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchaeoError):
            load_config(config_file=tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "bad.toml"
        config_file.write_text("output_format = \n")
        with pytest.raises(ArchaeoError):
            load_config(config_file=config_file)

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "bad.toml"
        config_file.write_text("colour = true\n")
        with pytest.raises(ArchaeoError):
            load_config(config_file=config_file)

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("ARCHAEO_WORKERS", "3")
        monkeypatch.setenv("ARCHAEO_EXTENDED", "yes")
        monkeypatch.setenv("ARCHAEO_OUTPUT_FORMAT", "json")
        config = load_config()
        assert config.workers == 3
        assert config.extended is True
        assert config.output_format == "hierarchical"

    def test_env_var_bad_bool(self, monkeypatch):
        monkeypatch.setenv("ARCHAEO_FOLLOW_SYMLINKS", "maybe")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_override_beats_env_and_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.toml"
        config_file.write_text("workers = 2\n")
        monkeypatch.setenv("ARCHAEO_WORKERS", "3")
        assert load_config(config_file=config_file).workers == 3
        assert load_config(config_file=config_file, workers=5).workers == 5

    def test_invalid_value_in_file(self, tmp_path):
        config_file = tmp_path / "custom.toml"
        config_file.write_text("workers = 0\n")
        with pytest.raises(InvalidConfigError):
            load_config(config_file=Path(config_file))
