"""Tests for atomic artifact writes and exclusion matching."""

import os

import pytest

from archaeo.exceptions import SerializationError
from archaeo.file_ops import atomic_write_text, prepare_output_dir, should_skip_file


class TestPrepareOutputDir:
    def test_creates_missing(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert prepare_output_dir(target) == target
        assert target.is_dir()

    def test_existing_file(self, tmp_path):
        target = tmp_path / "file"
        target.write_text("x")
        with pytest.raises(SerializationError):
            prepare_output_dir(target)

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs non-root POSIX")
    def test_read_only(self, tmp_path):
        target = tmp_path / "ro"
        target.mkdir()
        target.chmod(0o500)
        try:
            with pytest.raises(SerializationError):
                prepare_output_dir(target)
        finally:
            target.chmod(0o700)


class TestAtomicWrite:
    def test_writes_exact_text(self, tmp_path):
        target = tmp_path / "out.csv"
        atomic_write_text(target, "a,b\r\nc,d\n")
        assert target.read_bytes() == b"a,b\r\nc,d\n"

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "out.json"
        target.write_text("old")
        atomic_write_text(target, "new")
        assert target.read_text() == "new"
        assert os.listdir(tmp_path) == ["out.json"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SerializationError):
            atomic_write_text(tmp_path / "missing" / "out.csv", "x")


class TestShouldSkipFile:
    @pytest.mark.parametrize(
        "rel_path,patterns,expected",
        [
            ("build/gen.c", ["build/*"], True),
            ("src/main.c", ["build/*"], False),
            ("cmake-build-debug/x.c", ["cmake-build-*/*"], True),
            ("src/third_party.c", ["*.c"], True),
            ("src/a.c", [], False),
        ],
    )
    def test_patterns(self, rel_path, patterns, expected):
        assert should_skip_file(rel_path, patterns) is expected
