"""End-to-end tests of the public API."""

import json

import pytest

from archaeo import AnalysisConfig, analyze, run
from archaeo.exceptions import (
    InvalidPathError,
    NoFilesDiscoveredError,
    SerializationError,
    UnsupportedLanguageError,
)


def _artifact_bytes(directory):
    return {p.name: p.read_bytes() for p in sorted(directory.iterdir())}


class TestAnalyze:
    """Discovery, dispatch and aggregation together."""

    def test_counts_conserved(self, project):
        report = analyze(project)
        counts = report.counts
        assert counts.discovered == counts.analyzed + counts.failed
        assert (counts.discovered, counts.analyzed, counts.failed, counts.skipped) == (4, 3, 1, 1)

    def test_failure_recorded_as_data(self, project):
        report = analyze(project)
        [failure] = report.failures
        assert failure.path == "src/broken.c"
        assert failure.error_kind == "ParsingError"

    def test_records_cover_every_scope(self, project):
        report = analyze(project)
        expected = sum(s.scope.scope_count() for s in report.successes)
        assert len(report.records) == expected

    def test_single_file(self, project):
        report = analyze(project / "src" / "math.c")
        assert [s.path for s in report.successes] == ["math.c"]
        assert [r.name for r in report.records] == ["math.c", "add", "classify"]

    def test_progress_callbacks(self, project):
        discovered, completed = [], []
        analyze(project, on_discovered=discovered.extend, on_result=completed.append)
        assert len(discovered) == 4
        assert sorted(r.path for r in completed) == [d.rel_path for d in discovered]

    def test_invalid_path(self, tmp_path):
        with pytest.raises(InvalidPathError):
            analyze(tmp_path / "missing")

    def test_unsupported_single_file(self, project):
        with pytest.raises(UnsupportedLanguageError):
            analyze(project / "README.md")


class TestRun:
    def test_tabular_artifacts(self, project, tmp_path):
        outcome = run(project, tmp_path / "out")
        assert [p.name for p in outcome.artifacts] == [
            "metrics.csv",
            "failures.csv",
            "summary.csv",
        ]
        failures = (tmp_path / "out" / "failures.csv").read_text().splitlines()
        assert failures[1].startswith("src/broken.c,c,ParsingError,")

    def test_hierarchical_extended(self, project, tmp_path):
        config = AnalysisConfig(output_format="json", extended=True)
        outcome = run(project, tmp_path / "out", config=config)
        [artifact] = outcome.artifacts
        assert artifact.name == "metrics-extended.json"
        data = json.loads(artifact.read_text())
        unit = next(f for f in data["files"] if f["path"] == "src/math.c")["scope"]
        assert unit["metrics"]["fn_args_sum"] == 3

    def test_split_per_file(self, clean_project, tmp_path):
        config = AnalysisConfig(split_per_file=True)
        outcome = run(clean_project, tmp_path / "out", config=config)
        assert sorted(p.name for p in outcome.artifacts) == [
            "failures.csv",
            "math.c.csv",
            "summary.csv",
            "zoo.cpp.csv",
        ]

    @pytest.mark.parametrize("fmt", ["tabular", "hierarchical"])
    def test_identical_bytes_for_any_worker_count(self, project, tmp_path, fmt):
        serial = tmp_path / "serial"
        parallel = tmp_path / "parallel"
        run(project, serial, config=AnalysisConfig(output_format=fmt, workers=1))
        run(project, parallel, config=AnalysisConfig(output_format=fmt, workers=8))
        assert _artifact_bytes(serial) == _artifact_bytes(parallel)

    def test_nothing_discovered(self, tmp_path):
        source = tmp_path / "docs"
        source.mkdir()
        (source / "notes.txt").write_text("no code here\n")
        with pytest.raises(NoFilesDiscoveredError) as exc_info:
            run(source, tmp_path / "out")
        assert exc_info.value.skipped == 1
        assert not (tmp_path / "out").exists()

    def test_unwritable_destination(self, project, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(SerializationError):
            run(project, blocker)

    def test_all_files_failing_still_writes(self, tmp_path):
        source = tmp_path / "src"
        source.mkdir()
        (source / "bad.c").write_text("int main( { return 0; }\n")
        outcome = run(source, tmp_path / "out")
        assert outcome.report.counts.failed == 1
        metrics = (tmp_path / "out" / "metrics.csv").read_text()
        assert metrics == "file,kind,name,parent,start_line,end_line\n"

    def test_all_files_failing_in_split_mode_still_writes(self, tmp_path):
        source = tmp_path / "src"
        source.mkdir()
        (source / "bad.c").write_text("int main( { return 0; }\n")
        config = AnalysisConfig(split_per_file=True)
        outcome = run(source, tmp_path / "out", config=config)
        assert sorted(p.name for p in outcome.artifacts) == [
            "failures.csv",
            "metrics.csv",
            "summary.csv",
        ]
        metrics = (tmp_path / "out" / "metrics.csv").read_text()
        assert metrics == "file,kind,name,parent,start_line,end_line\n"

    def test_split_artifacts_of_colliding_paths_are_kept(self, tmp_path):
        source = tmp_path / "src"
        (source / "a").mkdir(parents=True)
        (source / "a" / "b.c").write_text("int one(void) { return 1; }\n")
        (source / "a__b.c").write_text("int two(void) { return 2; }\n")
        run(source, tmp_path / "out", config=AnalysisConfig(split_per_file=True))
        names = sorted(p.name for p in (tmp_path / "out").iterdir())
        assert names == ["a__b.c-2.csv", "a__b.c.csv", "failures.csv", "summary.csv"]
        functions = {
            (tmp_path / "out" / name).read_text().splitlines()[2].split(",")[2]
            for name in ("a__b.c.csv", "a__b.c-2.csv")
        }
        assert functions == {"one", "two"}
