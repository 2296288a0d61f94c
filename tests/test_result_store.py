"""Tests for the file-backed result store."""

import json

from techpref.models import AnalysisResult, FailingInfo, RepositoryRecord, VariantResult
from techpref.store import ResultStore


def make_result(version: str = "v1", commit: str = "a" * 40) -> AnalysisResult:
    return AnalysisResult(
        analyzed_version=version,
        analyzed_commit=commit,
        analyzed_commit_date="2026-01-01T00:00:00+00:00",
        checks={"semi": {"always": VariantResult(0), "never": VariantResult(0)}},
    )


class TestAnalysisDocuments:
    def test_layout(self, tmp_path, record):
        store = ResultStore(tmp_path / "data")
        assert store.analysis_path(record) == tmp_path / "data" / "analysis" / "acme-widgets.json"
        assert store.failing_path(record) == (
            tmp_path / "data" / "analysis" / "failing" / "acme-widgets.json"
        )

    def test_missing_analysis(self, tmp_path, record):
        assert ResultStore(tmp_path).load_analysis(record) is None

    def test_save_and_load(self, tmp_path, record):
        store = ResultStore(tmp_path)
        result = make_result()
        store.save_analysis(record, result)
        assert store.load_analysis(record) == result
        raw = json.loads(store.analysis_path(record).read_text())
        assert raw["analyzedVersion"] == "v1"

    def test_corrupt_document_treated_as_absent(self, tmp_path, record):
        store = ResultStore(tmp_path)
        path = store.analysis_path(record)
        path.parent.mkdir(parents=True)
        path.write_text('{"analyzedVersion": ')
        assert store.load_analysis(record) is None

    def test_incomplete_document_treated_as_absent(self, tmp_path, record):
        store = ResultStore(tmp_path)
        path = store.analysis_path(record)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"analyzedVersion": "v1"}))
        assert store.load_analysis(record) is None

    def test_load_all_analyses(self, tmp_path, record):
        store = ResultStore(tmp_path)
        other = RepositoryRecord("acme/gadgets", "u")
        store.save_analysis(record, make_result())
        snapshot = store.load_all_analyses([record, other])
        assert list(snapshot) == ["acme/widgets"]


class TestFailureMarkers:
    def test_save_load_remove(self, tmp_path, record):
        store = ResultStore(tmp_path)
        assert store.load_failing(record) is None

        store.save_failing(record, FailingInfo(failed_commit="b" * 40))
        assert store.load_failing(record) == FailingInfo("b" * 40)

        assert store.remove_failing(record) is True
        assert store.load_failing(record) is None
        assert store.remove_failing(record) is False

    def test_markers_do_not_count_as_analyses(self, tmp_path, record):
        store = ResultStore(tmp_path)
        store.save_failing(record, FailingInfo("c" * 40))
        assert store.load_analysis(record) is None
        assert store.prune("v1") == []


class TestPrune:
    def test_removes_other_versions(self, tmp_path):
        store = ResultStore(tmp_path)
        old = RepositoryRecord("a/old", "u")
        new = RepositoryRecord("a/new", "u")
        store.save_analysis(old, make_result(version="v0"))
        store.save_analysis(new, make_result(version="v1"))

        assert store.prune("v1") == ["a-old.json"]
        assert store.load_analysis(old) is None
        assert store.load_analysis(new) is not None

    def test_dry_run_keeps_files(self, tmp_path):
        store = ResultStore(tmp_path)
        old = RepositoryRecord("a/old", "u")
        store.save_analysis(old, make_result(version="v0"))

        assert store.prune("v1", dry_run=True) == ["a-old.json"]
        assert store.load_analysis(old) is not None

    def test_unreadable_documents_are_pruned(self, tmp_path):
        store = ResultStore(tmp_path)
        store.analysis_dir.mkdir(parents=True)
        (store.analysis_dir / "x-y.json").write_text("garbage")
        assert store.prune("v1") == ["x-y.json"]

    def test_no_analysis_dir(self, tmp_path):
        assert ResultStore(tmp_path / "nothing").prune("v1") == []
