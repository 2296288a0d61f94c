"""Tests for the CLI commands that need no network or linters."""

import json
import os

import pytest
from typer.testing import CliRunner

from techpref import __version__
from techpref.cli import app
from techpref.models import AnalysisResult, FailingInfo, RepositoryRecord
from techpref.rules import ALL_RULE_CHECKS, analyzed_version
from techpref.store import ResultStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project)
    for key in list(os.environ):
        if key.startswith("TECHPREF_"):
            monkeypatch.delenv(key)
    return project


@pytest.fixture
def discovery_file(workspace):
    path = workspace / "discovered.json"
    path.write_text(
        json.dumps(
            {
                "repositories": [
                    {"fullName": "acme/widgets", "cloneUrl": "https://github.com/acme/widgets.git", "stars": 10},
                    {"fullName": "acme/gadgets", "cloneUrl": "https://github.com/acme/gadgets.git", "stars": 5},
                    {"fullName": "acme/gizmos", "cloneUrl": "https://github.com/acme/gizmos.git", "stars": 1},
                ]
            }
        )
    )
    return path


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_rules_json(self):
        result = runner.invoke(app, ["rules", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["analyzedVersion"] == analyzed_version()
        assert len(payload["checks"]) == len(ALL_RULE_CHECKS)
        assert {"ruleId", "variant", "backend", "backendConfig"} <= set(payload["checks"][0])

    def test_import_then_status(self, discovery_file, workspace):
        result = runner.invoke(app, ["import-repos", str(discovery_file)])
        assert result.exit_code == 0, result.output
        assert (workspace / "data" / "repositories.json").exists()

        store = ResultStore(workspace / "data")
        widgets = RepositoryRecord("acme/widgets", "https://github.com/acme/widgets.git")
        gadgets = RepositoryRecord("acme/gadgets", "https://github.com/acme/gadgets.git")
        store.save_analysis(
            widgets, AnalysisResult(analyzed_version(), "a" * 40, "2026-01-01T00:00:00+00:00", {})
        )
        store.save_analysis(gadgets, AnalysisResult("000000000000", "b" * 40, "2025-01-01T00:00:00+00:00", {}))
        store.save_failing(gadgets, FailingInfo("c" * 40))

        result = runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0, result.output
        counts = json.loads(result.output)
        assert counts == {
            "analyzedVersion": analyzed_version(),
            "known": 3,
            "current": 1,
            "stale": 1,
            "missing": 1,
            "failing": 1,
        }

    def test_import_rejects_malformed_document(self, workspace):
        path = workspace / "broken.json"
        path.write_text('{"repositories": [{"stars": 3}]}')
        result = runner.invoke(app, ["import-repos", str(path)])
        assert result.exit_code == 1

    def test_prune_dry_run(self, discovery_file, workspace):
        runner.invoke(app, ["import-repos", str(discovery_file)])
        store = ResultStore(workspace / "data")
        old = RepositoryRecord("acme/gizmos", "https://github.com/acme/gizmos.git")
        store.save_analysis(old, AnalysisResult("000000000000", "a" * 40, "2025-01-01T00:00:00+00:00", {}))

        result = runner.invoke(app, ["prune", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "acme-gizmos.json" in result.output
        assert store.analysis_path(old).exists()

        result = runner.invoke(app, ["prune"])
        assert result.exit_code == 0, result.output
        assert not store.analysis_path(old).exists()

    def test_status_without_catalog(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "import-repos" in result.output

    def test_analyze_without_catalog(self):
        result = runner.invoke(app, ["analyze"])
        assert result.exit_code == 1

    def test_analyze_unknown_repository(self, discovery_file):
        runner.invoke(app, ["import-repos", str(discovery_file)])
        result = runner.invoke(app, ["analyze", "--repo", "acme/unknown"])
        assert result.exit_code == 1
        assert "acme/unknown" in result.output
