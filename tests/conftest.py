"""Shared test fixtures for TechPref tests."""

import subprocess
from pathlib import Path

import pytest

from techpref.models import RepositoryRecord


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


class GitRepos:
    """Builds throwaway git repositories for tests."""

    def __init__(self, root: Path):
        self.root = root

    def git(self, cwd: Path, *args: str) -> str:
        return _git(cwd, *args)

    def init(self, name: str, branch: str = "main", bare: bool = False) -> Path:
        path = self.root / name
        path.mkdir(parents=True)
        args = ["init", "--initial-branch", branch]
        if bare:
            args.append("--bare")
        _git(path, *args)
        if not bare:
            _git(path, "config", "user.email", "test@test.com")
            _git(path, "config", "user.name", "Test")
            _git(path, "config", "commit.gpgsign", "false")
        return path

    def commit(self, repo: Path, files: dict, message: str = "update") -> str:
        """Write ``files`` (relative path -> content), commit, return the new SHA."""
        for rel, content in files.items():
            target = repo / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        _git(repo, "add", "-A")
        _git(repo, "commit", "-m", message)
        return _git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repos(tmp_path):
    """Factory for temporary git repositories."""
    return GitRepos(tmp_path / "git")


@pytest.fixture
def record():
    """A catalog record pointing nowhere in particular."""
    return RepositoryRecord(
        full_name="acme/widgets",
        clone_url="https://example.invalid/acme/widgets.git",
        stars=1200,
        description="Widgets for everyone",
    )
