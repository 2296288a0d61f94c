"""Materialize working copies at the remote's default-branch tip."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union

from ..exceptions import SyncError
from ..logging_config import get_logger
from ..models import RemoteInfo, RepositoryRecord
from .git import DEFAULT_TIMEOUT, commit_date, describe_git_error, head_commit, run_git
from .remote import GitRemoteInfoProvider, RemoteInfoProvider

logger = get_logger(__name__)


class RevisionSync:
    """Clone or update working copies under ``<repos_dir>/<owner>/<name>``.

    Working copies are shallow: a fresh clone takes only the default-branch
    tip, and an update fetches that tip and hard-resets onto it, which also
    copes with a renamed default branch.
    """

    def __init__(
        self,
        repos_dir: Union[str, Path],
        remote_provider: Optional[RemoteInfoProvider] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.repos_dir = Path(repos_dir)
        self.remote_provider = remote_provider or GitRemoteInfoProvider(timeout=timeout)
        self.timeout = timeout

    def working_copy_path(self, record: RepositoryRecord) -> Path:
        return self.repos_dir / record.owner / record.name

    def has_working_copy(self, record: RepositoryRecord) -> bool:
        return (self.working_copy_path(record) / ".git").exists()

    def remote_info(self, record: RepositoryRecord) -> RemoteInfo:
        """Default branch and latest commit of the remote.

        Raises:
            RemoteInfoError: When the default branch cannot be resolved
        """
        return self.remote_provider.remote_info(record)

    def sync(self, record: RepositoryRecord, remote: Optional[RemoteInfo] = None) -> Path:
        """Bring the working copy of ``record`` to the remote default-branch tip.

        Args:
            record: Repository to synchronize
            remote: Pre-fetched remote info; looked up when omitted and needed

        Returns:
            Path of the working copy

        Raises:
            SyncError: If cloning, fetching or resetting fails
        """
        path = self.working_copy_path(record)
        if self.has_working_copy(record):
            self._update(record, path, remote)
        else:
            self._clone(record, path, remote)
        return path

    def close(self) -> None:
        """Release the remote provider (the GitHub provider holds an HTTP client)."""
        self.remote_provider.close()

    def remove_working_copy(self, record: RepositoryRecord) -> None:
        """Delete the working copy and its owner directory once empty."""
        path = self.working_copy_path(record)
        if path.exists():
            shutil.rmtree(path, ignore_errors=True)
            logger.debug("Removed working copy %s", path)
        owner_dir = path.parent
        try:
            owner_dir.rmdir()
        except OSError:
            pass  # not empty, or already gone

    def _clone(self, record: RepositoryRecord, path: Path, remote: Optional[RemoteInfo]) -> None:
        if path.exists():
            # leftover of an interrupted clone
            shutil.rmtree(path, ignore_errors=True)
        path.parent.mkdir(parents=True, exist_ok=True)

        args = ["clone", "--depth", "1"]
        if remote is not None:
            args += ["--branch", remote.default_branch]
        args += [record.clone_url, str(path)]

        try:
            run_git(args, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            shutil.rmtree(path, ignore_errors=True)
            raise SyncError(record.full_name, describe_git_error(e))
        logger.info("Cloned %s", record.full_name)

    def _update(self, record: RepositoryRecord, path: Path, remote: Optional[RemoteInfo]) -> None:
        if remote is None:
            remote = self.remote_info(record)

        try:
            run_git(
                ["fetch", "--depth", "1", "origin", remote.default_branch],
                cwd=path,
                timeout=self.timeout,
            )
            run_git(["reset", "--hard", "FETCH_HEAD"], cwd=path, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise SyncError(record.full_name, describe_git_error(e))
        logger.info("Updated %s to %s", record.full_name, remote.default_branch)

    def head_commit(self, path: Path) -> str:
        return head_commit(path, timeout=self.timeout)

    def commit_date(self, path: Path) -> str:
        return commit_date(path, timeout=self.timeout)
