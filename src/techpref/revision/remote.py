"""Remote introspection: default branch and latest commit without a clone."""

from __future__ import annotations

import re
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from ..config import ScanConfig
from ..exceptions import GitHubError, RemoteInfoError
from ..github import GitHubClient
from ..logging_config import get_logger
from ..models import RemoteInfo, RepositoryRecord
from .git import DEFAULT_TIMEOUT, describe_git_error, run_git

logger = get_logger(__name__)

_SYMREF_PATTERN = re.compile(r"ref: refs/heads/(.*)\tHEAD\n(.*)\tHEAD")


def parse_ls_remote(output: str) -> Optional[RemoteInfo]:
    """Parse ``git ls-remote --symref <url> HEAD`` output.

    Returns None when the remote does not advertise a symbolic HEAD.
    """
    match = _SYMREF_PATTERN.search(output)
    if match is None:
        return None
    branch, sha = match.group(1).strip(), match.group(2).strip()
    if not branch or not sha:
        return None
    return RemoteInfo(default_branch=branch, latest_commit=sha)


class RemoteInfoProvider(ABC):
    """Resolves the default branch and its tip for a repository."""

    @abstractmethod
    def remote_info(self, record: RepositoryRecord) -> RemoteInfo:
        """Raises RemoteInfoError when the remote cannot be resolved."""

    def close(self) -> None:
        pass


class GitRemoteInfoProvider(RemoteInfoProvider):
    """ls-remote based lookup: no API, no rate limits."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def remote_info(self, record: RepositoryRecord) -> RemoteInfo:
        return self.lookup_url(record.clone_url, full_name=record.full_name)

    def lookup_url(self, clone_url: str, full_name: Optional[str] = None) -> RemoteInfo:
        name = full_name or clone_url
        try:
            output = run_git(
                ["ls-remote", "--symref", clone_url, "HEAD"], timeout=self.timeout
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise RemoteInfoError(name, describe_git_error(e))

        info = parse_ls_remote(output)
        if info is None:
            raise RemoteInfoError(name, "could not determine default branch")
        return info


class GitHubRemoteInfoProvider(RemoteInfoProvider):
    """GitHub REST lookup; waits out rate limits inside the client."""

    def __init__(self, client: GitHubClient):
        self.client = client

    def remote_info(self, record: RepositoryRecord) -> RemoteInfo:
        try:
            repo = self.client.get_repository(record.full_name)
            branch = repo["default_branch"]
            sha = self.client.get_branch_head(record.full_name, branch)
        except GitHubError as e:
            raise RemoteInfoError(record.full_name, str(e))
        except (KeyError, TypeError) as e:
            raise RemoteInfoError(record.full_name, f"unexpected API response: {e}")
        return RemoteInfo(default_branch=branch, latest_commit=sha)

    def close(self) -> None:
        self.client.close()


def create_remote_info_provider(config: ScanConfig) -> RemoteInfoProvider:
    """Build the provider selected by ``config.remote_info_source``."""
    if config.remote_info_source == "github":
        client = GitHubClient(token=config.github_token, api_url=config.github_api_url)
        return GitHubRemoteInfoProvider(client)
    return GitRemoteInfoProvider(timeout=config.git_timeout_seconds)
