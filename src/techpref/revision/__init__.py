"""Working-copy synchronization and remote introspection."""

from .git import commit_date, head_commit, run_git
from .remote import (
    GitHubRemoteInfoProvider,
    GitRemoteInfoProvider,
    RemoteInfoProvider,
    create_remote_info_provider,
    parse_ls_remote,
)
from .sync import RevisionSync

__all__ = [
    "GitHubRemoteInfoProvider",
    "GitRemoteInfoProvider",
    "RemoteInfoProvider",
    "RevisionSync",
    "commit_date",
    "create_remote_info_provider",
    "head_commit",
    "parse_ls_remote",
    "run_git",
]
