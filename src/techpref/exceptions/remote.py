"""Remote-facing exceptions: working-copy sync, remote introspection, GitHub API."""

from typing import Optional, Union

from .base import TechprefError


class SyncError(TechprefError):
    """Raised when a working copy cannot be cloned, fetched or reset."""

    def __init__(self, full_name: str, reason: str):
        super().__init__(
            f"Failed to synchronize {full_name}",
            details={"repository": full_name, "reason": reason},
        )
        self.full_name = full_name
        self.reason = reason


class RemoteInfoError(SyncError):
    """Raised when the default branch or latest revision cannot be resolved."""


class GitHubError(TechprefError):
    """Raised when the GitHub API answers with a non-retryable error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status": str(status_code)} if status_code is not None else None
        super().__init__(message, details=details)
        self.status_code = status_code


class GitHubRateLimitError(GitHubError):
    """Raised when GitHub enforces a primary or secondary rate limit.

    Carries the number of seconds to wait before the request may be retried.
    """

    def __init__(self, message: str, retry_after: Union[int, float], status_code: int = 403):
        super().__init__(message, status_code=status_code)
        self.retry_after = retry_after
