"""Minimal GitHub REST client used for remote introspection.

Rate limiting is handled transparently: a rate-limited response is waited out
for the server-specified duration and the request is retried, for as long as
it takes.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import httpx

from .exceptions import GitHubError, GitHubRateLimitError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.github.com"

# Secondary (abuse) limits come without a reset hint
SECONDARY_RATE_LIMIT_WAIT = 60.0


class GitHubClient:
    """Synchronous GitHub API client over ``httpx``.

    Args:
        token: Personal access token; anonymous access when None
        api_url: REST endpoint root
        client: Pre-built ``httpx.Client`` (tests pass one with a mock transport)
        sleep: Called with the number of seconds to wait on a rate limit
        clock: Returns the current epoch time, for ``X-RateLimit-Reset``
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        timeout: float = 30.0,
    ):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "techpref-scanner",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No GitHub token configured; anonymous API limits apply")

        self._client = client or httpx.Client(timeout=timeout)
        self._client.headers.update(headers)
        self._api_url = api_url.rstrip("/")
        self._sleep = sleep
        self._clock = clock

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_json(self, path: str) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            GitHubError: Non-retryable HTTP error or transport failure
        """
        url = f"{self._api_url}/{path.lstrip('/')}"
        while True:
            try:
                response = self._client.get(url)
            except httpx.HTTPError as e:
                raise GitHubError(f"Request to {url} failed: {e}")

            try:
                self._raise_for_status(response)
            except GitHubRateLimitError as e:
                logger.warning(
                    "GitHub rate limit hit (%s). Sleeping for %.1f seconds.",
                    e.status_code,
                    e.retry_after,
                )
                self._sleep(e.retry_after)
                continue

            try:
                return response.json()
            except ValueError as e:
                raise GitHubError(f"Invalid JSON from {url}: {e}", status_code=response.status_code)

    def get_repository(self, full_name: str) -> dict:
        return self.get_json(f"repos/{full_name}")

    def get_branch_head(self, full_name: str, branch: str) -> str:
        """SHA of the latest commit on ``branch``."""
        data = self.get_json(f"repos/{full_name}/commits/{branch}")
        return data["sha"]

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        if status in (403, 429) and self._is_rate_limited(response):
            raise GitHubRateLimitError(
                f"Rate limited by GitHub ({status})",
                retry_after=self._retry_after(response),
                status_code=status,
            )

        message = _error_message(response)
        raise GitHubError(f"GitHub API error {status}: {message}", status_code=status)

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        headers = response.headers
        if "retry-after" in headers:
            return True
        if headers.get("x-ratelimit-remaining") == "0":
            return True
        if response.status_code == 429:
            return True
        return "rate limit" in _error_message(response).lower()

    def _retry_after(self, response: httpx.Response) -> float:
        """Seconds to wait before retrying a rate-limited request."""
        headers = response.headers
        retry_after = headers.get("retry-after")
        if retry_after is not None:
            try:
                return max(0.0, float(retry_after))
            except ValueError:
                pass

        if headers.get("x-ratelimit-remaining") == "0" and "x-ratelimit-reset" in headers:
            try:
                reset = float(headers["x-ratelimit-reset"])
            except ValueError:
                return SECONDARY_RATE_LIMIT_WAIT
            return max(0.0, reset - self._clock())

        return SECONDARY_RATE_LIMIT_WAIT


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""
