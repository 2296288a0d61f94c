"""Probe exceptions: backend crashes, timeouts and unreadable output.

Every probe error aborts the whole repository attempt; there is no such thing
as a partially analyzed repository.
"""

from typing import Optional

from .base import TechprefError


class ProbeError(TechprefError):
    """Base class for probe execution errors."""

    def __init__(self, probe: str, message: str, reason: Optional[str] = None):
        details = {"probe": probe}
        if reason:
            details["reason"] = reason
        super().__init__(message, details=details)
        self.probe = probe
        self.reason = reason


class ProbeTimeoutError(ProbeError):
    """Raised when a backend process exceeds the per-probe timeout."""

    def __init__(self, probe: str, timeout_seconds: float):
        super().__init__(probe, f"Probe {probe} timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class ProbeFailedError(ProbeError):
    """Raised when a backend process exits with an unexpected status."""

    def __init__(self, probe: str, returncode: int, stderr: str = ""):
        super().__init__(
            probe,
            f"Probe {probe} exited with status {returncode}",
            reason=stderr.strip()[-500:] or None,
        )
        self.returncode = returncode


class ProbeOutputError(ProbeError):
    """Raised when backend output is empty or cannot be interpreted."""

    def __init__(self, probe: str, reason: str):
        super().__init__(probe, f"Unreadable output from probe {probe}", reason=reason)
