"""Persistence exceptions: catalog document, result store and its git upstream."""

from pathlib import Path

from .base import TechprefError


class CatalogError(TechprefError):
    """Raised when the repository catalog cannot be read or written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot use repository catalog: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class StoreError(TechprefError):
    """Base class for result-store errors."""


class StoreSyncError(StoreError):
    """Raised when the result store cannot be reconciled with its upstream.

    Fatal for the current run: local rebase state is aborted first, so every
    result committed before the conflict stays intact for the next run.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Result store synchronization failed during {operation}",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason
