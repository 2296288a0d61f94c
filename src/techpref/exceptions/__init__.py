"""Exception hierarchy for TechPref."""

from .analysis import (
    ProbeError,
    ProbeFailedError,
    ProbeOutputError,
    ProbeTimeoutError,
)
from .base import TechprefError
from .config import ConfigurationError, InvalidConfigError
from .persistence import CatalogError, StoreError, StoreSyncError
from .remote import GitHubError, GitHubRateLimitError, RemoteInfoError, SyncError

__all__ = [
    "TechprefError",
    "ConfigurationError",
    "InvalidConfigError",
    "CatalogError",
    "StoreError",
    "StoreSyncError",
    "SyncError",
    "RemoteInfoError",
    "GitHubError",
    "GitHubRateLimitError",
    "ProbeError",
    "ProbeTimeoutError",
    "ProbeFailedError",
    "ProbeOutputError",
]
