"""Result persistence: per-repository documents and their git upstream."""

from .results import ResultStore
from .sync import StoreSync

__all__ = ["ResultStore", "StoreSync"]
