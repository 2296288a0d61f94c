"""
Persistent cache of per-repository source-file counts.

Uses diskcache for SQLite-based persistent caching. Working copies may be
deleted right after analysis, so the count used for scheduling has to outlive
them.
"""

from pathlib import Path
from typing import Optional, Union

from diskcache import Cache

from .logging_config import get_logger

logger = get_logger(__name__)


class FileCountCache:
    """
    Remembers how many source files each repository had when last counted.

    Failures are logged and degrade to "unknown"; a broken cache never stops
    a run.
    """

    def __init__(self, cache_dir: Union[str, Path] = ".techpref-cache", enabled: bool = True):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache storage
            enabled: Whether caching is enabled
        """
        self.enabled = enabled

        if self.enabled:
            self.cache = Cache(str(cache_dir))
            logger.debug(f"File-count cache initialized at {cache_dir}")
        else:
            self.cache = None
            logger.debug("File-count cache disabled")

    @staticmethod
    def _key(full_name: str) -> str:
        return f"file-count:{full_name}"

    def get(self, full_name: str) -> Optional[int]:
        """
        Get the remembered file count.

        Returns:
            Count, or None if never counted
        """
        if not self.enabled or self.cache is None:
            return None

        try:
            return self.cache.get(self._key(full_name))
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

    def set(self, full_name: str, count: int) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.set(self._key(full_name), count)
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "directory": self.cache.directory,
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        """Close cache (cleanup)."""
        if self.cache is not None:
            self.cache.close()
