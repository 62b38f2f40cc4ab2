"""In-memory caching service with TTL support."""

from functools import lru_cache
from typing import Any, Optional
from cachetools import TTLCache
import threading

from competitions import config
from competitions.types import CacheStatsDict


class CacheService:
    """Thread-safe in-memory cache for external rating snapshots.

    Entries expire after the rating freshness window, so a stale snapshot is
    never served and the next request re-fetches it.
    """

    def __init__(self, ttl: Optional[int] = None, maxsize: int = 16) -> None:
        """Initialize the cache store.

        Args:
            ttl: Seconds before an entry is stale (defaults to RATINGS_CACHE_TTL_SECONDS)
            maxsize: Maximum number of entries
        """
        self._ratings_cache: TTLCache = TTLCache(
            maxsize=maxsize,
            ttl=ttl if ttl is not None else config.RATINGS_CACHE_TTL_SECONDS,
        )

        # Lock for thread safety
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Get a value from the cache.

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            return self._ratings_cache.get(key)

    def set(self, key: str, value: Any) -> None:
        """Set a value in the cache."""
        with self._lock:
            self._ratings_cache[key] = value

    def delete(self, key: str) -> bool:
        """Delete a value from the cache.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            if key in self._ratings_cache:
                del self._ratings_cache[key]
                return True
            return False

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._ratings_cache.clear()

    def stats(self) -> CacheStatsDict:
        """Get cache statistics."""
        with self._lock:
            return {
                "ratings": {
                    "size": len(self._ratings_cache),
                    "maxsize": self._ratings_cache.maxsize,
                    "ttl": int(self._ratings_cache.ttl),
                },
            }


@lru_cache
def get_cache_service() -> CacheService:
    """Get the global cache service instance."""
    return CacheService()
