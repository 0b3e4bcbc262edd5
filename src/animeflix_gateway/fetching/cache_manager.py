"""
Thread-safe cache manager for upstream payloads.

This module provides the response cache that sits in front of the relay
fetcher. Entries carry their insertion time and are served only while they
are younger than the retention window.
"""

import time
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging

from .constants import CACHE_RETENTION

logger = logging.getLogger(__name__)

# Marks an absent or stale entry, distinct from a stored None payload
_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    """A stored payload and the time it was stored."""
    payload: Any
    inserted_at: float


class CacheManager:
    """
    Thread-safe cache manager for storing upstream API responses.

    Features:
    - Thread-safe operations using a lock
    - Fixed retention window, stale entries are treated as absent
    - Stale entries stay in memory until overwritten or pruned
    - Cache hit/miss metrics for monitoring
    """

    def __init__(self, retention_seconds: float = CACHE_RETENTION,
                 clock: Callable[[], float] = time.time):
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._stats = {
            'hits': 0,
            'misses': 0,
            'stores': 0,
            'expires': 0
        }

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at < self.retention_seconds

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._stats['misses'] += 1
                return _MISSING

            if not self._is_fresh(entry, self._clock()):
                self._stats['misses'] += 1
                logger.debug("Cache entry stale for key: %s", key)
                return _MISSING

            self._stats['hits'] += 1
            logger.debug("Cache hit for key: %s", key)
            return entry.payload

    def get(self, key: str) -> Optional[Any]:
        """
        Get a payload from cache if it exists and is within the retention window.

        Stale entries are left in place.

        Args:
            key: Cache key

        Returns:
            Cached payload if available and fresh, None otherwise
        """
        payload = self._lookup(key)
        return None if payload is _MISSING else payload

    def set(self, key: str, payload: Any):
        """
        Store a payload, replacing any existing entry for the key.

        Args:
            key: Cache key
            payload: JSON payload to store
        """
        entry = CacheEntry(payload=payload, inserted_at=self._clock())
        with self._lock:
            self._cache[key] = entry
            self._stats['stores'] += 1
        logger.debug("Cached payload for key: %s", key)

    def get_or_fetch(self, key: str, fetch_func: Callable[[], Any]) -> Any:
        """
        Get payload from cache or fetch it using the provided function.

        Only successful fetches are stored, exceptions propagate uncached.
        Concurrent misses for the same key may each call fetch_func.

        Args:
            key: Cache key
            fetch_func: Function to call on cache miss

        Returns:
            Cached or freshly fetched payload
        """
        cached_payload = self._lookup(key)
        if cached_payload is not _MISSING:
            return cached_payload

        logger.debug("Cache miss for key: %s, fetching new data", key)
        fresh_payload = fetch_func()
        self.set(key, fresh_payload)
        return fresh_payload

    def size(self) -> int:
        """Number of stored keys, stale ones included."""
        with self._lock:
            return len(self._cache)

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            previous_size = len(self._cache)
            self._cache.clear()
        logger.info("Cache cleared (%d entries removed)", previous_size)
        return previous_size

    def cleanup_expired(self) -> int:
        """Remove all stale cache entries and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items()
                if not self._is_fresh(entry, now)
            ]
            for key in expired_keys:
                del self._cache[key]
            self._stats['expires'] += len(expired_keys)

        if expired_keys:
            logger.debug("Cleaned up %d expired cache entries", len(expired_keys))
        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            stats = dict(self._stats)
            cache_size = len(self._cache)
        total_requests = stats['hits'] + stats['misses']
        hit_rate = (stats['hits'] / total_requests * 100) if total_requests > 0 else 0

        return {
            **stats,
            'hit_rate': hit_rate,
            'cache_size': cache_size
        }

    def reset_stats(self):
        """Reset cache statistics."""
        with self._lock:
            self._stats = {'hits': 0, 'misses': 0, 'stores': 0, 'expires': 0}
