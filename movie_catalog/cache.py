"""In-memory storage for short-lived cached responses."""

import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Thread-safe in-memory key/value cache with per-entry expiry.

    Expired entries are dropped lazily on read and swept periodically on
    write to prevent memory leaks.
    """

    def __init__(self, cleanup_interval: int = 300):
        """
        Initialize the cache.

        Args:
            cleanup_interval: Seconds between sweeps of expired entries (default: 300)
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.monotonic()

    def _cleanup_expired_entries(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired_keys = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired_keys:
            del self._entries[key]

        self._last_cleanup = now

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.expires_at <= time.monotonic():
                del self._entries[key]
                return None

            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Seconds until the entry expires; non-positive values disable caching
        """
        if ttl <= 0:
            return

        with self._lock:
            now = time.monotonic()
            self._cleanup_expired_entries(now)
            self._entries[key] = CacheEntry(value=value, expires_at=now + ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_all(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._entries.clear()

    def get_entry_count(self) -> int:
        with self._lock:
            return len(self._entries)


# Global cache instance
_cache_instance: Optional[TTLCache] = None
_cache_lock = threading.Lock()


def get_cache() -> TTLCache:
    """Get the global cache instance."""
    global _cache_instance

    if _cache_instance is None:
        with _cache_lock:
            if _cache_instance is None:
                _cache_instance = TTLCache()

    return _cache_instance


def reset_cache() -> None:
    """Reset the global cache instance (useful for testing)."""
    global _cache_instance

    with _cache_lock:
        if _cache_instance is not None:
            _cache_instance.clear_all()
        _cache_instance = None
