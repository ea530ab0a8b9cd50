"""Bounded cache with least-recently-used eviction and per-entry TTL."""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000


@dataclass
class CacheEntry(Generic[V]):
    """Cached value with its timestamps (epoch ms)."""
    value: V
    created_at: float
    last_accessed: float


class LRUCache(Generic[K, V]):
    """
    In-memory LRU cache with absolute expiration.

    Entries are kept in an OrderedDict ordered from least to most recently
    accessed. Expiration is measured from ``created_at`` and is independent
    of access order: reading an entry does not extend its life.

    Attributes:
        max_size: Maximum number of entries before eviction
        expiration_ms: Time-to-live of an entry in milliseconds

    Note:
        A lock guards the dict because the periodic expiry sweep runs on a
        timer thread.
    """

    def __init__(
        self,
        max_size: int = 50,
        expiration_ms: float = 300000,
        clock: Callable[[], float] = now_ms,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got: {max_size}")
        self.max_size = max_size
        self.expiration_ms = expiration_ms
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.RLock()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.expiration_ms

    def get(self, key: K) -> Optional[V]:
        """Return the value and mark it most recently used, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            now = self._clock()
            if self._is_expired(entry, now):
                del self._entries[key]
                logger.debug(f"Cache entry expired on access: {key}")
                return None

            entry.last_accessed = now
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: K, value: V):
        """Store a value, evicting the least recently used entry if full."""
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted least recently used cache entry: {evicted}")

            now = self._clock()
            self._entries[key] = CacheEntry(value=value, created_at=now, last_accessed=now)

    def clean_expired(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def entry(self, key: K) -> Optional[CacheEntry[V]]:
        """Peek at an entry without touching its LRU position or expiring it."""
        with self._lock:
            return self._entries.get(key)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: K) -> bool:
        return key in self._entries

    def snapshot(self) -> Dict[K, V]:
        """Copy of the current values, least recently used first."""
        with self._lock:
            return {key: entry.value for key, entry in self._entries.items()}

    def __str__(self) -> str:
        return f"LRUCache: size={len(self)}/{self.max_size}, expiration={self.expiration_ms}ms"
