"""
Bounded TTL + LRU cache for external provider results.

Entries expire lazily (checked on read) and the least-recently-accessed entry
is evicted eagerly when a write would exceed capacity. The cache is
process-local; multi-instance deployments need sticky per-user routing or a
shared external cache.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    payload: Any
    citations: List[str] = field(default_factory=list)
    created_at: float = 0.0
    last_accessed_at: float = 0.0


class TTLCache:
    """
    In-memory cache with per-entry TTL and LRU eviction.

    Args:
        name: Label used in logs and stats
        max_size: Capacity; inserting beyond it evicts the least-recently-accessed entry
        ttl_seconds: Lifetime of an entry measured from its creation
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        name: str,
        max_size: int = 100,
        ttl_seconds: float = 1800,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.name = name
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # Ordered from least to most recently accessed
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` and mark it recently used, or None."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        now = self._clock()
        if self._is_expired(entry, now):
            del self._entries[key]
            self.misses += 1
            logger.debug(f"[{self.name}] cache entry expired: {key}")
            return None

        entry.last_accessed_at = now
        self._entries.move_to_end(key)
        self.hits += 1
        logger.debug(f"[{self.name}] cache hit: {key}")
        return entry

    def get(self, key: str) -> Optional[Any]:
        entry = self.get_entry(key)
        return entry.payload if entry else None

    def set(self, key: str, payload: Any, citations: Optional[List[str]] = None) -> CacheEntry:
        """Insert or replace an entry, evicting the least-recently-accessed one at capacity."""
        now = self._clock()

        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            evicted_key, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"[{self.name}] evicted least recently used entry: {evicted_key}")

        entry = CacheEntry(
            key=key,
            payload=payload,
            citations=list(citations or []),
            created_at=now,
            last_accessed_at=now,
        )
        self._entries[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self):
        self._entries.clear()

    def clear_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._is_expired(entry, self._clock())

    def stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": len(self._entries),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }
