"""In-memory TTL cache for remote tool results.

Design:
- Keyed by ``method:canonical-json(arguments)``
- Expiry is enforced lazily on read; there is no background sweeper, so
  expired entries that are never read again linger until evicted
- Bounded by ``max_entries``; the oldest entry is evicted on insert (FIFO)
- Hit rate comes from real hit/miss counters
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

log = structlog.get_logger(__name__)

_DEFAULT_MAX_ENTRIES = 100


def make_cache_key(method: str, arguments: dict[str, Any] | None = None) -> str:
    """Deterministic key: same method and arguments always map to the same key."""
    canonical = json.dumps(arguments or {}, sort_keys=True, separators=(",", ":"), default=str)
    return f"{method}:{canonical}"


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups served from the cache, 0 with no lookups."""
        lookups = self.hits + self.misses
        return round(self.hits / lookups * 100, 1) if lookups else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"size": self.size, "hitRate": self.hit_rate, "hits": self.hits, "misses": self.misses}


class Cache(Protocol):
    """What the Figma client needs from a result cache."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, data: Any, ttl_sec: float | None = None) -> None: ...

    def clear(self) -> None: ...

    def stats(self) -> CacheStats: ...


@dataclass
class CacheEntry:
    key: str
    data: Any
    stored_at: float
    ttl_sec: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl_sec


@dataclass
class InMemoryCache:
    """Thread-safe TTL cache. An entry is visible while ``now - stored_at <= ttl``."""

    ttl_sec: float = 300.0
    max_entries: int = _DEFAULT_MAX_ENTRIES
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CacheEntry] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _hits: int = field(default=0, init=False)
    _misses: int = field(default=0, init=False)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self.clock()):
                del self._entries[key]
                self._misses += 1
                log.debug("cache_expired", key=key)
                return None
            self._hits += 1
            return entry.data

    def set(self, key: str, data: Any, ttl_sec: float | None = None) -> None:
        entry = CacheEntry(
            key=key,
            data=data,
            stored_at=self.clock(),
            ttl_sec=self.ttl_sec if ttl_sec is None else ttl_sec,
        )
        with self._lock:
            # Re-inserting moves the key to the newest position
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                log.debug("cache_evicted", key=oldest)
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
