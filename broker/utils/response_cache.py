"""In-memory TTL cache for upstream responses.

Entries are never evicted: an expired entry stops being served as fresh but
stays available through peek_stale() as a last-resort fallback.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CacheEntry:
    """Cached value together with the time it was stored."""

    value: Any
    stored_at: float


class ResponseCache:
    """Thread-safe, in-memory response cache with read-time freshness checks.

    Attributes:
        ttl_seconds: Age below which an entry is considered fresh.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self._ttl = ttl_seconds
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._stale_reads = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"ResponseCache(ttl_seconds={self._ttl}, size={len(self._store)}, "
            f"hits={self._hits}, misses={self._misses}, stale_reads={self._stale_reads})"
        )

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value only if it is still fresh.

        Args:
            key: Resource key.
            default: Returned on a miss. Pass a sentinel to tell a miss
                apart from a cached None.

        Returns:
            Cached value, or default if never stored or older than the TTL.
        """

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key, "reason": "not_found"})
                return default

            age = self._clock() - entry.stored_at
            if age >= self._ttl:
                self._misses += 1
                logger.debug(
                    "cache.miss",
                    extra={"cache_key": key, "reason": "expired", "age_s": round(age, 3)},
                )
                return default

            self._hits += 1
            logger.debug("cache.hit", extra={"cache_key": key, "age_s": round(age, 3)})
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous entry for the key."""

        with self._lock:
            self._store[key] = CacheEntry(value=value, stored_at=self._clock())
            logger.debug(
                "cache.put",
                extra={"cache_key": key, "size": len(self._store), "ttl_s": self._ttl},
            )

    def peek_stale(self, key: str, default: Any = None) -> Any:
        """Return the last stored value for key regardless of its age, or default."""

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default
            self._stale_reads += 1
            return entry.value

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._stale_reads = 0

    def stats(self) -> dict[str, int | float]:
        """Return lightweight cache metrics without exposing values."""

        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "stale_reads": self._stale_reads,
            }
