"""
Result cache: TTL memoization of composite scores keyed by (kind, identifier).

- An entry is valid while now - created_at < ttl; expired entries are dropped
  lazily on read.
- Capacity is bounded; the oldest entry is evicted first regardless of TTL.
- Concurrent misses for one key share a single in-flight computation. The
  computation is shielded, so a caller that gives up still lets it finish and
  populate the cache.
- Concurrent writes for one key: last write wins.

The clock is injectable so tests can move time without sleeping.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any

from nilo_trust.config.env import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_SEC
from nilo_trust.nilo_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    key: Hashable
    payload: Any
    created_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.created_at < self.ttl


class ResultCache:
    """In-process TTL cache with oldest-first eviction."""

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL_SEC,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be > 0, got {ttl}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.ttl = float(ttl)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: OrderedDict[Hashable, CacheEntry] = OrderedDict()
        self._inflight: dict[Hashable, asyncio.Future[Any]] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_valid(self._clock())

    def get(self, key: Hashable) -> Any | None:
        """Return the cached payload, or None if absent or expired (expired entry is removed)."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            self.misses += 1
            logger.debug("cache_expired", key=str(key))
            return None
        self.hits += 1
        return entry.payload

    def put(self, key: Hashable, payload: Any, ttl: float | None = None) -> CacheEntry:
        """Store payload under key; a re-put refreshes created_at and moves it to newest."""
        entry = CacheEntry(
            key=key,
            payload=payload,
            created_at=self._clock(),
            ttl=self.ttl if ttl is None else float(ttl),
        )
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug("cache_evicted", key=str(evicted))
        return entry

    def invalidate(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_sec": self.ttl,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "inflight": len(self._inflight),
        }

    async def get_or_compute(
        self,
        key: Hashable,
        compute_fn: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
        should_cache: Callable[[Any], bool] | None = None,
    ) -> Any:
        """
        Return the cached payload for key, or compute, store and return it.

        Callers that miss while a computation for key is already running await
        that computation instead of starting another. should_cache(result) can
        veto storing a result (it is still returned).
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("cache_hit", key=str(key))
            return cached

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._compute(key, compute_fn, ttl, should_cache))
            self._inflight[key] = future
        else:
            logger.debug("cache_inflight_join", key=str(key))
        return await asyncio.shield(future)

    async def _compute(
        self,
        key: Hashable,
        compute_fn: Callable[[], Awaitable[Any]],
        ttl: float | None,
        should_cache: Callable[[Any], bool] | None,
    ) -> Any:
        try:
            result = await compute_fn()
            if should_cache is None or should_cache(result):
                self.put(key, result, ttl)
            return result
        finally:
            self._inflight.pop(key, None)
