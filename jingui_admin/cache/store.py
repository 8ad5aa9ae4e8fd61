"""
View cache — session-scoped QueryKey -> value store.

get_or_fetch() serves hits from memory and collapses concurrent misses for
the same key into a single fetch: the first caller starts a task, later
callers await the same task. Safe without locks because asyncio only
switches tasks at await points.

invalidate() removes every entry at or below a key pattern. A fetch still
in flight for an invalidated key is detached: its waiters get the result,
but it is not written back, so a late response can never resurrect a stale
entry.

A caller that is cancelled while waiting does not cancel the shared fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from jingui_admin.cache.keys import QueryKey

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    """A cached view value."""

    key: QueryKey
    value: Any
    fetched_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    shared: int = 0
    fetches_failed: int = 0
    invalidated: int = 0


class ViewCache:
    """In-memory view cache with in-flight de-duplication and prefix invalidation."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._inflight: dict[QueryKey, asyncio.Task[Any]] = {}
        self._stats = CacheStats()

    async def get_or_fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for `key`, fetching it on a miss."""
        if not key.concrete:
            raise ValueError(f"Cannot fetch a wildcard key: {key!r}")

        entry = self._entries.get(key)
        if entry is not None:
            self._stats.hits += 1
            logger.debug("Cache hit: %s", key)
            return entry.value

        task = self._inflight.get(key)
        if task is not None:
            self._stats.shared += 1
            logger.debug("Joining in-flight fetch: %s", key)
        else:
            self._stats.misses += 1
            logger.debug("Cache miss: %s", key)
            task = asyncio.ensure_future(self._fetch(key, fetcher))
            self._inflight[key] = task

        return await asyncio.shield(task)

    async def _fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[T]]) -> T:
        me = asyncio.current_task()
        try:
            value = await fetcher()
        except BaseException:
            self._stats.fetches_failed += 1
            raise
        else:
            if self._inflight.get(key) is me:
                self._entries[key] = CacheEntry(key=key, value=value, fetched_at=time.time())
            else:
                logger.debug("Discarding result for invalidated key: %s", key)
            return value
        finally:
            if self._inflight.get(key) is me:
                del self._inflight[key]

    def invalidate(self, pattern: QueryKey) -> int:
        """Evict every entry whose key `pattern` is a prefix of. Returns the count."""
        stale = [k for k in self._entries if pattern.is_prefix_of(k)]
        for k in stale:
            del self._entries[k]

        # Detach in-flight fetches so they are not written back.
        for k in [k for k in self._inflight if pattern.is_prefix_of(k)]:
            del self._inflight[k]

        self._stats.invalidated += len(stale)
        if stale:
            logger.debug("Invalidated %d cached view(s) under %s", len(stale), pattern)
        return len(stale)

    def peek(self, key: QueryKey) -> Any | None:
        """Return the cached value without fetching, or None."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def is_fetching(self, key: QueryKey) -> bool:
        return key in self._inflight

    def clear(self) -> None:
        """Drop every entry and detach every in-flight fetch."""
        self._entries.clear()
        self._inflight.clear()

    def stats(self) -> dict[str, int]:
        return {**asdict(self._stats), "entries": len(self._entries), "inflight": len(self._inflight)}
