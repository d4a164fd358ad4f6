"""
Keyed query cache with request deduplication.

Keys are tuples: (collection,), (collection, doc_id), or
(collection, "page", params...). Concurrent fetches of the same key share
one in-flight task. Invalidation drops matching entries and marks them
stale, so a fetch that was already running when the data changed still
answers its own callers but never lands in the cache (last write wins).

Mutations invalidate the affected collection rather than patching it,
except for explicit optimistic updates through set_query_data(), which
are followed by refetch() so the optimistic value stays visible until
the store answers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CacheKey = tuple[Any, ...]


@dataclass
class _Entry:
    value: Any


class QueryCache:
    """
    In-process query cache. One instance per application.

    Staleness is tracked with a logical clock. Every load remembers the tick
    it started at; invalidating a key stamps it with a newer tick, and a load
    only lands in the cache if its key has not been stamped since it started.
    Stamps older than every running load can no longer reject anything and
    are dropped.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, _Entry] = {}
        self._inflight: dict[CacheKey, tuple[int, asyncio.Task]] = {}
        self._stamps: dict[CacheKey, int] = {}
        self._running: dict[int, int] = {}
        self._clock = 0

    def get(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def keys(self, *prefix: Any) -> list[CacheKey]:
        """Cached keys starting with `prefix`."""
        return [k for k in self._entries if k[: len(prefix)] == prefix]

    def _is_current(self, key: CacheKey, started: int) -> bool:
        return self._stamps.get(key, 0) <= started

    def _stamp(self, key: CacheKey) -> None:
        self._clock += 1
        self._stamps[key] = self._clock

    def _prune(self) -> None:
        oldest = min(self._running, default=None)
        if oldest is None:
            self._stamps.clear()
            return
        for key in [k for k, tick in self._stamps.items() if tick <= oldest]:
            del self._stamps[key]

    async def _load(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        started = self._clock
        task = asyncio.ensure_future(loader())
        self._inflight[key] = (started, task)
        self._running[started] = self._running.get(started, 0) + 1
        try:
            value = await asyncio.shield(task)
        finally:
            current = self._inflight.get(key)
            if current is not None and current[1] is task:
                del self._inflight[key]
            self._running[started] -= 1
            if not self._running[started]:
                del self._running[started]

        if self._is_current(key, started):
            self._entries[key] = _Entry(value=value)
        else:
            logger.debug("discarding superseded fetch for %s", key)
        self._prune()
        return value

    async def fetch(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for `key`, loading it if needed.

        Args:
            key: Cache key tuple
            loader: Zero-argument coroutine function producing the value

        Returns:
            The cached or freshly loaded value
        """
        entry = self._entries.get(key)
        if entry is not None:
            return entry.value

        inflight = self._inflight.get(key)
        if inflight is not None and self._is_current(key, inflight[0]):
            return await asyncio.shield(inflight[1])

        return await self._load(key, loader)

    async def refetch(self, key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Reload `key` from its source.

        Unlike invalidate(), the current value stays readable until the
        reload replaces it. Loads already running for the key are superseded.
        """
        self._stamp(key)
        return await self._load(key, loader)

    def invalidate(self, *prefix: Any) -> int:
        """
        Drop every entry whose key starts with `prefix` and supersede any
        in-flight fetch for those keys.

        Returns:
            Number of cached entries removed
        """
        keys = {k for k in (*self._entries, *self._inflight) if k[: len(prefix)] == prefix}
        keys.add(tuple(prefix))
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
            if self._running:
                self._stamp(key)
        return removed

    def set_query_data(self, key: CacheKey, updater: Callable[[Any], Any]) -> Any:
        """
        Replace a cached value in place (optimistic update).

        The updater receives the current value, or None when the key is not
        cached, and returns the new value.
        """
        entry = self._entries.get(key)
        value = updater(entry.value if entry is not None else None)
        self._entries[key] = _Entry(value=value)
        return value

    def clear(self) -> None:
        self._entries.clear()
        self._inflight.clear()
        self._stamps.clear()
        self._running.clear()


# Singleton instance
query_cache = QueryCache()
