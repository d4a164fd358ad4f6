"""Tests for the keyed query cache: dedup, invalidation, optimistic updates, refetch."""

from __future__ import annotations

import asyncio

import pytest

from stagevault.cache import QueryCache

pytestmark = pytest.mark.asyncio(loop_scope="session")


class TestFetch:
    async def test_second_fetch_is_cached(self):
        cache = QueryCache()
        calls = 0

        async def loader():
            nonlocal calls
            calls += 1
            return [1, 2]

        assert await cache.fetch(("people",), loader) == [1, 2]
        assert await cache.fetch(("people",), loader) == [1, 2]
        assert calls == 1

    async def test_concurrent_fetches_share_one_load(self):
        cache = QueryCache()
        calls = 0
        release = asyncio.Event()

        async def loader():
            nonlocal calls
            calls += 1
            await release.wait()
            return "value"

        first = asyncio.ensure_future(cache.fetch(("theatres",), loader))
        second = asyncio.ensure_future(cache.fetch(("theatres",), loader))
        await asyncio.sleep(0)
        release.set()
        assert await asyncio.gather(first, second) == ["value", "value"]
        assert calls == 1

    async def test_loader_error_is_not_cached(self):
        cache = QueryCache()

        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.fetch(("people",), failing)
        assert ("people",) not in cache


class TestInvalidate:
    async def test_prefix_drops_item_keys(self):
        cache = QueryCache()

        async def loader():
            return "x"

        await cache.fetch(("people",), loader)
        await cache.fetch(("people", "p1"), loader)
        await cache.fetch(("theatres",), loader)
        assert cache.invalidate("people") == 2
        assert ("people",) not in cache
        assert ("people", "p1") not in cache
        assert ("theatres",) in cache

    async def test_superseded_fetch_is_not_stored(self):
        cache = QueryCache()
        release = asyncio.Event()

        async def stale_loader():
            await release.wait()
            return "stale"

        pending = asyncio.ensure_future(cache.fetch(("recordings",), stale_loader))
        await asyncio.sleep(0)
        cache.invalidate("recordings")
        release.set()
        assert await pending == "stale"
        assert ("recordings",) not in cache

        async def fresh_loader():
            return "fresh"

        assert await cache.fetch(("recordings",), fresh_loader) == "fresh"


class TestSetQueryData:
    async def test_optimistic_append(self):
        cache = QueryCache()

        async def loader():
            return ["a"]

        await cache.fetch(("people",), loader)
        cache.set_query_data(("people",), lambda current: [*current, "b"])
        assert cache.get(("people",)) == ["a", "b"]

    async def test_clear(self):
        cache = QueryCache()
        cache.set_query_data(("people",), lambda current: ["a"])
        cache.clear()
        assert cache.get(("people",)) is None


class TestRefetch:
    async def test_current_value_readable_until_reload_lands(self):
        cache = QueryCache()
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return ["a", "b"]

        cache.set_query_data(("people",), lambda current: ["a", "optimistic"])
        pending = asyncio.ensure_future(cache.refetch(("people",), loader))
        await asyncio.sleep(0)
        assert cache.get(("people",)) == ["a", "optimistic"]
        assert await cache.fetch(("people",), loader) == ["a", "optimistic"]

        release.set()
        assert await pending == ["a", "b"]
        assert cache.get(("people",)) == ["a", "b"]

    async def test_supersedes_running_fetch(self):
        cache = QueryCache()
        release_old = asyncio.Event()

        async def old_loader():
            await release_old.wait()
            return "old"

        async def new_loader():
            return "new"

        pending = asyncio.ensure_future(cache.fetch(("people",), old_loader))
        await asyncio.sleep(0)
        assert await cache.refetch(("people",), new_loader) == "new"
        release_old.set()
        assert await pending == "old"
        assert cache.get(("people",)) == "new"

    async def test_invalidate_during_refetch_discards_result(self):
        cache = QueryCache()
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return "stale"

        pending = asyncio.ensure_future(cache.refetch(("people",), loader))
        await asyncio.sleep(0)
        cache.invalidate("people")
        release.set()
        assert await pending == "stale"
        assert ("people",) not in cache


class TestBookkeeping:
    async def test_stale_marks_dropped_once_loads_finish(self):
        cache = QueryCache()
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return "x"

        pending = asyncio.ensure_future(cache.fetch(("recordings", "feed", "c1", 10), loader))
        await asyncio.sleep(0)
        cache.invalidate("recordings")
        assert cache._stamps
        release.set()
        await pending
        assert cache._stamps == {}
        assert cache._running == {}

    async def test_invalidate_without_running_loads_keeps_nothing(self):
        cache = QueryCache()
        for n in range(50):
            cache.invalidate("recordings", "feed", f"c{n}", 10)
        assert cache._stamps == {}

    async def test_keys_by_prefix(self):
        cache = QueryCache()
        cache.set_query_data(("recordings", "feed", None, 10), lambda _: 1)
        cache.set_query_data(("recordings", "feed", "c1", 10), lambda _: 2)
        cache.set_query_data(("people",), lambda _: 3)
        assert sorted(cache.keys("recordings", "feed"), key=str) == [
            ("recordings", "feed", "c1", 10),
            ("recordings", "feed", None, 10),
        ]
