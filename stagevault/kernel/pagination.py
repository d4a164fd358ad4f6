"""
StageVault Kernel — Pagination Engine

Two variants:

  Offset   — slice an ordered sequence into fixed-size pages. Page numbers
             are 1-based and always clamp into [1, total_pages]; an empty
             sequence still has one (empty) page.

  Cursor   — infinite scroll over the store's cursor listing. The store
             fetches page_size + 1 rows so it knows whether more exist.
             InfiniteFeed accumulates pages append-only and fetches the next
             one when the scroll sentinel becomes visible.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

from stagevault.kernel.types import DEFAULT_PAGE_SIZE, Page, PageResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchPage = Callable[[str | None, int], Awaitable[PageResult[T]]]


# ---------------------------------------------------------------------------
# Offset pagination
# ---------------------------------------------------------------------------


def _check_page_size(page_size: int) -> None:
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")


def total_pages(total_items: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    _check_page_size(page_size)
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, pages))


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """
    Slice one page out of an ordered sequence.

    Args:
        items: Already filtered and sorted records
        page: Requested 1-based page; out-of-range values clamp
        page_size: Items per page (>= 1)

    Returns:
        Page with the clamped current_page
    """
    pages = total_pages(len(items), page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        current_page=current,
        total_pages=pages,
        total_items=len(items),
        page_size=page_size,
    )


class Paginator:
    """
    Stateful offset pager for a view whose sequence can change under it.

    When filtering shrinks the sequence below the stored page, page_of()
    re-clamps the stored page rather than returning an empty slice.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        _check_page_size(page_size)
        self.page_size = page_size
        self.current_page = 1
        self._total_pages = 1

    @property
    def total_pages(self) -> int:
        return self._total_pages

    def page_of(self, items: Sequence[T]) -> Page[T]:
        page = paginate(items, self.current_page, self.page_size)
        self.current_page = page.current_page
        self._total_pages = page.total_pages
        return page

    def set_page(self, page: int) -> int:
        self.current_page = clamp_page(page, self._total_pages)
        return self.current_page

    def next_page(self) -> int:
        if self.current_page < self._total_pages:
            self.current_page += 1
        return self.current_page

    def prev_page(self) -> int:
        if self.current_page > 1:
            self.current_page -= 1
        return self.current_page

    def first_page(self) -> int:
        self.current_page = 1
        return self.current_page

    def last_page(self) -> int:
        self.current_page = self._total_pages
        return self.current_page


# ---------------------------------------------------------------------------
# Cursor pagination (infinite scroll)
# ---------------------------------------------------------------------------


class InfiniteFeed(Generic[T]):
    """
    Accumulates cursor pages into one flat, append-only list.

    Usage:
        feed = InfiniteFeed(fetch, page_size=10)
        await feed.load_first()
        ...
        await feed.on_sentinel_visible()   # when the scroll boundary shows
    """

    def __init__(self, fetch: FetchPage[T], page_size: int = 10) -> None:
        _check_page_size(page_size)
        self._fetch = fetch
        self.page_size = page_size
        self.pages: list[PageResult[T]] = []
        self.has_more = True
        self.is_fetching = False
        self._cursor: str | None = None
        # Bumped on every reset; a fetch started under an older value is dropped.
        self._generation = 0
        self._request = 0

    @property
    def items(self) -> list[T]:
        return [item for page in self.pages for item in page.items]

    @property
    def cursor(self) -> str | None:
        return self._cursor

    async def load_first(self) -> list[T]:
        """Reset the feed and load its first page. Fetches still running are superseded."""
        self._generation += 1
        self.pages = []
        self._cursor = None
        self.has_more = True
        await self._load_next()
        return self.items

    async def on_sentinel_visible(self) -> bool:
        """
        Called when the sentinel element scrolls into view.

        Returns:
            True if a page was fetched, False if there was nothing to do
        """
        if not self.has_more or self.is_fetching:
            return False
        await self._load_next()
        return True

    async def _load_next(self) -> None:
        generation = self._generation
        self._request += 1
        request = self._request
        self.is_fetching = True
        try:
            result = await self._fetch(self._cursor, self.page_size)
        finally:
            if request == self._request:
                self.is_fetching = False
        if generation != self._generation:
            logger.debug("dropping feed page fetched before reset")
            return
        self.pages.append(result)
        self.has_more = result.has_more
        if result.cursor is not None:
            self._cursor = result.cursor
        logger.debug(
            "feed page %d loaded: %d items, has_more=%s",
            len(self.pages),
            len(result.items),
            result.has_more,
        )

    def __len__(self) -> int:
        return sum(len(page.items) for page in self.pages)

    def __iter__(self) -> Any:
        return iter(self.items)
