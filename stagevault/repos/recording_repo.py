"""Repository for recording operations."""

from __future__ import annotations

from typing import Any

from stagevault.cache import query_cache
from stagevault.db import get_store
from stagevault.kernel.types import PageResult
from stagevault.models.recording import Recording
from stagevault.repos.base import DocumentRepo

# Feed pages are cached per cursor; past this many the feed cache starts over.
MAX_CACHED_FEED_PAGES = 100


class RecordingRepo(DocumentRepo[Recording]):
    """All recording-related store operations."""

    collection = "recordings"
    model = Recording

    async def create(self, payload: dict[str, Any]) -> Recording:
        """
        Insert a recording from an already denormalized payload.

        Args:
            payload: camelCase document fields

        Returns:
            Newly created Recording
        """
        return await self._insert(payload)

    async def update(self, recording_id: str, payload: dict[str, Any]) -> Recording | None:
        """
        Merge a denormalized payload into a recording. Fields missing from
        the payload keep their stored value.

        Args:
            recording_id: Recording ID
            payload: camelCase document fields

        Returns:
            Updated Recording, or None if not found
        """
        return await self._merge(recording_id, payload)

    async def feed_page(self, cursor: str | None = None, page_size: int = 10) -> PageResult[Recording]:
        """
        One page of the newest-first feed.

        Args:
            cursor: Cursor from the previous page, None for the first page
            page_size: Recordings per page

        Returns:
            PageResult with Recording items and the next cursor
        """

        async def load() -> PageResult[Recording]:
            page = await get_store().list_page(
                self.collection,
                order_by="dateAdded",
                direction="desc",
                page_size=page_size,
                cursor=cursor,
            )
            return PageResult(
                items=[self._to_model(doc) for doc in page.items],
                cursor=page.cursor,
                has_more=page.has_more,
            )

        key = (self.collection, "feed", cursor, page_size)
        if key not in query_cache and len(query_cache.keys(self.collection, "feed")) >= MAX_CACHED_FEED_PAGES:
            query_cache.invalidate(self.collection, "feed")
        return await query_cache.fetch(key, load)
