"""Shared CRUD over one document collection, with cached reads."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from stagevault.cache import query_cache
from stagevault.db import get_store
from stagevault.kernel.types import field_value

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(UTC)


class DocumentRepo(Generic[M]):
    """
    CRUD for one collection. Subclasses set `collection` and `model`.

    Reads go through the query cache under (collection,) for the full list
    and (collection, doc_id) for single documents. Every mutation
    invalidates the whole collection prefix.
    """

    collection: str
    model: type[M]

    def _to_model(self, doc: dict[str, Any]) -> M:
        return self.model.model_validate(doc)

    async def _load_all(self) -> list[M]:
        docs = await get_store().list(self.collection)
        return [self._to_model(doc) for doc in docs]

    async def list(self) -> list[M]:
        """
        Get every document in the collection.

        Returns:
            Models in insertion order
        """
        return await query_cache.fetch((self.collection,), self._load_all)

    async def get(self, doc_id: str) -> M | None:
        """
        Get one document by ID.

        Args:
            doc_id: Document ID

        Returns:
            Model if found, None otherwise
        """

        async def load() -> M | None:
            doc = await get_store().get(self.collection, doc_id)
            return self._to_model(doc) if doc else None

        return await query_cache.fetch((self.collection, doc_id), load)

    async def get_many(self, doc_ids: list[str]) -> list[M]:
        """Resolve IDs in order, skipping any that no longer exist."""
        by_id = {field_value(m, "id"): m for m in await self.list()}
        return [by_id[i] for i in doc_ids if i in by_id]

    async def _insert(self, data: dict[str, Any], invalidate: bool = True) -> M:
        now = utcnow()
        payload = {**data, "dateAdded": now, "dateUpdated": now}
        doc_id = await get_store().add(self.collection, payload)
        if invalidate:
            self.invalidate()
        logger.info("created %s/%s", self.collection, doc_id)
        return self._to_model({"id": doc_id, **payload})

    async def _merge(self, doc_id: str, data: dict[str, Any]) -> M | None:
        payload = {**data, "dateUpdated": utcnow()}
        updated = await get_store().update(self.collection, doc_id, payload)
        self.invalidate()
        if not updated:
            return None
        return await self.get(doc_id)

    async def delete(self, doc_id: str) -> bool:
        """
        Delete a document. References to it elsewhere are left dangling.

        Args:
            doc_id: Document ID

        Returns:
            True if deleted, False if not found
        """
        deleted = await get_store().delete(self.collection, doc_id)
        self.invalidate()
        if deleted:
            logger.info("deleted %s/%s", self.collection, doc_id)
        return deleted

    def invalidate(self) -> None:
        query_cache.invalidate(self.collection)
