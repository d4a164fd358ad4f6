"""
Document store adapter.

Generic get/list/add/update/delete against named collections of JSON
documents, plus cursor-paginated listing for infinite scroll.

Two implementations of the DocumentStore protocol:
  PostgresDocumentStore — one JSONB `documents` table (see alembic/)
  MemoryDocumentStore   — in-process dicts, for tests and local runs

Documents come back as plain dicts with their ID merged in under "id".
"""

from __future__ import annotations

import base64
import binascii
import copy
import json
import logging
from datetime import UTC, date, datetime
from typing import Any
from uuid import uuid4

import asyncpg

from stagevault.exceptions import ValidationFailed, WriteFailure
from stagevault.kernel.types import SORT_ORDERS, PageResult

logger = logging.getLogger(__name__)

Document = dict[str, Any]


# ---------------------------------------------------------------------------
# JSON codec
# ---------------------------------------------------------------------------


def _encode_value(value: Any) -> Any:
    # Fixed-width UTC timestamps so that ordering on them is chronological.
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat(timespec="microseconds")
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC).isoformat(timespec="microseconds")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} cannot be stored")


def encode_json(value: Any) -> str:
    """Serialize a document (or a single JSON value) for storage."""
    return json.dumps(value, default=_encode_value, separators=(",", ":"))


def decode_json(raw: str) -> Any:
    return json.loads(raw)


def _strip_id(data: Document) -> Document:
    return {k: v for k, v in data.items() if k != "id"}


# ---------------------------------------------------------------------------
# Cursors
# ---------------------------------------------------------------------------


def encode_cursor(value: Any, doc_id: str) -> str:
    raw = encode_json([value, doc_id]).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> tuple[Any, str]:
    """
    Decode an opaque cursor into (order value, document ID).

    Raises:
        ValidationFailed: If the cursor was not produced by encode_cursor()
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        value, doc_id = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError, TypeError) as e:
        raise ValidationFailed("Invalid cursor.") from e
    if not isinstance(doc_id, str):
        raise ValidationFailed("Invalid cursor.")
    return value, doc_id


def _check_direction(direction: str) -> None:
    if direction not in SORT_ORDERS:
        raise ValidationFailed(f"Unknown direction: {direction!r}")


def _check_page_size(page_size: int) -> None:
    if page_size < 1:
        raise ValidationFailed(f"page_size must be >= 1, got {page_size}")


# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


class DocumentStore:
    """
    Abstract document store interface.
    Implement with Postgres for production, or in-memory for tests.
    """

    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Fetch one document. Returns None if not found."""
        raise NotImplementedError

    async def list(self, collection: str) -> list[Document]:
        """Fetch every document in a collection, oldest first."""
        raise NotImplementedError

    async def add(self, collection: str, data: Document) -> str:
        """Insert a document and return its new ID."""
        raise NotImplementedError

    async def update(self, collection: str, doc_id: str, data: Document) -> bool:
        """Merge top-level fields into a document. False if it does not exist."""
        raise NotImplementedError

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. False if it did not exist."""
        raise NotImplementedError

    async def list_page(
        self,
        collection: str,
        order_by: str,
        direction: str = "desc",
        page_size: int = 10,
        cursor: str | None = None,
    ) -> PageResult[Document]:
        """
        One page of documents ordered by a field, continuing after `cursor`.

        Documents without the order_by field are not listed. One extra row
        is fetched to tell whether another page exists.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources."""
        return None


def _page_from_rows(rows: list[Document], order_by: str, page_size: int) -> PageResult[Document]:
    has_more = len(rows) > page_size
    items = rows[:page_size]
    next_cursor = encode_cursor(items[-1].get(order_by), items[-1]["id"]) if items else None
    return PageResult(items=items, cursor=next_cursor, has_more=has_more)


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


def _json_order_key(value: Any) -> tuple[int, Any]:
    # Mirrors jsonb ordering: null < string < number < boolean < array < object
    if value is None:
        return (0, "")
    if isinstance(value, bool):
        return (3, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (1, value)
    if isinstance(value, list):
        return (4, encode_json(value))
    return (5, encode_json(value))


class MemoryDocumentStore(DocumentStore):
    """In-memory document store. Data passes through the JSON codec so it
    behaves like the Postgres store (timestamps come back as strings)."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, str]] = {}

    def _bucket(self, collection: str) -> dict[str, str]:
        return self.collections.setdefault(collection, {})

    def _load(self, doc_id: str, raw: str) -> Document:
        return {"id": doc_id, **decode_json(raw)}

    def _dump(self, collection: str, operation: str, data: Document) -> str:
        try:
            return encode_json(_strip_id(data))
        except (TypeError, ValueError) as e:
            raise WriteFailure(operation, collection, e) from e

    async def get(self, collection: str, doc_id: str) -> Document | None:
        raw = self._bucket(collection).get(doc_id)
        return self._load(doc_id, raw) if raw is not None else None

    async def list(self, collection: str) -> list[Document]:
        return [self._load(doc_id, raw) for doc_id, raw in self._bucket(collection).items()]

    async def add(self, collection: str, data: Document) -> str:
        raw = self._dump(collection, "add", data)
        doc_id = uuid4().hex
        self._bucket(collection)[doc_id] = raw
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Document) -> bool:
        bucket = self._bucket(collection)
        if doc_id not in bucket:
            return False
        merged = decode_json(bucket[doc_id])
        merged.update(copy.deepcopy(_strip_id(data)))
        bucket[doc_id] = self._dump(collection, "update", merged)
        return True

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._bucket(collection).pop(doc_id, None) is not None

    async def list_page(
        self,
        collection: str,
        order_by: str,
        direction: str = "desc",
        page_size: int = 10,
        cursor: str | None = None,
    ) -> PageResult[Document]:
        _check_direction(direction)
        _check_page_size(page_size)
        docs = [d for d in await self.list(collection) if order_by in d]
        descending = direction == "desc"

        def key(doc: Document) -> tuple[tuple[int, Any], str]:
            return (_json_order_key(doc.get(order_by)), doc["id"])

        docs.sort(key=key, reverse=descending)
        if cursor is not None:
            value, after_id = decode_cursor(cursor)
            boundary = (_json_order_key(value), after_id)
            docs = [d for d in docs if (key(d) < boundary if descending else key(d) > boundary)]
        return _page_from_rows(docs[: page_size + 1], order_by, page_size)


# ---------------------------------------------------------------------------
# Postgres implementation
# ---------------------------------------------------------------------------


class PostgresDocumentStore(DocumentStore):
    """
    Postgres-backed document store.

    Uses one table:
    - documents(collection, id, data JSONB, created_at)
    The pool's jsonb codec (see stagevault.db) encodes with encode_json.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @staticmethod
    def _row_to_document(row: asyncpg.Record) -> Document:
        return {"id": row["id"], **(row["data"] or {})}

    async def get(self, collection: str, doc_id: str) -> Document | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, data FROM documents WHERE collection = $1 AND id = $2",
                collection,
                doc_id,
            )
            return self._row_to_document(row) if row else None

    async def list(self, collection: str) -> list[Document]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT id, data FROM documents WHERE collection = $1 ORDER BY created_at, id",
                collection,
            )
            return [self._row_to_document(row) for row in rows]

    async def add(self, collection: str, data: Document) -> str:
        doc_id = uuid4().hex
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (collection, id, data, created_at)
                    VALUES ($1, $2, $3, now())
                    """,
                    collection,
                    doc_id,
                    _strip_id(data),
                )
        except (asyncpg.PostgresError, OSError, TypeError) as e:
            raise WriteFailure("add", collection, e) from e
        return doc_id

    async def update(self, collection: str, doc_id: str, data: Document) -> bool:
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    """
                    UPDATE documents
                    SET data = data || $3
                    WHERE collection = $1 AND id = $2
                    """,
                    collection,
                    doc_id,
                    _strip_id(data),
                )
        except (asyncpg.PostgresError, OSError, TypeError) as e:
            raise WriteFailure("update", collection, e) from e
        return result == "UPDATE 1"

    async def delete(self, collection: str, doc_id: str) -> bool:
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    "DELETE FROM documents WHERE collection = $1 AND id = $2",
                    collection,
                    doc_id,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise WriteFailure("delete", collection, e) from e
        return result == "DELETE 1"

    async def list_page(
        self,
        collection: str,
        order_by: str,
        direction: str = "desc",
        page_size: int = 10,
        cursor: str | None = None,
    ) -> PageResult[Document]:
        _check_direction(direction)
        _check_page_size(page_size)
        # direction is validated above; only "ASC"/"DESC" reach the SQL text
        sql_dir = "DESC" if direction == "desc" else "ASC"
        op = "<" if direction == "desc" else ">"

        params: list[Any] = [collection, order_by]
        where = "collection = $1 AND data ? $2"
        if cursor is not None:
            value, after_id = decode_cursor(cursor)
            params.extend([value, after_id])
            where += f" AND (data -> $2, id) {op} ($3::jsonb, $4)"
        params.append(page_size + 1)

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT id, data FROM documents
                WHERE {where}
                ORDER BY data -> $2 {sql_dir}, id {sql_dir}
                LIMIT ${len(params)}
                """,  # nosec B608
                *params,
            )
        return _page_from_rows([self._row_to_document(r) for r in rows], order_by, page_size)

    async def close(self) -> None:
        await self.pool.close()
