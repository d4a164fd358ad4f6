"""
Document store lifecycle.

All data access goes through get_store(). The store is created once at
application startup and closed at shutdown.
"""

from __future__ import annotations

import json

import asyncpg

from stagevault.config import settings
from stagevault.store import DocumentStore, MemoryDocumentStore, PostgresDocumentStore, encode_json

store: DocumentStore | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    Sets up the JSONB codec used for document bodies.
    """
    await conn.set_type_codec(
        "jsonb",
        encoder=encode_json,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def create_pool() -> asyncpg.Pool:
    return await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=60,
        init=_init_connection,
    )


async def init_store() -> DocumentStore:
    """
    Initialize the document store.
    Called once at application startup.
    """
    global store
    if store is not None:
        return store
    if settings.STORE_BACKEND == "memory":
        store = MemoryDocumentStore()
    else:
        store = PostgresDocumentStore(await create_pool())
    return store


async def close_store() -> None:
    """
    Close the document store.
    Called at application shutdown.
    """
    global store
    if store is not None:
        await store.close()
        store = None


def get_store() -> DocumentStore:
    if store is None:
        raise RuntimeError("Document store not initialized. Call init_store() first.")
    return store
