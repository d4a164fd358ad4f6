"""
Pytest configuration and fixtures for StageVault tests.

Routes and repos run against MemoryDocumentStore; no database is needed.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ["TESTING"] = "true"
os.environ["STORE_BACKEND"] = "memory"
os.environ["IDP_JWKS_URL"] = ""
os.environ.setdefault("IDP_JWT_SECRET", "test-secret-key-for-testing-only-0123456789")
os.environ.setdefault("R2_PUBLIC_URL", "https://images.stagevault.app")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from stagevault import db  # noqa: E402
from stagevault.auth import create_id_token  # noqa: E402
from stagevault.cache import query_cache  # noqa: E402
from stagevault.main import app  # noqa: E402
from stagevault.models.user import CreateUserRequest  # noqa: E402
from stagevault.repos.user_repo import UserRepo  # noqa: E402
from stagevault.store import MemoryDocumentStore  # noqa: E402


@pytest.fixture(autouse=True)
def memory_store():
    """Fresh in-memory store and empty query cache for every test."""
    store = MemoryDocumentStore()
    db.store = store
    query_cache.clear()
    yield store
    db.store = None
    query_cache.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


async def _signed_in(email: str, role: str) -> dict[str, str]:
    await UserRepo().create(CreateUserRequest(email=email, role=role))
    token = create_id_token(uid=f"uid-{role}", email=email, display_name=role.title())
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session")
async def admin_headers(memory_store):
    """Bearer headers for a signed-in admin."""
    return await _signed_in("admin@example.com", "admin")


@pytest_asyncio.fixture(loop_scope="session")
async def editor_headers(memory_store):
    """Bearer headers for a signed-in editor."""
    return await _signed_in("editor@example.com", "editor")


@pytest_asyncio.fixture(loop_scope="session")
async def viewer_headers(memory_store):
    """Bearer headers for a signed-in viewer."""
    return await _signed_in("viewer@example.com", "viewer")


@pytest.fixture
def mock_s3():
    """
    Replace the storage session with one whose S3 client is a mock.

    Yields the client so tests can inspect upload_fileobj / delete_object.
    """
    from stagevault.services.storage import blob_storage

    s3 = MagicMock()
    s3.upload_fileobj = AsyncMock()
    s3.delete_object = AsyncMock()
    client_cm = MagicMock()
    client_cm.__aenter__ = AsyncMock(return_value=s3)
    client_cm.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.client.return_value = client_cm

    original = blob_storage.session
    blob_storage.session = session
    yield s3
    blob_storage.session = original
