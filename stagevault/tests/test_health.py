"""Health check and application error handler tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from stagevault.exceptions import WriteFailure
from stagevault.store import MemoryDocumentStore

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_health(async_client):
    res = await async_client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


async def test_write_failure_is_503(async_client, editor_headers):
    failure = WriteFailure("add", "theatres", OSError("connection reset"))
    with patch.object(MemoryDocumentStore, "add", AsyncMock(side_effect=failure)):
        res = await async_client.post(
            "/api/admin/theatres",
            json={"name": "Old Vic", "city": "London", "country": "UK"},
            headers=editor_headers,
        )
    assert res.status_code == 503
    assert res.json() == {"detail": "Save failed. Please try again."}
