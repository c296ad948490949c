"""POST /api/cache/cleanup."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import client_for_app
from core.database import get_database_manager
from models.cache_entry import CacheEntry


@pytest.mark.asyncio
async def test_admin_cleanup_removes_expired_rows(api):
    now = datetime.now(timezone.utc)
    async with get_database_manager().session() as session:
        session.add(CacheEntry(key="old", value={"v": 1}, expires_at=now - timedelta(minutes=5)))
        session.add(CacheEntry(key="fresh", value={"v": 2}, expires_at=now + timedelta(minutes=5)))

    async with client_for_app() as client:
        r = await client.post("/api/cache/cleanup", headers={"X-User-ID": "reliefAdmin"})
        again = await client.post("/api/cache/cleanup")

    assert r.status_code == 200
    assert r.json() == {"success": True, "data": {"removed": 1}}
    assert again.json()["data"]["removed"] == 0


@pytest.mark.asyncio
async def test_contributor_cannot_trigger_cleanup(api):
    async with client_for_app() as client:
        r = await client.post("/api/cache/cleanup", headers={"X-User-ID": "citizen1"})

    assert r.status_code == 403
