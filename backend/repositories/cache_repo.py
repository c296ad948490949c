"""
Cache table access: upsert by key, read unexpired value, delete, sweep expired rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from models.cache_entry import CacheEntry

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE.
_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class CacheRepository:
    """Repository for cache rows (no base class; custom API)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def upsert(self, key: str, value: Any, expires_at: datetime) -> None:
        """Insert or replace the row for key (latest write wins)."""
        insert = _UPSERT_INSERTS.get(self.session.get_bind().dialect.name)
        if insert is None:
            await self.session.merge(CacheEntry(key=key, value=value, expires_at=expires_at))
            await self.session.flush()
            return
        stmt = insert(CacheEntry).values(key=key, value=value, expires_at=expires_at)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CacheEntry.key],
            set_={"value": stmt.excluded["value"], "expires_at": stmt.excluded["expires_at"]},
        )
        await self.session.execute(stmt)

    async def get_unexpired(self, key: str, now: datetime) -> Optional[Any]:
        """Value for key if its row exists and expires_at > now; expired rows are left in place."""
        stmt = select(CacheEntry.value).where(
            CacheEntry.key == key, CacheEntry.expires_at > now
        )
        result = await self.session.execute(stmt)
        row = result.first()
        return None if row is None else row[0]

    async def delete(self, key: str) -> int:
        result = await self.session.execute(delete(CacheEntry).where(CacheEntry.key == key))
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        result = await self.session.execute(
            delete(CacheEntry).where(CacheEntry.expires_at <= now)
        )
        return result.rowcount or 0
