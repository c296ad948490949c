"""
Key/value cache backed by the ``cache`` table.

Values are visible while ``expires_at > now``. Every operation swallows
storage errors: a failed read is a miss and a failed write is a silent
no-op, because cached content can always be re-derived from upstream.
"""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repositories.cache_repo import CacheRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


def make_cache_key(prefix: str, text: str) -> str:
    """Deterministic key: ``<prefix>_<base64(utf-8 text)>``."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"{prefix}_{encoded}"


class KeyValueCache:
    """Cache facade over CacheRepository with an injectable clock.

    Each operation runs in a SAVEPOINT of the caller's session, so a storage
    error is rolled back on its own and the caller's pending writes survive.
    """

    def __init__(self, session: AsyncSession, clock: Clock = utc_clock) -> None:
        self._session = session
        self._repo = CacheRepository(session)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        try:
            async with self._session.begin_nested():
                return await self._repo.get_unexpired(key, self._clock())
        except SQLAlchemyError as e:
            logger.error("Cache get error for %s: %s", key, e)
            return None

    async def set(self, key: str, value: Any, ttl_minutes: float = 60) -> bool:
        """Upsert value with expires_at = now + ttl. Returns False on failure, never raises."""
        expires_at = self._clock() + timedelta(minutes=ttl_minutes)
        try:
            async with self._session.begin_nested():
                await self._repo.upsert(key, value, expires_at)
            return True
        except SQLAlchemyError as e:
            logger.error("Cache set error for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            async with self._session.begin_nested():
                await self._repo.delete(key)
            return True
        except SQLAlchemyError as e:
            logger.error("Cache delete error for %s: %s", key, e)
            return False

    async def cleanup(self) -> Optional[int]:
        """Delete every row with expires_at <= now. Returns rows removed, None on failure."""
        try:
            async with self._session.begin_nested():
                removed = await self._repo.delete_expired(self._clock())
        except SQLAlchemyError as e:
            logger.error("Cache cleanup error: %s", e)
            return None
        if removed:
            logger.info("Cache cleanup removed %d expired entries", removed)
        return removed
