from __future__ import annotations

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD helpers.

    No commits are performed here - commit responsibility is left to the
    service layer.
    """

    model: Type[T]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with an async session."""
        self.session = session

    async def add(self, entity: T) -> T:
        """Add an entity to the session and flush so defaults (id, timestamps) are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get_by_id(self, id_value: str) -> Optional[T]:
        """Get an entity by its primary key."""
        return await self.session.get(self.model, id_value)

    async def exists(self, id_value: str) -> bool:
        return await self.get_by_id(id_value) is not None

    async def delete(self, entity: T) -> None:
        """Delete an entity from the session (not committed)."""
        await self.session.delete(entity)
        await self.session.flush()
