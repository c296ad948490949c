from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import cast, desc, select
from sqlalchemy.dialects.postgresql import JSONB

from models.disaster import Disaster
from .base import BaseRepository
from .spatial import disasters_within_radius


class DisasterRepository(BaseRepository[Disaster]):
    """Repository for Disaster entities."""

    model = Disaster

    async def create(self, disaster: Disaster) -> Disaster:
        """Create a new disaster."""
        return await self.add(disaster)

    async def list_recent(
        self,
        tag: Optional[str] = None,
        near: Optional[tuple[float, float, float]] = None,
        limit: Optional[int] = None,
    ) -> List[Disaster]:
        """List disasters newest first, optionally by tag and within (lat, lng, radius_m).

        ``limit`` is applied after every filter; None returns all matches.
        """
        stmt = select(Disaster).order_by(desc(Disaster.created_at))
        if near is not None:
            lat, lng, radius = near
            inside: Dict[str, float] = await disasters_within_radius(self.session, lat, lng, radius)
            if not inside:
                return []
            stmt = stmt.where(Disaster.id.in_(list(inside)))
        if tag and self.session.get_bind().dialect.name == "postgresql":
            stmt = stmt.where(cast(Disaster.tags, JSONB).contains([tag]))
            tag = None
        if limit is not None and not tag:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())
        if tag:
            # JSON array containment has no portable SQL form outside PostgreSQL
            rows = [d for d in rows if tag in (d.tags or [])]
            if limit is not None:
                rows = rows[:limit]
        return rows
