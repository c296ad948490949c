from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import desc, select

from models.resource import Resource
from .base import BaseRepository
from .spatial import nearby_resources


class ResourceRepository(BaseRepository[Resource]):
    """Repository for Resource entities."""

    model = Resource

    async def create(self, resource: Resource) -> Resource:
        return await self.add(resource)

    async def list_for_disaster(
        self, disaster_id: str, resource_type: Optional[str] = None
    ) -> List[Resource]:
        """Resources of one disaster, newest first."""
        stmt = (
            select(Resource)
            .where(Resource.disaster_id == disaster_id)
            .order_by(desc(Resource.created_at))
        )
        if resource_type:
            stmt = stmt.where(Resource.type == resource_type)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_nearby(
        self,
        disaster_id: str,
        lat: float,
        lng: float,
        radius_meters: float,
        resource_type: Optional[str] = None,
    ) -> List[Tuple[Resource, float]]:
        """(resource, distance_meters) pairs inside the radius, closest first."""
        distances = await nearby_resources(self.session, disaster_id, lat, lng, radius_meters)
        if not distances:
            return []
        stmt = select(Resource).where(Resource.id.in_(list(distances)))
        if resource_type:
            stmt = stmt.where(Resource.type == resource_type)
        result = await self.session.execute(stmt)
        pairs = [(r, distances[r.id]) for r in result.scalars().all()]
        pairs.sort(key=lambda pair: pair[1])
        return pairs

    async def get_for_disaster(self, disaster_id: str, resource_id: str) -> Optional[Resource]:
        resource = await self.get_by_id(resource_id)
        if resource is None or resource.disaster_id != disaster_id:
            return None
        return resource
