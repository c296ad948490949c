"""Resource mapping for a disaster: create with derived location, list, nearby search, delete."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound, ValidationFailed
from models.resource import RESOURCE_TYPES, Resource
from repositories.disaster_repo import DisasterRepository
from repositories.resource_repo import ResourceRepository
from services.location_derivation import (
    Geocoder,
    LocationExtractor,
    derive_location,
    validate_coordinates,
)

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 10_000


class ResourceService:
    def __init__(
        self,
        session: AsyncSession,
        extractor: LocationExtractor,
        geocoder: Geocoder,
    ) -> None:
        self.repo = ResourceRepository(session)
        self.disasters = DisasterRepository(session)
        self.extractor = extractor
        self.geocoder = geocoder

    async def _require_disaster(self, disaster_id: str) -> None:
        if not await self.disasters.exists(disaster_id):
            raise NotFound("Disaster not found")

    async def list(
        self,
        disaster_id: str,
        resource_type: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius_meters: float = DEFAULT_RADIUS_METERS,
    ) -> List[Tuple[Resource, Optional[float]]]:
        """(resource, distance_meters) pairs; distance is None without a search center."""
        await self._require_disaster(disaster_id)
        if lat is not None and lng is not None:
            return list(
                await self.repo.list_nearby(disaster_id, lat, lng, radius_meters, resource_type)
            )
        return [(r, None) for r in await self.repo.list_for_disaster(disaster_id, resource_type)]

    async def create(
        self,
        disaster_id: str,
        name: Optional[str],
        resource_type: Optional[str],
        location_name: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> Resource:
        if not name or not name.strip() or not resource_type:
            raise ValidationFailed("Name and type are required")
        if resource_type not in RESOURCE_TYPES:
            raise ValidationFailed(
                f"Invalid resource type {resource_type!r}; expected one of {', '.join(RESOURCE_TYPES)}"
            )
        point = validate_coordinates(lat, lng)
        await self._require_disaster(disaster_id)

        name = name.strip()
        derived = await derive_location(
            extractor=self.extractor,
            geocoder=self.geocoder,
            location_name=location_name,
            point=point,
            free_text=f"name: {name}",
        )
        if derived.is_empty:
            raise ValidationFailed("Please provide either coordinates or a location name")

        resource = Resource(
            disaster_id=disaster_id,
            name=name,
            type=resource_type,
            location_name=derived.location_name,
            location_lat=derived.point.lat if derived.point else None,
            location_lng=derived.point.lng if derived.point else None,
        )
        await self.repo.create(resource)
        logger.info("Resource %s (%s) mapped for disaster %s", resource.id, resource.type, disaster_id)
        return resource

    async def delete(self, disaster_id: str, resource_id: str) -> Resource:
        resource = await self.repo.get_for_disaster(disaster_id, resource_id)
        if resource is None:
            raise NotFound("Resource not found")
        await self.repo.delete(resource)
        return resource
