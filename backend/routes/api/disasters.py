"""Disaster CRUD and per-disaster official updates under /api/disasters."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from core.auth import Principal
from core.dependencies import (
    get_cache,
    get_current_principal,
    get_disaster_service,
    get_updates_aggregator,
)
from schemas.records import DisasterOut
from services.cache_service import KeyValueCache
from services.disaster_service import DEFAULT_RADIUS_METERS, DisasterService
from services.official_updates_service import (
    UPDATES_CACHE_TTL_MINUTES,
    OfficialUpdatesService,
    updates_for_disaster,
)

router = APIRouter(prefix="/disasters", tags=["disasters"])


class DisasterCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location_name: Optional[str] = None
    tags: Optional[List[str]] = None


class DisasterUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location_name: Optional[str] = None
    tags: Optional[List[str]] = None


@router.get("", summary="List disasters")
async def list_disasters(
    tag: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_METERS, gt=0),
    limit: Optional[int] = Query(None, ge=1),
    service: DisasterService = Depends(get_disaster_service),
) -> dict:
    """Newest first; optional tag filter, lat/lng/radius (meters) spatial filter and limit."""
    disasters = await service.list(tag=tag, lat=lat, lng=lng, radius_meters=radius, limit=limit)
    data = [DisasterOut.from_model(d).model_dump(mode="json") for d in disasters]
    return {"success": True, "data": data, "count": len(data)}


@router.get("/{disaster_id}", summary="Get a disaster")
async def get_disaster(
    disaster_id: str,
    service: DisasterService = Depends(get_disaster_service),
) -> dict:
    disaster = await service.get(disaster_id)
    return {"success": True, "data": DisasterOut.from_model(disaster).model_dump(mode="json")}


@router.get("/{disaster_id}/official-updates", summary="Official agency updates for a disaster")
async def get_official_updates(
    disaster_id: str,
    limit: int = Query(10, ge=1, le=50),
    disaster_type: Optional[str] = Query(None, alias="disasterType"),
    service: DisasterService = Depends(get_disaster_service),
    aggregator: OfficialUpdatesService = Depends(get_updates_aggregator),
    cache: KeyValueCache = Depends(get_cache),
) -> dict:
    disaster = await service.get(disaster_id)
    payload, cached, key = await updates_for_disaster(
        aggregator, cache, disaster, limit=limit, disaster_type=disaster_type
    )
    return {
        "success": True,
        "data": payload,
        "cached": cached,
        "cache_key": key,
        "cache_ttl_minutes": UPDATES_CACHE_TTL_MINUTES,
    }


@router.post("", status_code=201, summary="Create a disaster")
async def create_disaster(
    body: DisasterCreate,
    principal: Principal = Depends(get_current_principal),
    service: DisasterService = Depends(get_disaster_service),
) -> dict:
    disaster = await service.create(
        principal,
        title=body.title,
        description=body.description,
        location_name=body.location_name,
        tags=body.tags,
    )
    return {"success": True, "data": DisasterOut.from_model(disaster).model_dump(mode="json")}


@router.put("/{disaster_id}", summary="Update a disaster (owner or admin)")
async def update_disaster(
    disaster_id: str,
    body: DisasterUpdate,
    principal: Principal = Depends(get_current_principal),
    service: DisasterService = Depends(get_disaster_service),
) -> dict:
    disaster = await service.update(
        principal,
        disaster_id,
        title=body.title,
        description=body.description,
        location_name=body.location_name,
        tags=body.tags,
    )
    return {"success": True, "data": DisasterOut.from_model(disaster).model_dump(mode="json")}


@router.delete("/{disaster_id}", summary="Delete a disaster (owner or admin)")
async def delete_disaster(
    disaster_id: str,
    principal: Principal = Depends(get_current_principal),
    service: DisasterService = Depends(get_disaster_service),
) -> dict:
    await service.delete(principal, disaster_id)
    return {"success": True, "message": "Disaster deleted successfully"}
