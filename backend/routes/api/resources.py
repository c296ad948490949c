"""Resources mapped to a disaster under /api/resources."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from core.dependencies import get_resource_service
from schemas.records import ResourceOut
from services.resource_service import DEFAULT_RADIUS_METERS, ResourceService

router = APIRouter(prefix="/resources", tags=["resources"])


class ResourceCreate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    location_name: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


@router.get("/disasters/{disaster_id}/resources", summary="List or search resources")
async def list_resources(
    disaster_id: str,
    type: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_METERS, gt=0),
    service: ResourceService = Depends(get_resource_service),
) -> dict:
    """With lat and lng, only resources within radius meters, nearest first, with distance_km."""
    rows = await service.list(disaster_id, resource_type=type, lat=lat, lng=lng, radius_meters=radius)
    data = [ResourceOut.from_model(r, distance).model_dump(mode="json") for r, distance in rows]
    response = {"success": True, "data": data, "count": len(data)}
    if lat is not None and lng is not None:
        response["query_params"] = {"lat": lat, "lng": lng, "radius": radius, "type": type}
    return response


@router.post("/disasters/{disaster_id}/resources", status_code=201, summary="Map a resource")
async def create_resource(
    disaster_id: str,
    body: ResourceCreate,
    service: ResourceService = Depends(get_resource_service),
) -> dict:
    resource = await service.create(
        disaster_id,
        name=body.name,
        resource_type=body.type,
        location_name=body.location_name,
        lat=body.lat,
        lng=body.lng,
    )
    return {
        "success": True,
        "data": ResourceOut.from_model(resource).model_dump(mode="json"),
        "message": f'Resource "{resource.name}" mapped successfully',
    }


@router.delete("/disasters/{disaster_id}/resources/{resource_id}", summary="Delete a resource")
async def delete_resource(
    disaster_id: str,
    resource_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> dict:
    resource = await service.delete(disaster_id, resource_id)
    return {
        "success": True,
        "message": "Resource deleted successfully",
        "data": ResourceOut.from_model(resource).model_dump(mode="json"),
    }
