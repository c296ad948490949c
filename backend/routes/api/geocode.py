"""POST /api/geocode: free text or a place name to coordinates."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.dependencies import get_cache, get_geocoder, get_location_extractor
from core.errors import ValidationFailed
from services.cache_service import KeyValueCache
from services.geocoding_service import GeocodingService
from services.location_derivation import derive_location
from services.location_extraction_service import LocationExtractionService

router = APIRouter(prefix="/geocode", tags=["geocode"])


class GeocodeRequest(BaseModel):
    description: Optional[str] = None
    location_name: Optional[str] = None


@router.post("", summary="Extract and geocode a location")
async def geocode_location(
    body: GeocodeRequest,
    extractor: LocationExtractionService = Depends(get_location_extractor),
    geocoder: GeocodingService = Depends(get_geocoder),
    cache: KeyValueCache = Depends(get_cache),
) -> dict:
    """Extraction runs only when no location_name is given."""
    if not (body.description or "").strip() and not (body.location_name or "").strip():
        raise ValidationFailed("Either description or location_name is required")

    derived = await derive_location(
        extractor=extractor,
        geocoder=geocoder,
        location_name=body.location_name,
        free_text=body.description,
    )
    if derived.location_name is None:
        return {
            "success": True,
            "data": {
                "location_name": None,
                "coordinates": None,
                "message": "No location found in description",
            },
        }

    return {
        "success": True,
        "data": {
            "location_name": derived.location_name,
            "coordinates": derived.point.model_dump() if derived.point else None,
            "formatted_address": derived.formatted_address,
            "geocoded_at": cache.now().isoformat(),
        },
        "fallback_used": bool(derived.degraded_steps),
    }
