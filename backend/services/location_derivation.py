"""
Location derivation shared by disaster and resource writes.

Order of precedence: explicit name, explicit coordinates, a name extracted
from free text. A name without coordinates is geocoded; when geocoding finds
nothing the name is kept without a point.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from core.errors import ValidationFailed
from core.result import Outcome
from schemas.external import ExtractionResult, GeoPoint, GeoResult

logger = logging.getLogger(__name__)


class LocationExtractor(Protocol):
    async def extract(self, description: str) -> Outcome[ExtractionResult]:
        ...


class Geocoder(Protocol):
    async def geocode(self, location_name: Optional[str]) -> Outcome[Optional[GeoResult]]:
        ...


@dataclass(frozen=True)
class DerivedLocation:
    location_name: Optional[str] = None
    point: Optional[GeoPoint] = None
    formatted_address: Optional[str] = None
    # reasons of adapter calls that fell back, for logging and responses
    degraded_steps: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.location_name is None and self.point is None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_coordinates(lat: Optional[float], lng: Optional[float]) -> Optional[GeoPoint]:
    """GeoPoint for a complete, in-range pair; None when neither is given."""
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationFailed("Both lat and lng must be provided together")
    if (
        math.isnan(lat)
        or math.isnan(lng)
        or not -90 <= lat <= 90
        or not -180 <= lng <= 180
    ):
        raise ValidationFailed("Invalid coordinates provided")
    return GeoPoint(lat=lat, lng=lng)


async def derive_location(
    *,
    extractor: LocationExtractor,
    geocoder: Geocoder,
    location_name: Optional[str] = None,
    point: Optional[GeoPoint] = None,
    free_text: Optional[str] = None,
) -> DerivedLocation:
    name = _clean(location_name)
    degraded: List[str] = []
    formatted_address: Optional[str] = None

    if name is None and point is None and _clean(free_text):
        extracted = await extractor.extract(free_text)  # type: ignore[arg-type]
        if extracted.degraded:
            degraded.append(f"extraction: {extracted.reason}")
        name = _clean(extracted.value.location_name)

    if name is not None and point is None:
        geocoded = await geocoder.geocode(name)
        if geocoded.degraded:
            degraded.append(f"geocoding: {geocoded.reason}")
        if geocoded.value is not None:
            point = geocoded.value.point
            formatted_address = geocoded.value.formatted_address

    if degraded:
        logger.info("Location derived with fallbacks: %s", "; ".join(degraded))
    return DerivedLocation(
        location_name=name,
        point=point,
        formatted_address=formatted_address,
        degraded_steps=degraded,
    )
