"""
Geocoding adapter: location name -> coordinates, cache-aside over Nominatim.

Only successful lookups are cached. A name with zero results and a failed
request are both re-queried on the next call.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from core.result import Degraded, Ok, Outcome
from schemas.external import GeoResult
from services.cache_service import KeyValueCache, make_cache_key

logger = logging.getLogger(__name__)

CACHE_PREFIX = "geocode_osm"
CACHE_TTL_MINUTES = 1440


class GeocodingService:
    def __init__(
        self,
        cache: KeyValueCache,
        url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "DisasterResponsePlatform/1.0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache = cache
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def cache_key(location_name: str) -> str:
        return make_cache_key(CACHE_PREFIX, location_name)

    async def geocode(self, location_name: Optional[str]) -> Outcome[Optional[GeoResult]]:
        """Ok(GeoResult), Ok(None) when nothing matched, Degraded(None) on failure."""
        if not location_name or not location_name.strip():
            return Degraded(None, "empty location name")

        key = self.cache_key(location_name)
        cached = await self.cache.get(key)
        if cached:
            try:
                return Ok(GeoResult.model_validate(cached), from_cache=True)
            except ValidationError:
                logger.warning("Discarding malformed geocode cache entry %s", key)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    self.url,
                    params={"q": location_name, "format": "json", "limit": 1},
                    headers={"User-Agent": self.user_agent},
                )
                response.raise_for_status()
                results = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Geocoding error for %r: %s", location_name, e)
            return Degraded(None, f"geocoding request failed: {e}")

        if not isinstance(results, list) or not results:
            logger.info("No geocoding results for %r", location_name)
            return Ok(None)

        first = results[0]
        try:
            geo = GeoResult(
                lat=float(first["lat"]),
                lng=float(first["lon"]),
                formatted_address=first.get("display_name"),
                geocoded_at=self.cache.now(),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unparseable geocoding result for %r: %s", location_name, e)
            return Degraded(None, f"unparseable geocoding result: {e}")

        await self.cache.set(key, geo.model_dump(mode="json"), CACHE_TTL_MINUTES)
        return Ok(geo)
