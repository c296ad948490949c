"""Geocoding adapter: cache-aside, zero-result and failure handling."""

from __future__ import annotations

import httpx
import pytest

from core.database import get_database_manager
from services.cache_service import KeyValueCache
from services.geocoding_service import CACHE_TTL_MINUTES, GeocodingService

from conftest import FakeClock


def _transport(calls, payload=None, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status, json=payload if payload is not None else [])

    return httpx.MockTransport(handler)


TOKYO = [{"lat": "35.6768601", "lon": "139.7638947", "display_name": "Tokyo, Japan"}]


@pytest.mark.asyncio
async def test_geocode_sends_query_and_user_agent(test_db):
    calls = []
    async with get_database_manager().session() as session:
        service = GeocodingService(
            KeyValueCache(session), user_agent="DisasterResponsePlatform/1.0", transport=_transport(calls, TOKYO)
        )
        outcome = await service.geocode("Tokyo")

    assert not outcome.degraded
    assert outcome.value.lat == pytest.approx(35.6768601)
    assert outcome.value.lng == pytest.approx(139.7638947)
    assert outcome.value.formatted_address == "Tokyo, Japan"
    request = calls[0]
    assert request.url.params["q"] == "Tokyo"
    assert request.url.params["format"] == "json"
    assert request.url.params["limit"] == "1"
    assert request.headers["User-Agent"] == "DisasterResponsePlatform/1.0"


@pytest.mark.asyncio
async def test_second_lookup_is_served_from_cache(test_db):
    calls = []
    async with get_database_manager().session() as session:
        service = GeocodingService(KeyValueCache(session), transport=_transport(calls, TOKYO))
        first = await service.geocode("Tokyo")
        second = await service.geocode("Tokyo")

    assert len(calls) == 1
    assert second.from_cache is True
    assert second.value.lat == first.value.lat


@pytest.mark.asyncio
async def test_cache_entry_expires_after_a_day(test_db):
    calls = []
    clock = FakeClock()
    async with get_database_manager().session() as session:
        service = GeocodingService(KeyValueCache(session, clock=clock), transport=_transport(calls, TOKYO))
        await service.geocode("Tokyo")
        clock.advance(minutes=CACHE_TTL_MINUTES)
        await service.geocode("Tokyo")

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_zero_results_is_ok_none_and_not_cached(test_db):
    calls = []
    async with get_database_manager().session() as session:
        cache = KeyValueCache(session)
        service = GeocodingService(cache, transport=_transport(calls, []))
        outcome = await service.geocode("Atlantis")
        again = await service.geocode("Atlantis")
        assert await cache.get(GeocodingService.cache_key("Atlantis")) is None

    assert outcome.value is None and not outcome.degraded
    assert again.value is None
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_http_failure_degrades_without_caching(test_db):
    calls = []
    async with get_database_manager().session() as session:
        cache = KeyValueCache(session)
        service = GeocodingService(cache, transport=_transport(calls, {"error": "boom"}, status=503))
        outcome = await service.geocode("Tokyo")
        assert await cache.get(GeocodingService.cache_key("Tokyo")) is None

    assert outcome.degraded
    assert outcome.value is None


@pytest.mark.asyncio
async def test_blank_name_degrades_without_network(test_db):
    calls = []
    async with get_database_manager().session() as session:
        service = GeocodingService(KeyValueCache(session), transport=_transport(calls, TOKYO))
        outcome = await service.geocode("   ")

    assert outcome.degraded
    assert calls == []
