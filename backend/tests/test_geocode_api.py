"""POST /api/geocode."""

from __future__ import annotations

import pytest

from conftest import client_for_app


@pytest.mark.asyncio
async def test_description_is_extracted_and_geocoded(api):
    async with client_for_app() as client:
        r = await client.post("/api/geocode", json={"description": "Earthquake near Tokyo"})

    data = r.json()["data"]
    assert data["location_name"] == "Tokyo, Japan"
    assert data["coordinates"] == {"lat": pytest.approx(35.6768601), "lng": pytest.approx(139.7638947)}
    assert data["formatted_address"] == "Tokyo, Japan (test)"
    assert data["geocoded_at"]


@pytest.mark.asyncio
async def test_location_name_skips_extraction(api):
    async with client_for_app() as client:
        r = await client.post("/api/geocode", json={"location_name": "Atlantis", "description": "Tokyo"})

    data = r.json()["data"]
    assert data["location_name"] == "Atlantis"
    assert data["coordinates"] is None
    assert api.extractor.calls == []


@pytest.mark.asyncio
async def test_no_location_found_payload(api):
    async with client_for_app() as client:
        r = await client.post("/api/geocode", json={"description": "Something happened somewhere"})

    assert r.status_code == 200
    assert r.json()["data"] == {
        "location_name": None,
        "coordinates": None,
        "message": "No location found in description",
    }


@pytest.mark.asyncio
async def test_empty_request_is_400(api):
    async with client_for_app() as client:
        r = await client.post("/api/geocode", json={})

    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Either description or location_name is required"}
