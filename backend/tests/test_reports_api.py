"""Report endpoints and image-verification write-back."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import client_for_app
from core.dependencies import get_image_verifier
from core.result import Degraded, Ok
from main import app
from schemas.external import VerificationResult


async def _disaster(client):
    r = await client.post("/api/disasters", json={"title": "NYC Flood", "description": "Flooding in Manhattan"})
    return r.json()["data"]["id"]


async def _report(client, disaster_id, **body):
    payload = {"content": "Water is knee deep on 5th Avenue", "image_url": "https://img.example.org/1.jpg"}
    payload.update(body)
    r = await client.post(f"/api/reports/disasters/{disaster_id}/reports", json=payload, headers={"X-User-ID": "citizen1"})
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_report_defaults_to_caller_and_pending(api):
    async with client_for_app() as client:
        disaster_id = await _disaster(client)
        report = await _report(client, disaster_id)
        listed = await client.get(f"/api/reports/disasters/{disaster_id}/reports")

    assert report["user_id"] == "citizen1"
    assert report["verification_status"] == "pending"
    assert listed.json()["count"] == 1


@pytest.mark.asyncio
async def test_report_requires_content_and_existing_disaster(api):
    async with client_for_app() as client:
        disaster_id = await _disaster(client)
        empty = await client.post(f"/api/reports/disasters/{disaster_id}/reports", json={"content": "  "})
        missing = await client.post("/api/reports/disasters/nope/reports", json={"content": "hello"})

    assert empty.status_code == 400
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_only_admins_change_verification_status(api):
    async with client_for_app() as client:
        disaster_id = await _disaster(client)
        report = await _report(client, disaster_id)
        denied = await client.put(
            f"/api/reports/{report['id']}", json={"verification_status": "verified"}, headers={"X-User-ID": "citizen1"}
        )
        missing_status = await client.put(f"/api/reports/{report['id']}", json={}, headers={"X-User-ID": "reliefAdmin"})
        invalid = await client.put(
            f"/api/reports/{report['id']}", json={"verification_status": "maybe"}, headers={"X-User-ID": "reliefAdmin"}
        )
        ok = await client.put(
            f"/api/reports/{report['id']}", json={"verification_status": "verified"}, headers={"X-User-ID": "reliefAdmin"}
        )
        unknown = await client.put("/api/reports/nope", json={"verification_status": "verified"})

    assert denied.status_code == 403
    assert denied.json()["error"] == "Admin access required"
    assert missing_status.status_code == 400
    assert invalid.status_code == 400
    assert ok.status_code == 200
    assert ok.json()["data"]["verification_status"] == "verified"
    assert unknown.status_code == 404


class _Verifier:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def verify(self, image_url):
        self.calls.append(image_url)
        return self.outcome


def _result(status, confidence):
    analysis = "Unable to verify image" if status == "error" else f"Confidence: {confidence}"
    return VerificationResult(
        status=status, confidence=confidence, analysis=analysis, verified_at=datetime.now(timezone.utc)
    )


@pytest.mark.asyncio
async def test_verification_writes_classification_onto_report(api):
    verifier = _Verifier(Ok(_result("suspicious", 40)))
    app.dependency_overrides[get_image_verifier] = lambda: verifier
    async with client_for_app() as client:
        disaster_id = await _disaster(client)
        report = await _report(client, disaster_id)
        r = await client.post(
            f"/api/verification/disasters/{disaster_id}/verify-image",
            json={"image_url": report["image_url"], "report_id": report["id"]},
        )
        listed = await client.get(f"/api/reports/disasters/{disaster_id}/reports")

    data = r.json()["data"]
    assert data["status"] == "suspicious"
    assert data["confidence"] == 40
    assert data["report_updated"] is True
    assert data["fallback_used"] is False
    assert listed.json()["data"][0]["verification_status"] == "suspicious"


@pytest.mark.asyncio
async def test_failed_verification_leaves_report_untouched(api):
    verifier = _Verifier(Degraded(_result("error", 0), "image fetch failed"))
    app.dependency_overrides[get_image_verifier] = lambda: verifier
    async with client_for_app() as client:
        disaster_id = await _disaster(client)
        report = await _report(client, disaster_id)
        r = await client.post(
            f"/api/verification/disasters/{disaster_id}/verify-image",
            json={"image_url": report["image_url"], "report_id": report["id"]},
        )
        listed = await client.get(f"/api/reports/disasters/{disaster_id}/reports")

    assert r.status_code == 200
    assert r.json()["data"]["status"] == "error"
    assert r.json()["data"]["fallback_used"] is True
    assert listed.json()["data"][0]["verification_status"] == "pending"


@pytest.mark.asyncio
async def test_verification_requires_image_url(api):
    verifier = _Verifier(Ok(_result("verified", 90)))
    app.dependency_overrides[get_image_verifier] = lambda: verifier
    async with client_for_app() as client:
        r = await client.post("/api/verification/disasters/any/verify-image", json={})

    assert r.status_code == 400
    assert r.json()["error"] == "Image URL is required"
    assert verifier.calls == []
