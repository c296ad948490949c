"""Image verification adapter: confidence parsing, classification, caching."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from clients.gemini_client import GeminiClient
from core.database import get_database_manager
from services.cache_service import KeyValueCache
from services.image_verification_service import (
    ImageVerificationService,
    classify,
    parse_confidence,
)

IMAGE_URL = "https://images.example.org/flood.png"
IMAGE_BYTES = b"\x89PNG fake image"


@pytest.mark.parametrize(
    "analysis, expected",
    [
        ("Confidence score: 85. Looks authentic.", 85),
        ("The CONFIDENCE is\n 42 out of 100", 42),
        ("confidence 250", 100),
        ("No score given here.", 50),
    ],
)
def test_parse_confidence(analysis, expected):
    assert parse_confidence(analysis) == expected


def test_classify_threshold_is_seventy():
    assert classify(70) == "verified"
    assert classify(69) == "suspicious"


def _services(session, model_calls, image_calls, answer="Confidence: 92. Authentic flood scene.", image_status=200):
    def image_handler(request: httpx.Request) -> httpx.Response:
        image_calls.append(request)
        return httpx.Response(image_status, content=IMAGE_BYTES, headers={"content-type": "image/png"})

    def model_handler(request: httpx.Request) -> httpx.Response:
        model_calls.append(request)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": answer}]}}]})

    client = GeminiClient(api_key="k", transport=httpx.MockTransport(model_handler))
    return ImageVerificationService(KeyValueCache(session), client, transport=httpx.MockTransport(image_handler))


@pytest.mark.asyncio
async def test_verify_sends_inline_image_and_caches(test_db):
    model_calls, image_calls = [], []
    async with get_database_manager().session() as session:
        service = _services(session, model_calls, image_calls)
        first = await service.verify(IMAGE_URL)
        second = await service.verify(IMAGE_URL)

    assert first.value.status == "verified"
    assert first.value.confidence == 92
    assert second.from_cache is True
    assert len(model_calls) == 1 and len(image_calls) == 1

    inline = json.loads(model_calls[0].content)["contents"][0]["parts"][0]["inline_data"]
    assert inline["mime_type"] == "image/png"
    assert base64.b64decode(inline["data"]) == IMAGE_BYTES


@pytest.mark.asyncio
async def test_low_confidence_is_suspicious(test_db):
    async with get_database_manager().session() as session:
        service = _services(session, [], [], answer="Confidence: 30, likely edited.")
        outcome = await service.verify(IMAGE_URL)

    assert outcome.value.status == "suspicious"
    assert outcome.value.confidence == 30


@pytest.mark.asyncio
async def test_failed_fetch_returns_error_and_is_not_cached(test_db):
    model_calls, image_calls = [], []
    async with get_database_manager().session() as session:
        service = _services(session, model_calls, image_calls, image_status=404)
        first = await service.verify(IMAGE_URL)
        await service.verify(IMAGE_URL)

    assert first.degraded
    assert first.value.status == "error"
    assert first.value.confidence == 0
    assert first.value.analysis == "Unable to verify image"
    assert len(image_calls) == 2
    assert model_calls == []


@pytest.mark.asyncio
async def test_malformed_url_returns_error_without_any_call(test_db):
    model_calls, image_calls = [], []
    async with get_database_manager().session() as session:
        service = _services(session, model_calls, image_calls)
        outcome = await service.verify("http://[::1/img.jpg")

    assert outcome.degraded
    assert outcome.value.status == "error"
    assert outcome.value.confidence == 0
    assert image_calls == [] and model_calls == []
