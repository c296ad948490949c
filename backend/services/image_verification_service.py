"""
Image verification adapter: image URL -> {status, confidence, analysis}.

The image is downloaded and sent inline to the vision model with a fixed
prompt. The confidence score is read out of the free-text answer.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

import httpx
from pydantic import ValidationError

from clients.gemini_client import GeminiClient, GeminiError
from core.result import Degraded, Ok, Outcome
from schemas.external import VerificationResult
from services.cache_service import KeyValueCache, make_cache_key

logger = logging.getLogger(__name__)

CACHE_PREFIX = "image_verify"
CACHE_TTL_MINUTES = 1440
VERIFIED_THRESHOLD = 70
DEFAULT_CONFIDENCE = 50

PROMPT = (
    "Analyze this image for signs of manipulation or verify if it shows disaster-related "
    "content. Provide a confidence score (0-100) and a brief explanation."
)

_CONFIDENCE_RE = re.compile(r"confidence.*?(\d{1,3})", re.IGNORECASE | re.DOTALL)


def parse_confidence(analysis: str) -> int:
    """First number after the word 'confidence', capped at 100; 50 when none is given."""
    match = _CONFIDENCE_RE.search(analysis)
    if not match:
        return DEFAULT_CONFIDENCE
    return min(int(match.group(1)), 100)


def classify(confidence: int) -> str:
    return "verified" if confidence >= VERIFIED_THRESHOLD else "suspicious"


class ImageVerificationService:
    def __init__(
        self,
        cache: KeyValueCache,
        client: GeminiClient,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def cache_key(image_url: str) -> str:
        return make_cache_key(CACHE_PREFIX, image_url)

    async def _fetch_image(self, image_url: str) -> Tuple[bytes, str]:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport, follow_redirects=True
        ) as client:
            response = await client.get(image_url)
            response.raise_for_status()
        mime_type = response.headers.get("content-type", "").split(";")[0].strip() or "image/jpeg"
        return response.content, mime_type

    def _error(self, reason: str) -> Degraded[VerificationResult]:
        return Degraded(
            VerificationResult(
                status="error",
                confidence=0,
                analysis="Unable to verify image",
                verified_at=self.cache.now(),
            ),
            reason,
        )

    async def verify(self, image_url: str) -> Outcome[VerificationResult]:
        key = self.cache_key(image_url)
        cached = await self.cache.get(key)
        if cached:
            try:
                return Ok(VerificationResult.model_validate(cached), from_cache=True)
            except ValidationError:
                logger.warning("Discarding malformed verification cache entry %s", key)

        try:
            image, mime_type = await self._fetch_image(image_url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error("Image fetch failed for %s: %s", image_url, e)
            return self._error(f"image fetch failed: {e}")

        try:
            analysis = await self.client.generate_with_image(image, mime_type, PROMPT)
        except GeminiError as e:
            logger.error("Image verification error for %s: %s", image_url, e)
            return self._error(str(e))

        confidence = parse_confidence(analysis)
        result = VerificationResult(
            status=classify(confidence),
            confidence=confidence,
            analysis=analysis,
            verified_at=self.cache.now(),
        )
        await self.cache.set(key, result.model_dump(mode="json"), CACHE_TTL_MINUTES)
        return Ok(result)
