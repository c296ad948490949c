"""
Location extraction adapter: free-text description -> location name.

Cache-aside over the hosted model. Any model answer, including the
"not found" sentinel, is cached for an hour; failures are not cached.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from clients.gemini_client import GeminiClient, GeminiError
from core.result import Degraded, Ok, Outcome
from schemas.external import ExtractionResult
from services.cache_service import KeyValueCache, make_cache_key

logger = logging.getLogger(__name__)

CACHE_PREFIX = "location_extract"
CACHE_TTL_MINUTES = 60
NOT_FOUND_SENTINEL = "UNKNOWN"

PROMPT_TEMPLATE = (
    "Extract the location name from this disaster description. Return only the "
    "location name (city, state/country format if available), or \"UNKNOWN\" if no "
    "location is found: \"{description}\""
)


def _clean_answer(answer: str) -> str:
    return answer.strip().strip("\"'").strip()


class LocationExtractionService:
    def __init__(self, cache: KeyValueCache, client: GeminiClient) -> None:
        self.cache = cache
        self.client = client

    @staticmethod
    def cache_key(description: str) -> str:
        return make_cache_key(CACHE_PREFIX, description)

    async def extract(self, description: str) -> Outcome[ExtractionResult]:
        key = self.cache_key(description)
        cached = await self.cache.get(key)
        if cached:
            try:
                return Ok(ExtractionResult.model_validate(cached), from_cache=True)
            except ValidationError:
                logger.warning("Discarding malformed extraction cache entry %s", key)

        try:
            answer = await self.client.generate_text(PROMPT_TEMPLATE.format(description=description))
        except GeminiError as e:
            logger.error("Location extraction error: %s", e)
            return Degraded(ExtractionResult(location_name=None, extracted_at=self.cache.now()), str(e))

        name = _clean_answer(answer)
        result = ExtractionResult(
            location_name=None if not name or name.upper() == NOT_FOUND_SENTINEL else name,
            extracted_at=self.cache.now(),
        )
        await self.cache.set(key, result.model_dump(mode="json"), CACHE_TTL_MINUTES)
        return Ok(result)
