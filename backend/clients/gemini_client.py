"""
Client for the hosted Gemini ``generateContent`` REST endpoint.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class GeminiError(Exception):
    """Raised when the model call fails or returns no text."""


class GeminiClient:
    """Thin async wrapper: one POST per call, no retries."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def generate_text(self, prompt: str) -> str:
        return await self._generate([{"text": prompt}])

    async def generate_with_image(self, image: bytes, mime_type: str, prompt: str) -> str:
        parts = [
            {
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(image).decode("ascii"),
                }
            },
            {"text": prompt},
        ]
        return await self._generate(parts)

    async def _generate(self, parts: List[Dict[str, Any]]) -> str:
        if not self.configured:
            raise GeminiError("GEMINI_API_KEY is not configured")
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    params={"key": self.api_key},
                    json={"contents": [{"parts": parts}]},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise GeminiError(f"model request failed: {e}") from e
        except ValueError as e:
            raise GeminiError(f"model returned invalid JSON: {e}") from e

        try:
            candidate_parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise GeminiError(f"unexpected model response shape: {e!r}") from e
        text = "".join(p.get("text", "") for p in candidate_parts if isinstance(p, dict)).strip()
        if not text:
            raise GeminiError("model returned an empty answer")
        return text
