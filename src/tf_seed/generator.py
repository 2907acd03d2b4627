"""Sample post generation through the Gemini generateContent REST API.

The model is asked for a JSON array of strings. Any failure (no API key,
transport or HTTP error, malformed payload) yields FALLBACK_POSTS so the
admin console always has something to publish. A well-formed reply that is
not a JSON array yields an empty list.
"""

import json
import logging
from typing import Any

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT = (
    "Generate 3 short, engaging social media text posts about technology, "
    "finance, or motivation. One should include a link (fake or real). "
    "Return them as a JSON array of strings."
)

FALLBACK_POSTS = [
    "System update: The new pay-per-view algorithm is live.",
    "Daily Reminder: Drink water and check your portfolio.",
]


class GenerationError(Exception):
    """The generative backend could not produce a usable reply."""


def _request_body() -> dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": PROMPT}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": {"type": "ARRAY", "items": {"type": "STRING"}},
        },
    }


def parse_posts(payload: dict[str, Any]) -> list[str]:
    """Extract the post list from a generateContent response body."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise GenerationError(f"unexpected response shape: {e!r}") from e
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text:
        return []
    try:
        posts = json.loads(text)
    except json.JSONDecodeError as e:
        raise GenerationError("model reply is not JSON") from e
    if not isinstance(posts, list):
        return []
    return [p.strip() for p in posts if isinstance(p, str) and p.strip()]


class SamplePostGenerator:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model = model or settings.GEMINI_MODEL
        self._timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT_SECONDS
        self._transport = transport

    async def _call(self) -> list[str]:
        if not self._api_key:
            raise GenerationError("GEMINI_API_KEY is not configured")
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                GEMINI_URL.format(model=self._model),
                params={"key": self._api_key},
                json=_request_body(),
            )
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as e:
                raise GenerationError("response body is not JSON") from e
        return parse_posts(payload)

    async def generate(self) -> list[str]:
        try:
            return await self._call()
        except (httpx.HTTPError, GenerationError) as e:
            logger.warning("sample post generation failed, using fallback: %s", e)
            return list(FALLBACK_POSTS)
