"""
Jokes One "joke of the day" (https://api.jokes.one).

The public tier is heavily rate limited, so this provider never fails: any
network error, non-2xx status or unrecognized body yields a fixed fallback
joke instead of an UpstreamError.

Body (current API):
    {"contents": {"jokes": [{"category": "jod", "joke": {"id": "...", "title": "...", "text": "..."}}]}}
Older responses carried {"joke": {"id": ..., "text": ..., "category": ...}}, sometimes
wrapped in a one-element list. Jokes without a category are filed as "general".
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core import config
from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke

logger = logging.getLogger(__name__)

FALLBACK_CONTENT = "Why don't scientists trust atoms? Because they make up everything!"
FALLBACK_CATEGORY = "science"
DEFAULT_CATEGORY = "general"


def _first_dict(value: Any) -> dict[str, Any] | None:
    if isinstance(value, dict):
        return value
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


class JokesOneProvider(JokeProvider):
    name = "Jokes One API"
    base_url = "https://api.jokes.one"
    categories = ("general", "dad", "programming", "science")

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_s=timeout_s, transport=transport)
        self._api_key = api_key if api_key is not None else config.jokes_one_api_key()

    async def get_random_joke(self) -> Joke:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["X-JokesOne-Api-Secret"] = self._api_key

        try:
            data = await self._get_json("/jod", headers=headers)
            return self._normalize(data)
        except UpstreamError as exc:
            logger.warning("jokes_one_fallback reason=%s", exc)
            return self.fallback_joke()

    def fallback_joke(self) -> Joke:
        return Joke(joke={"content": FALLBACK_CONTENT}, category=FALLBACK_CATEGORY, type="single")

    def _normalize(self, data: Any) -> Joke:
        if not isinstance(data, dict):
            raise UpstreamError(f"{self.name} returned a non-object body.", provider=self.name)

        legacy = _first_dict(data.get("joke"))
        if legacy is not None and legacy.get("text"):
            return self._build_joke(
                id=legacy.get("id"),
                joke={"content": legacy.get("text")},
                category=legacy.get("category") or DEFAULT_CATEGORY,
                type="single",
            )

        contents = data.get("contents")
        entry = _first_dict(contents.get("jokes")) if isinstance(contents, dict) else None
        inner = entry.get("joke") if entry is not None else None
        if not isinstance(inner, dict):
            raise UpstreamError(f"{self.name} returned no joke.", provider=self.name)

        return self._build_joke(
            id=inner.get("id"),
            joke={"content": inner.get("text")},
            category=entry.get("category") or DEFAULT_CATEGORY,
            type="single",
        )
