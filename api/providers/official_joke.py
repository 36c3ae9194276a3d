"""
Official Joke API (https://official-joke-api.appspot.com).

Random:   GET /random_joke            -> {"type": "general", "setup": ..., "punchline": ..., "id": 1}
Category: GET /jokes/{type}/random    -> [ {same object} ]

The upstream calls its category field `type`; every joke is two-part.
"""

from __future__ import annotations

from typing import Any

from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke

DEFAULT_CATEGORY = "general"


class OfficialJokeProvider(JokeProvider):
    name = "Official Joke API"
    base_url = "https://official-joke-api.appspot.com"
    categories = ("general", "programming", "knock-knock", "dad")

    async def get_random_joke(self) -> Joke:
        data = await self._get_json("/random_joke")
        return self._normalize(data)

    async def get_joke_by_category(self, category: str) -> Joke:
        known = self._known_category(category) or DEFAULT_CATEGORY
        data = await self._get_json(f"/jokes/{known}/random")

        # This endpoint wraps the joke in a one-element array.
        if isinstance(data, list):
            if not data:
                raise UpstreamError(f"{self.name} returned no joke for category {known!r}.", provider=self.name)
            data = data[0]
        return self._normalize(data)

    def _normalize(self, data: Any) -> Joke:
        if not isinstance(data, dict):
            raise UpstreamError(f"{self.name} returned a non-object body.", provider=self.name)

        return self._build_joke(
            id=data.get("id"),
            joke={"setup": data.get("setup"), "punchline": data.get("punchline")},
            category=data.get("type"),
            type="twopart",
        )
