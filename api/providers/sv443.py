"""
Sv443 JokeAPI mirror (https://sv443.net/jokeapi/v2).

Same body as JokeAPI, but the request pins `type=single,twopart` and the
category list has no "any" entry.
"""

from __future__ import annotations

from typing import Any

from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke

QUERY = "safe-mode&type=single,twopart"


class Sv443JokeProvider(JokeProvider):
    name = "Sv443 JokeAPI"
    base_url = "https://sv443.net/jokeapi/v2"
    categories = ("programming", "miscellaneous", "dark", "pun", "spooky", "christmas")

    async def get_random_joke(self) -> Joke:
        data = await self._get_json(f"/joke/Any?{QUERY}")
        return self._normalize(data)

    async def get_joke_by_category(self, category: str) -> Joke:
        known = self._known_category(category)
        path_category = known.capitalize() if known else "Any"
        data = await self._get_json(f"/joke/{path_category}?{QUERY}")
        return self._normalize(data)

    def _normalize(self, data: Any) -> Joke:
        if not isinstance(data, dict) or data.get("error") is True:
            raise UpstreamError(f"{self.name} returned an error body.", provider=self.name)

        joke_type = data.get("type")
        if joke_type == "single":
            content = {"content": data.get("joke")}
        else:
            joke_type = "twopart"
            content = {"setup": data.get("setup"), "punchline": data.get("delivery")}

        return self._build_joke(
            id=data.get("id"),
            joke=content,
            category=data.get("category"),
            type=joke_type,
            safe=bool(data.get("safe", True)),
            lang=data.get("lang") or "en",
        )
