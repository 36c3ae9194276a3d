"""
JokeAPI (https://v2.jokeapi.dev).

Body shape:
    {"error": false, "category": "Programming", "type": "single", "joke": "...",
     "safe": true, "id": 12, "lang": "en"}
    {"error": false, "category": "Pun", "type": "twopart", "setup": "...",
     "delivery": "...", "safe": true, "id": 40, "lang": "en"}
"""

from __future__ import annotations

from typing import Any

from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke


class JokeApiProvider(JokeProvider):
    name = "JokesAPI (jokeapi.dev)"
    base_url = "https://v2.jokeapi.dev"
    categories = ("any", "miscellaneous", "programming", "dark", "pun", "spooky", "christmas")

    async def get_random_joke(self) -> Joke:
        data = await self._get_json("/joke/Any?safe-mode")
        return self._normalize(data)

    async def get_joke_by_category(self, category: str) -> Joke:
        known = self._known_category(category)
        path_category = known.capitalize() if known else "Any"
        data = await self._get_json(f"/joke/{path_category}?safe-mode")
        return self._normalize(data)

    def _normalize(self, data: Any) -> Joke:
        if not isinstance(data, dict):
            raise UpstreamError(f"{self.name} returned a non-object body.", provider=self.name)
        if data.get("error") is True:
            message = str(data.get("message") or "unknown error")
            raise UpstreamError(f"{self.name} reported an error: {message}", provider=self.name)

        common = {
            "id": data.get("id"),
            "category": data.get("category"),
            "safe": bool(data.get("safe", True)),
            "lang": data.get("lang") or "en",
        }
        if data.get("type") == "single":
            return self._build_joke(type="single", joke={"content": data.get("joke")}, **common)
        return self._build_joke(
            type="twopart",
            joke={"setup": data.get("setup"), "punchline": data.get("delivery")},
            **common,
        )
