"""
Chuck Norris facts (https://api.chucknorris.io).

Body: {"categories": ["dev"], "id": "...", "value": "...", "url": "...", ...}
"""

from __future__ import annotations

from typing import Any

from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke

UNCATEGORIZED = "uncategorized"


class ChuckNorrisProvider(JokeProvider):
    name = "Chuck Norris Jokes API"
    base_url = "https://api.chucknorris.io"
    categories = (
        "animal",
        "career",
        "celebrity",
        "dev",
        "explicit",
        "fashion",
        "food",
        "history",
        "money",
        "movie",
        "music",
        "political",
        "religion",
        "science",
        "sport",
        "travel",
    )

    async def get_random_joke(self) -> Joke:
        data = await self._get_json("/jokes/random")
        return self._normalize(data, default_category=UNCATEGORIZED)

    async def get_joke_by_category(self, category: str) -> Joke:
        known = self._known_category(category)
        if known is None:
            return await self.get_random_joke()

        data = await self._get_json("/jokes/random", params={"category": known})
        return self._normalize(data, default_category=known)

    def _normalize(self, data: Any, *, default_category: str) -> Joke:
        if not isinstance(data, dict):
            raise UpstreamError(f"{self.name} returned a non-object body.", provider=self.name)

        category = default_category
        upstream_categories = data.get("categories")
        if isinstance(upstream_categories, list) and upstream_categories:
            first = upstream_categories[0]
            if isinstance(first, str) and first.strip():
                category = first

        return self._build_joke(
            id=data.get("id"),
            joke={"content": data.get("value")},
            category=category,
            type="single",
        )
