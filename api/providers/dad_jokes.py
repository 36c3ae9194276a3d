"""
icanhazdadjoke (https://icanhazdadjoke.com).

Needs `Accept: application/json`, otherwise the site answers with HTML.
Body: {"id": "R7UfaahVfFd", "joke": "...", "status": 200}
"""

from __future__ import annotations

from core.errors import UpstreamError

from .base import JokeProvider
from .types import Joke

CATEGORY = "dad jokes"

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "jokes-fetcher (https://github.com/jokes-fetcher/jokes-fetcher)",
}


class DadJokesProvider(JokeProvider):
    name = "icanhazdadjoke"
    base_url = "https://icanhazdadjoke.com"
    categories = (CATEGORY,)

    async def get_random_joke(self) -> Joke:
        data = await self._get_json("/", headers=HEADERS)
        if not isinstance(data, dict):
            raise UpstreamError(f"{self.name} returned a non-object body.", provider=self.name)

        return self._build_joke(
            id=data.get("id"),
            joke={"content": data.get("joke")},
            category=CATEGORY,
            type="single",
        )
