"""
Joke manager: random selection across providers, category routing and
concurrent multi-fetch.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence

from core.errors import NotFoundError

from . import default_providers
from .base import JokeProvider
from .types import Joke, ProviderInfo

logger = logging.getLogger(__name__)


class JokeManager:
    def __init__(
        self,
        providers: Sequence[JokeProvider] | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._providers: tuple[JokeProvider, ...] = tuple(
            providers if providers is not None else default_providers()
        )
        self._rng = rng or random.Random()

    @property
    def providers(self) -> tuple[JokeProvider, ...]:
        return self._providers

    def _pick(self, candidates: Sequence[JokeProvider]) -> JokeProvider:
        return candidates[self._rng.randrange(len(candidates))]

    @staticmethod
    def _tag(joke: Joke, provider: JokeProvider) -> Joke:
        return joke.model_copy(update={"provider": provider.base_url})

    async def get_random_joke(self) -> Joke:
        """
        Get a random joke from a random provider.

        Provider failures are not caught here.
        """
        if not self._providers:
            raise NotFoundError("No providers available.")

        provider = self._pick(self._providers)
        joke = await provider.get_random_joke()
        return self._tag(joke, provider)

    async def get_joke_from_provider(self, provider_name: str) -> Joke:
        wanted = (provider_name or "").strip().lower()
        provider = next((p for p in self._providers if wanted and wanted in p.name.lower()), None)
        if provider is None:
            raise NotFoundError(f"Provider {provider_name!r} not found.")

        joke = await provider.get_random_joke()
        return self._tag(joke, provider)

    async def get_joke_by_category(self, category: str) -> Joke:
        """
        Get a joke from any provider that lists a matching category.

        Falls back to an unfiltered random joke when nobody matches.
        """
        wanted = (category or "").strip().lower()
        matching = [
            p
            for p in self._providers
            if wanted and any(wanted in known.lower() for known in p.get_supported_categories())
        ]
        if not matching:
            return await self.get_random_joke()

        provider = self._pick(matching)
        joke = await provider.get_joke_by_category(category)
        return self._tag(joke, provider)

    async def get_multiple_jokes(self, count: int, *, allow_partial: bool = False) -> list[Joke]:
        """
        Fetch `count` jokes concurrently, each from an independently chosen
        provider. Results keep request order.

        By default one failed fetch fails the whole call. With
        `allow_partial=True` failures are logged and left out.
        """
        if count <= 0:
            return []

        tasks = [self.get_random_joke() for _ in range(count)]
        if not allow_partial:
            return list(await asyncio.gather(*tasks))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        jokes: list[Joke] = []
        failures = 0
        for result in results:
            if isinstance(result, Exception):
                failures += 1
                logger.warning("joke_fetch_failed error=%s", result)
                continue
            if isinstance(result, BaseException):
                raise result
            jokes.append(result)

        if failures:
            logger.info("multi_fetch_partial requested=%s fetched=%s failed=%s", count, len(jokes), failures)
        return jokes

    def get_providers(self) -> list[ProviderInfo]:
        return [p.info() for p in self._providers]

    def get_all_categories(self) -> list[str]:
        categories: set[str] = set()
        for provider in self._providers:
            categories.update(provider.get_supported_categories())
        return sorted(categories)
