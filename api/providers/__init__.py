"""
Joke providers: one adapter per upstream joke API, plus the manager that
picks between them.
"""

from __future__ import annotations

import httpx

from .base import JokeProvider
from .chuck_norris import ChuckNorrisProvider
from .dad_jokes import DadJokesProvider
from .jokeapi import JokeApiProvider
from .jokes_one import JokesOneProvider
from .official_joke import OfficialJokeProvider
from .sv443 import Sv443JokeProvider
from .types import Joke, JokeContent, JokeType, ProviderInfo


def default_providers(
    *,
    timeout_s: float | None = None,
    jokes_one_api_key: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[JokeProvider]:
    """
    All six providers, in a stable order.
    """
    return [
        JokeApiProvider(timeout_s=timeout_s, transport=transport),
        DadJokesProvider(timeout_s=timeout_s, transport=transport),
        ChuckNorrisProvider(timeout_s=timeout_s, transport=transport),
        OfficialJokeProvider(timeout_s=timeout_s, transport=transport),
        Sv443JokeProvider(timeout_s=timeout_s, transport=transport),
        JokesOneProvider(jokes_one_api_key, timeout_s=timeout_s, transport=transport),
    ]


__all__ = [
    "ChuckNorrisProvider",
    "DadJokesProvider",
    "Joke",
    "JokeApiProvider",
    "JokeContent",
    "JokeProvider",
    "JokeType",
    "JokesOneProvider",
    "OfficialJokeProvider",
    "ProviderInfo",
    "Sv443JokeProvider",
    "default_providers",
]
