from __future__ import annotations

from typing import Any

import httpx
import pytest

from core.config import DatabaseConfig
from core.errors import UpstreamError
from providers.base import JokeProvider
from providers.types import Joke


class FakeProvider(JokeProvider):
    """
    In-memory provider: returns a fixed joke (or raises) without any HTTP.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        *,
        categories: tuple[str, ...] = (),
        joke: Joke | None = None,
        fail: bool = False,
    ) -> None:
        super().__init__(timeout_s=1.0)
        self.name = name
        self.base_url = base_url
        self.categories = categories
        self._joke = joke or Joke(id=f"{name}-1", joke={"content": f"a joke from {name}"}, type="single")
        self._fail = fail
        self.random_calls = 0
        self.category_calls: list[str] = []

    async def get_random_joke(self) -> Joke:
        self.random_calls += 1
        if self._fail:
            raise UpstreamError(f"{self.name} is down", provider=self.name)
        return self._joke

    async def get_joke_by_category(self, category: str) -> Joke:
        self.category_calls.append(category)
        return await self.get_random_joke()


class FakeDatabase:
    """
    Stands in for core.db.Database: records every call and replays queued results.
    """

    def __init__(self) -> None:
        self.config = DatabaseConfig()
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.results: list[Any] = []
        self.error: BaseException | None = None
        self.healthy = True
        self.initialized = False

    async def init(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.initialized = False

    def _next(self, method: str, sql: str, args: tuple[Any, ...], default: Any) -> Any:
        self.calls.append((method, sql, args))
        if self.error is not None:
            raise self.error
        return self.results.pop(0) if self.results else default

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        return self._next("fetch_one", sql, args, None)

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        return self._next("fetch_all", sql, args, [])

    async def execute(self, sql: str, *args: Any) -> None:
        self._next("execute", sql, args, None)

    async def test_connection(self) -> bool:
        if self.error is not None:
            raise self.error
        return self.healthy


def json_transport(payload: Any, *, status_code: int = 200, seen: list[httpx.Request] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_providers() -> list[FakeProvider]:
    return [
        FakeProvider("Alpha Jokes", "https://alpha.example", categories=("programming", "pun")),
        FakeProvider("Beta Jokes", "https://beta.example", categories=("dad", "programming")),
        FakeProvider("Gamma", "https://gamma.example"),
    ]
