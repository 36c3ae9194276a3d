"""
Base class for joke providers.

A provider wraps exactly one upstream joke API. Subclasses own their URLs and
their response parsing; the base class only supplies the HTTP call and the
conversion of a parsed dict into a validated `Joke`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from pydantic import ValidationError

from core import config
from core.errors import UpstreamError

from .types import Joke, ProviderInfo

logger = logging.getLogger(__name__)


class JokeProvider(ABC):
    name: str
    base_url: str
    categories: tuple[str, ...] = ()

    def __init__(
        self,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_s = timeout_s if timeout_s is not None else config.provider_timeout_s()
        # Tests inject httpx.MockTransport here.
        self._transport = transport

    @abstractmethod
    async def get_random_joke(self) -> Joke:
        """Fetch one random joke and return it normalized."""
        raise NotImplementedError

    async def get_joke_by_category(self, category: str) -> Joke:
        return await self.get_random_joke()

    def get_supported_categories(self) -> list[str]:
        return list(self.categories)

    def info(self) -> ProviderInfo:
        return ProviderInfo(name=self.name, base_url=self.base_url, categories=self.get_supported_categories())

    def _known_category(self, category: str) -> str | None:
        """
        Case-insensitive exact match against this provider's categories.
        """
        wanted = (category or "").strip().lower()
        if not wanted:
            return None
        for known in self.categories:
            if known.lower() == wanted:
                return known
        return None

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout_s,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{self.name} request failed: {exc}", provider=self.name) from exc

        if not resp.is_success:
            # Avoid dumping huge bodies; include a small snippet.
            body = resp.text[:300]
            raise UpstreamError(
                f"{self.name} request failed: {resp.status_code} {body}",
                provider=self.name,
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(f"{self.name} returned a non-JSON body.", provider=self.name) from exc

    def _build_joke(self, **fields: Any) -> Joke:
        try:
            return Joke(**fields)
        except ValidationError as exc:
            logger.debug("joke_rejected provider=%s errors=%s", self.name, exc.errors())
            raise UpstreamError(f"{self.name} returned an unexpected joke shape.", provider=self.name) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, base_url={self.base_url!r})"
