"""
Normalized joke schema shared by every provider.

Upstream APIs disagree on almost everything (field names, numeric vs string
ids, where the category lives). This module is the one shape the rest of the
service sees.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

JokeType = Literal["single", "twopart"]


class JokeContent(BaseModel):
    content: str | None = None
    setup: str | None = None
    punchline: str | None = None

    def is_single(self) -> bool:
        return bool(self.content) and self.setup is None and self.punchline is None

    def is_twopart(self) -> bool:
        return self.content is None and bool(self.setup) and bool(self.punchline)


class Joke(BaseModel):
    """
    A joke as fetched from an upstream API, not yet persisted.

    `id` is the upstream identifier (stored as `external_id`); `provider` is
    filled in by the manager with the provider's base URL.
    """

    id: str | None = None
    joke: JokeContent
    category: str | None = None
    type: JokeType | None = None
    safe: bool = True
    lang: str = "en"
    provider: str | None = Field(default=None, description="Base URL of the source provider.")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            raise ValueError("id must be a string or a number")
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("category")
    @classmethod
    def _lower_category(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @model_validator(mode="after")
    def _check_shape(self) -> "Joke":
        if self.type == "single" and not self.joke.is_single():
            raise ValueError("single jokes carry only `content`")
        if self.type == "twopart" and not self.joke.is_twopart():
            raise ValueError("twopart jokes carry only `setup` and `punchline`")
        if self.type is None and not (self.joke.is_single() or self.joke.is_twopart()):
            raise ValueError("joke must be either `content` or `setup` + `punchline`")
        return self

    def content_json(self) -> dict[str, str]:
        """
        Payload stored in the `joke` jsonb column (unset keys omitted).
        """
        return self.joke.model_dump(exclude_none=True)


class ProviderInfo(BaseModel):
    name: str
    base_url: str
    categories: list[str] = Field(default_factory=list)
