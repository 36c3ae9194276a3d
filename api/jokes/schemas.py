"""
Response models for joke endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class JokeRecord(BaseModel):
    id: UUID
    external_id: str | None = None
    joke: dict[str, Any]
    category: str | None = None
    type: str | None = None
    safe: bool
    lang: str
    provider: str
    created_at: datetime
    updated_at: datetime


class JokeListResponse(BaseModel):
    jokes: list[JokeRecord]
    limit: int
    offset: int
    count: int


class JokeStats(BaseModel):
    total_jokes: int
    total_providers: int
    total_categories: int
    single_jokes: int
    twopart_jokes: int
    safe_jokes: int
    unsafe_jokes: int


class ProviderStats(BaseModel):
    provider: str
    joke_count: int
    single_count: int
    twopart_count: int
    safe_count: int
    unsafe_count: int
    last_added: datetime | None = None
