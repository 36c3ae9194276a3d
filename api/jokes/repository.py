"""
Joke persistence (raw SQL).

Schema comes from the dbmate migration in `db/migrations/`:
- jokes(id uuid, external_id, joke jsonb, category, type, safe, lang,
  provider, created_at, updated_at), unique (external_id, provider)
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from core.db import DB_ERRORS, Database
from core.errors import PersistenceError
from providers.types import Joke, JokeType

logger = logging.getLogger(__name__)

JOKE_COLUMNS = "id, external_id, joke, category, type, safe, lang, provider, created_at, updated_at"

# Input jokes included in the log line when a batch insert fails.
FAILURE_SAMPLE_SIZE = 3


@dataclass(frozen=True)
class JokeFilters:
    category: str | None = None
    type: JokeType | None = None
    provider: str | None = None
    safe: bool | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True)
class BatchInsertResult:
    inserted: list[dict[str, Any]] = field(default_factory=list)
    duplicates: list[dict[str, Any]] = field(default_factory=list)
    total_processed: int = 0


def _json_arg(value: dict[str, Any]) -> str:
    """
    asyncpg does not encode Python dicts for jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    return json.dumps(value, ensure_ascii=True)


def _decode_joke_column(row: dict[str, Any]) -> dict[str, Any]:
    raw = row.get("joke")
    if isinstance(raw, str):
        row["joke"] = json.loads(raw)
    return row


def _insert_values(joke: Joke) -> tuple[Any, ...]:
    """
    Column values in INSERT order: external_id, joke, category, type, safe, lang, provider.
    """
    if not joke.provider:
        raise PersistenceError("Joke has no provider; it cannot be stored.")
    return (
        joke.id,
        _json_arg(joke.content_json()),
        joke.category,
        joke.type,
        joke.safe,
        joke.lang or "en",
        joke.provider,
    )


def _key(external_id: str | None, provider: str) -> tuple[str | None, str]:
    return (external_id, provider)


def _sample(jokes: Sequence[Joke]) -> list[dict[str, Any]]:
    return [j.model_dump(mode="json") for j in jokes[:FAILURE_SAMPLE_SIZE]]


@contextmanager
def _db_errors(action: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except DB_ERRORS as exc:
        details = " ".join(f"{k}={v!r}" for k, v in context.items())
        logger.exception("%s_failed %s", action, details)
        raise PersistenceError(f"Database call failed: {action}.") from exc


class JokeRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def insert_joke(self, joke: Joke) -> dict[str, Any]:
        """
        Insert one joke, or overwrite the stored one with the same
        (external_id, provider). Returns the resulting row.
        """
        values = _insert_values(joke)
        with _db_errors("insert_joke", external_id=joke.id, provider=joke.provider):
            row = await self._db.fetch_one(
                f"""
                INSERT INTO jokes (external_id, joke, category, type, safe, lang, provider)
                VALUES ($1, $2::jsonb, $3, $4, $5, $6, $7)
                ON CONFLICT (external_id, provider) DO UPDATE
                SET joke = EXCLUDED.joke,
                    category = EXCLUDED.category,
                    type = EXCLUDED.type,
                    safe = EXCLUDED.safe,
                    lang = EXCLUDED.lang,
                    updated_at = now()
                RETURNING {JOKE_COLUMNS}
                """,
                *values,
            )
        if row is None:
            raise PersistenceError("Failed to insert joke.")
        return _decode_joke_column(row)

    async def insert_jokes(self, jokes: Sequence[Joke]) -> BatchInsertResult:
        """
        Bulk insert with UNNEST over column arrays; conflicting rows are skipped,
        never overwritten.

        `RETURNING` only reports rows that were actually inserted, so skipped
        rows are found by diffing the input against that set.
        """
        if not jokes:
            return BatchInsertResult()

        try:
            rows = [_insert_values(j) for j in jokes]
        except PersistenceError:
            logger.error("insert_jokes_rejected count=%s sample=%s", len(jokes), _sample(jokes))
            raise
        external_ids, contents, categories, types, safe_flags, languages, providers = (
            list(column) for column in zip(*rows)
        )

        with _db_errors("insert_jokes", count=len(jokes), sample=_sample(jokes)):
            inserted = await self._db.fetch_all(
                """
                INSERT INTO jokes (external_id, joke, category, type, safe, lang, provider)
                SELECT t.external_id, t.joke::jsonb, t.category, t.type, t.safe, t.lang, t.provider
                FROM UNNEST(
                  $1::varchar[],
                  $2::text[],
                  $3::varchar[],
                  $4::varchar[],
                  $5::boolean[],
                  $6::varchar[],
                  $7::varchar[]
                ) AS t(external_id, joke, category, type, safe, lang, provider)
                ON CONFLICT (external_id, provider) DO NOTHING
                RETURNING id, external_id, provider, created_at, updated_at
                """,
                external_ids,
                contents,
                categories,
                types,
                safe_flags,
                languages,
                providers,
            )

        # Multiset, so a key repeated inside one batch is inserted once and
        # reported as a duplicate afterwards.
        remaining = Counter(_key(row["external_id"], row["provider"]) for row in inserted)
        duplicates: list[dict[str, Any]] = []
        for joke in jokes:
            key = _key(joke.id, joke.provider or "")
            if remaining[key] > 0:
                remaining[key] -= 1
                continue
            duplicates.append({"external_id": joke.id, "provider": joke.provider})

        logger.info(
            "jokes_batch_inserted total=%s inserted=%s duplicates=%s",
            len(jokes),
            len(inserted),
            len(duplicates),
        )
        return BatchInsertResult(inserted=inserted, duplicates=duplicates, total_processed=len(jokes))

    async def get_jokes(self, filters: JokeFilters | None = None) -> list[dict[str, Any]]:
        filters = filters or JokeFilters()
        conditions: list[str] = []
        values: list[Any] = []

        def bind(value: Any) -> str:
            values.append(value)
            return f"${len(values)}"

        if filters.category:
            conditions.append(f"category = {bind(filters.category.lower())}")
        if filters.type:
            conditions.append(f"type = {bind(filters.type)}")
        if filters.provider:
            conditions.append(f"provider = {bind(filters.provider)}")
        if filters.safe is not None:
            conditions.append(f"safe = {bind(filters.safe)}")

        sql = f"SELECT {JOKE_COLUMNS} FROM jokes"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC"
        if filters.limit:
            sql += f" LIMIT {bind(filters.limit)}"
        if filters.offset:
            sql += f" OFFSET {bind(filters.offset)}"

        with _db_errors("get_jokes", filters=filters):
            rows = await self._db.fetch_all(sql, *values)
        return [_decode_joke_column(r) for r in rows]

    async def get_random_joke(self) -> dict[str, Any] | None:
        with _db_errors("get_random_joke"):
            row = await self._db.fetch_one(
                f"""
                SELECT {JOKE_COLUMNS}
                FROM jokes
                ORDER BY random()
                LIMIT 1
                """
            )
        return _decode_joke_column(row) if row is not None else None

    async def get_joke_stats(self) -> dict[str, int]:
        """
        Global counts. Jokes without a type count toward neither
        single_jokes nor twopart_jokes.
        """
        with _db_errors("get_joke_stats"):
            row = await self._db.fetch_one(
                """
                SELECT
                  count(*) AS total_jokes,
                  count(DISTINCT provider) AS total_providers,
                  count(DISTINCT category) AS total_categories,
                  count(*) FILTER (WHERE type = 'single') AS single_jokes,
                  count(*) FILTER (WHERE type = 'twopart') AS twopart_jokes,
                  count(*) FILTER (WHERE safe = true) AS safe_jokes,
                  count(*) FILTER (WHERE safe = false) AS unsafe_jokes
                FROM jokes
                """
            )
        return {k: int(v or 0) for k, v in (row or {}).items()}

    async def get_joke_count_by_provider(self, provider: str | None = None) -> list[dict[str, Any]]:
        with _db_errors("get_joke_count_by_provider", provider=provider):
            return await self._db.fetch_all(
                """
                SELECT
                  provider,
                  count(*) AS joke_count,
                  count(*) FILTER (WHERE type = 'single') AS single_count,
                  count(*) FILTER (WHERE type = 'twopart') AS twopart_count,
                  count(*) FILTER (WHERE safe = true) AS safe_count,
                  count(*) FILTER (WHERE safe = false) AS unsafe_count,
                  max(created_at) AS last_added
                FROM jokes
                WHERE ($1::varchar IS NULL OR provider = $1)
                GROUP BY provider
                ORDER BY joke_count DESC, provider ASC
                """,
                provider,
            )
