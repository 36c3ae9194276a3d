from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import asyncpg
import pytest

from core.errors import PersistenceError
from jokes.repository import JokeFilters, JokeRepository
from providers.types import Joke

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def make_joke(external_id: str | None, provider: str = "https://alpha.example", **overrides) -> Joke:
    fields = {"id": external_id, "joke": {"content": f"joke {external_id}"}, "type": "single", "provider": provider}
    fields.update(overrides)
    return Joke(**fields)


def inserted_row(external_id: str | None, provider: str = "https://alpha.example") -> dict:
    return {
        "id": uuid.uuid4(),
        "external_id": external_id,
        "provider": provider,
        "created_at": NOW,
        "updated_at": NOW,
    }


@pytest.mark.asyncio
async def test_insert_jokes_empty_batch_skips_database(fake_db):
    result = await JokeRepository(fake_db).insert_jokes([])

    assert result.inserted == []
    assert result.duplicates == []
    assert result.total_processed == 0
    assert fake_db.calls == []


@pytest.mark.asyncio
async def test_insert_jokes_reconciles_inserted_and_duplicates(fake_db):
    jokes = [make_joke("existing"), make_joke("fresh")]
    fake_db.results.append([inserted_row("fresh")])

    result = await JokeRepository(fake_db).insert_jokes(jokes)

    assert [r["external_id"] for r in result.inserted] == ["fresh"]
    assert result.duplicates == [{"external_id": "existing", "provider": "https://alpha.example"}]
    assert result.total_processed == 2


@pytest.mark.asyncio
async def test_insert_jokes_sends_column_arrays(fake_db):
    jokes = [
        make_joke("1", category="Programming"),
        make_joke(
            "2",
            provider="https://beta.example",
            joke={"setup": "s", "punchline": "p"},
            type="twopart",
            safe=False,
            lang="de",
        ),
    ]
    fake_db.results.append([inserted_row("1"), inserted_row("2", "https://beta.example")])

    await JokeRepository(fake_db).insert_jokes(jokes)

    method, sql, args = fake_db.calls[0]
    assert method == "fetch_all"
    assert "UNNEST" in sql
    assert "DO NOTHING" in sql
    external_ids, contents, categories, types, safe_flags, languages, providers = args
    assert external_ids == ["1", "2"]
    assert [json.loads(c) for c in contents] == [{"content": "joke 1"}, {"setup": "s", "punchline": "p"}]
    assert categories == ["programming", None]
    assert types == ["single", "twopart"]
    assert safe_flags == [True, False]
    assert languages == ["en", "de"]
    assert providers == ["https://alpha.example", "https://beta.example"]


@pytest.mark.asyncio
async def test_insert_jokes_same_key_twice_in_batch_counts_one_duplicate(fake_db):
    jokes = [make_joke("same"), make_joke("same")]
    fake_db.results.append([inserted_row("same")])

    result = await JokeRepository(fake_db).insert_jokes(jokes)

    assert len(result.inserted) == 1
    assert result.duplicates == [{"external_id": "same", "provider": "https://alpha.example"}]


@pytest.mark.asyncio
async def test_insert_jokes_same_id_different_provider_is_not_duplicate(fake_db):
    jokes = [make_joke("7"), make_joke("7", provider="https://beta.example")]
    fake_db.results.append([inserted_row("7"), inserted_row("7", "https://beta.example")])

    result = await JokeRepository(fake_db).insert_jokes(jokes)

    assert result.duplicates == []


@pytest.mark.asyncio
async def test_insert_jokes_without_provider_is_rejected_before_query(fake_db):
    with pytest.raises(PersistenceError):
        await JokeRepository(fake_db).insert_jokes([make_joke("1", provider=None)])
    assert fake_db.calls == []


@pytest.mark.asyncio
async def test_insert_jokes_wraps_database_errors(fake_db, caplog):
    fake_db.error = asyncpg.InterfaceError("connection is closed")

    with pytest.raises(PersistenceError):
        await JokeRepository(fake_db).insert_jokes([make_joke("1")])
    assert "insert_jokes_failed" in caplog.text


@pytest.mark.asyncio
async def test_insert_joke_upserts_and_decodes_payload(fake_db):
    row = {
        **inserted_row("1"),
        "joke": json.dumps({"content": "updated"}),
        "category": None,
        "type": "single",
        "safe": True,
        "lang": "en",
    }
    fake_db.results.append(row)

    result = await JokeRepository(fake_db).insert_joke(make_joke("1", joke={"content": "updated"}))

    _, sql, args = fake_db.calls[0]
    assert "DO UPDATE" in sql
    assert "updated_at = now()" in sql
    assert args[0] == "1"
    assert json.loads(args[1]) == {"content": "updated"}
    assert result["joke"] == {"content": "updated"}


@pytest.mark.asyncio
async def test_insert_joke_wraps_database_errors(fake_db):
    fake_db.error = ConnectionRefusedError("db down")

    with pytest.raises(PersistenceError):
        await JokeRepository(fake_db).insert_joke(make_joke("1"))


@pytest.mark.asyncio
async def test_get_jokes_builds_filters_in_order(fake_db):
    await JokeRepository(fake_db).get_jokes(
        JokeFilters(category="PUN", type="twopart", provider="https://alpha.example", safe=False, limit=10, offset=20)
    )

    _, sql, args = fake_db.calls[0]
    assert "category = $1 AND type = $2 AND provider = $3 AND safe = $4" in sql
    assert "ORDER BY created_at DESC LIMIT $5 OFFSET $6" in sql
    assert args == ("pun", "twopart", "https://alpha.example", False, 10, 20)


@pytest.mark.asyncio
async def test_get_jokes_without_filters_has_no_where(fake_db):
    await JokeRepository(fake_db).get_jokes()

    _, sql, args = fake_db.calls[0]
    assert "WHERE" not in sql
    assert args == ()


@pytest.mark.asyncio
async def test_get_joke_stats_returns_ints(fake_db):
    fake_db.results.append(
        {
            "total_jokes": 5,
            "total_providers": 2,
            "total_categories": 3,
            "single_jokes": 3,
            "twopart_jokes": 1,
            "safe_jokes": 4,
            "unsafe_jokes": 1,
        }
    )

    stats = await JokeRepository(fake_db).get_joke_stats()

    assert stats["single_jokes"] + stats["twopart_jokes"] <= stats["total_jokes"]
    assert stats["safe_jokes"] + stats["unsafe_jokes"] == stats["total_jokes"]


@pytest.mark.asyncio
async def test_get_joke_count_by_provider_passes_optional_filter(fake_db):
    repo = JokeRepository(fake_db)

    await repo.get_joke_count_by_provider()
    await repo.get_joke_count_by_provider("https://alpha.example")

    assert fake_db.calls[0][2] == (None,)
    assert fake_db.calls[1][2] == ("https://alpha.example",)
    assert "ORDER BY joke_count DESC" in fake_db.calls[0][1]


@pytest.mark.asyncio
async def test_get_random_joke_returns_none_for_empty_table(fake_db):
    assert await JokeRepository(fake_db).get_random_joke() is None
