from __future__ import annotations

import pytest

from core.config import DatabaseConfig
from core.db import Database
from core.errors import PersistenceError


def make_database() -> Database:
    return Database(DatabaseConfig(host="db.invalid", password="secret"))


@pytest.mark.asyncio
async def test_queries_before_init_raise_persistence_error():
    db = make_database()

    assert db.is_initialized is False
    with pytest.raises(PersistenceError):
        await db.fetch_all("SELECT 1")
    with pytest.raises(PersistenceError):
        async with db.acquire():
            pass


@pytest.mark.asyncio
async def test_test_connection_is_false_when_not_initialized():
    assert await make_database().test_connection() is False


@pytest.mark.asyncio
async def test_close_without_init_is_a_no_op():
    db = make_database()

    await db.close()

    assert db.is_initialized is False


def test_describe_hides_password():
    assert "secret" not in make_database().config.describe()
