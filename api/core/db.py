"""
Async database access (raw SQL) using asyncpg.

`Database` owns one connection pool. The FastAPI app constructs it, calls
`init()` on startup and `close()` on shutdown (see `api/main.py`), and hands
the same instance to every repository.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from .config import DatabaseConfig
from .errors import PersistenceError

logger = logging.getLogger(__name__)

# Failures that mean "the database call did not work", as opposed to bugs.
DB_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, config: DatabaseConfig | None = None) -> None:
        self._config = config or DatabaseConfig.from_env()
        self._pool: asyncpg.Pool | None = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    async def init(self) -> None:
        if self._pool is not None:
            return None

        cfg = self._config
        connect_kwargs: dict[str, Any] = {}
        if cfg.dsn:
            connect_kwargs["dsn"] = cfg.dsn
        else:
            connect_kwargs.update(
                host=cfg.host,
                port=cfg.port,
                database=cfg.database,
                user=cfg.user,
                password=cfg.password,
            )
        if cfg.ssl:
            connect_kwargs["ssl"] = "require"

        try:
            pool = await asyncpg.create_pool(
                min_size=1,
                max_size=cfg.pool_max,
                timeout=cfg.connect_timeout_s,
                command_timeout=cfg.command_timeout_s,
                max_inactive_connection_lifetime=cfg.idle_timeout_s,
                **connect_kwargs,
            )
        except DB_ERRORS as exc:
            logger.exception("database_connect_failed target=%s", cfg.describe())
            raise PersistenceError("Failed to connect to the database.") from exc

        self._pool = pool
        logger.info("database_connected target=%s pool_max=%s", cfg.describe(), cfg.pool_max)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("database_pool_closed")

    async def __aenter__(self) -> "Database":
        await self.init()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise PersistenceError("Database is not initialized. Call init() on startup.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow one connection; it goes back to the pool even if the body raises.
        """
        async with self.pool.acquire() as conn:
            yield conn

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        start = time.perf_counter()
        row = await self.pool.fetchrow(sql, *args)
        self._log_query(sql, start, 0 if row is None else 1)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        start = time.perf_counter()
        rows = await self.pool.fetch(sql, *args)
        self._log_query(sql, start, len(rows))
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        start = time.perf_counter()
        await self.pool.execute(sql, *args)
        self._log_query(sql, start, None)

    async def test_connection(self) -> bool:
        try:
            row = await self.fetch_one("SELECT now() AS current_time")
        except (PersistenceError, *DB_ERRORS):
            logger.warning("database_ping_failed target=%s", self._config.describe(), exc_info=True)
            return False
        logger.debug("database_ping current_time=%s", (row or {}).get("current_time"))
        return row is not None

    @staticmethod
    def _log_query(sql: str, start: float, rows: int | None) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        duration_ms = (time.perf_counter() - start) * 1000.0
        first_line = " ".join(sql.split())[:120]
        logger.debug("query_executed duration_ms=%.1f rows=%s sql=%s", duration_ms, rows, first_line)
