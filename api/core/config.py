"""
Environment-driven settings.

Every value has a local-development default so the service starts with no
environment at all; invalid numbers fall back to the default as well.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

SERVICE_NAME = "jokes-fetcher"
SERVICE_VERSION = "1.0.0"

MAX_FETCH_COUNT = 100


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


@dataclass(frozen=True)
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    database: str = "jokes_db"
    user: str = "postgres"
    password: str = "password"
    dsn: str | None = None
    ssl: bool = False
    pool_max: int = 20
    idle_timeout_s: float = 30.0
    connect_timeout_s: float = 2.0
    command_timeout_s: float = 30.0

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        url = os.environ.get("DATABASE_URL", "").strip()
        return cls(
            host=_env_str("DB_HOST", "localhost"),
            port=_env_int("DB_PORT", 5432),
            database=_env_str("DB_NAME", "jokes_db"),
            user=_env_str("DB_USER", "postgres"),
            password=_env_str("DB_PASSWORD", "password"),
            dsn=_sanitize_database_url(url) if url else None,
            ssl=_env_bool("DB_SSL", False),
            pool_max=max(1, _env_int("DB_POOL_MAX", 20)),
            idle_timeout_s=_env_float("DB_IDLE_TIMEOUT_S", 30.0),
            connect_timeout_s=_env_float("DB_CONNECT_TIMEOUT_S", 2.0),
            command_timeout_s=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        )

    def describe(self) -> str:
        """
        Loggable target without credentials.
        """
        if self.dsn:
            parts = urlsplit(self.dsn)
            return f"{parts.hostname}:{parts.port or 5432}{parts.path}"
        return f"{self.host}:{self.port}/{self.database}"


def server_host() -> str:
    return _env_str("HOST", "0.0.0.0")


def server_port() -> int:
    return _env_int("PORT", 3000)


def provider_timeout_s() -> float:
    return _env_float("PROVIDER_TIMEOUT_S", 10.0)


def jokes_one_api_key() -> str | None:
    return os.environ.get("JOKES_ONE_API_KEY", "").strip() or None


def fetch_batch_size() -> int:
    return max(1, min(_env_int("FETCH_BATCH_SIZE", MAX_FETCH_COUNT), MAX_FETCH_COUNT))


def fetch_allow_partial() -> bool:
    return _env_bool("FETCH_ALLOW_PARTIAL", False)


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO")
