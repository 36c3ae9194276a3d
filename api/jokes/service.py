"""
Joke orchestration.

Flow for a fetch run:
1) Ask the manager for N jokes from random providers (concurrently)
2) Bulk upsert them
3) Report inserted vs duplicate rows
"""

from __future__ import annotations

import logging

from core import config
from providers.manager import JokeManager

from .repository import BatchInsertResult, JokeRepository

logger = logging.getLogger(__name__)


async def fetch_and_store(
    manager: JokeManager,
    repository: JokeRepository,
    *,
    count: int | None = None,
    allow_partial: bool | None = None,
) -> BatchInsertResult:
    n = count if count is not None else config.fetch_batch_size()
    n = max(1, min(n, config.MAX_FETCH_COUNT))
    partial = allow_partial if allow_partial is not None else config.fetch_allow_partial()

    jokes = await manager.get_multiple_jokes(n, allow_partial=partial)
    result = await repository.insert_jokes(jokes)
    logger.info(
        "fetch_run_complete requested=%s fetched=%s inserted=%s duplicates=%s",
        n,
        len(jokes),
        len(result.inserted),
        len(result.duplicates),
    )
    return result
