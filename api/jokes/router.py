"""
Joke API endpoints.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from core import config
from providers.manager import JokeManager

from . import schemas, service
from .dependencies import get_manager, get_repository
from .repository import JokeFilters, JokeRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/fetch")
async def fetch_jokes(
    count: int | None = Query(default=None, ge=1, le=config.MAX_FETCH_COUNT),
    manager: JokeManager = Depends(get_manager),
    repository: JokeRepository = Depends(get_repository),
):
    """
    Fetch jokes from random providers and store the new ones.
    """
    try:
        result = await service.fetch_and_store(manager, repository, count=count)
    except Exception:
        logger.exception("fetch_run_failed count=%s", count)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch jokes"})

    return {
        "ok": True,
        "inserted": result.inserted,
        "duplicates": result.duplicates,
        "totalProcessed": result.total_processed,
    }


@router.get("/jokes", response_model=schemas.JokeListResponse)
async def list_jokes(
    category: str | None = Query(default=None, max_length=100),
    type: Literal["single", "twopart"] | None = None,
    provider: str | None = Query(default=None, max_length=500),
    safe: bool | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repository: JokeRepository = Depends(get_repository),
) -> dict:
    rows = await repository.get_jokes(
        JokeFilters(
            category=category,
            type=type,
            provider=provider,
            safe=safe,
            limit=limit,
            offset=offset,
        )
    )
    return {"jokes": rows, "limit": limit, "offset": offset, "count": len(rows)}


@router.get("/jokes/random", response_model=schemas.JokeRecord)
async def random_stored_joke(repository: JokeRepository = Depends(get_repository)) -> dict:
    row = await repository.get_random_joke()
    if row is None:
        raise HTTPException(status_code=404, detail="No jokes found in the database.")
    return row


@router.get("/jokes/stats", response_model=schemas.JokeStats)
async def joke_stats(repository: JokeRepository = Depends(get_repository)) -> dict:
    return await repository.get_joke_stats()


@router.get("/jokes/stats/providers", response_model=list[schemas.ProviderStats])
async def joke_stats_by_provider(
    provider: str | None = Query(default=None, max_length=500),
    repository: JokeRepository = Depends(get_repository),
) -> list[dict]:
    return await repository.get_joke_count_by_provider(provider)


@router.get("/jokes/live")
async def live_joke(
    category: str | None = Query(default=None, max_length=100),
    provider: str | None = Query(default=None, max_length=200),
    manager: JokeManager = Depends(get_manager),
) -> dict:
    """
    Fetch one joke straight from upstream without storing it.

    A provider name wins over a category; neither means any provider.
    """
    if provider:
        joke = await manager.get_joke_from_provider(provider)
    elif category:
        joke = await manager.get_joke_by_category(category)
    else:
        joke = await manager.get_random_joke()
    return {"joke": joke.model_dump(mode="json", exclude_none=True)}


@router.get("/providers")
async def list_providers(manager: JokeManager = Depends(get_manager)) -> dict:
    providers = [p.model_dump() for p in manager.get_providers()]
    return {"providers": providers, "count": len(providers)}


@router.get("/categories")
async def list_categories(manager: JokeManager = Depends(get_manager)) -> dict:
    categories = manager.get_all_categories()
    return {"categories": categories, "count": len(categories)}
