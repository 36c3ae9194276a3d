"""
FastAPI dependencies: the shared manager and repository live on `app.state`.
"""

from __future__ import annotations

from fastapi import Request

from core.db import Database
from providers.manager import JokeManager

from .repository import JokeRepository


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_manager(request: Request) -> JokeManager:
    return request.app.state.manager


def get_repository(request: Request) -> JokeRepository:
    return JokeRepository(get_database(request))
