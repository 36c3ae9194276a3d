from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core import config
from core.db import Database
from core.errors import NotFoundError, PersistenceError, UpstreamError
from core.log import configure_logging
from jokes import router as jokes_router
from jokes.dependencies import get_database, get_manager
from providers.manager import JokeManager

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(*, database: Database | None = None, manager: JokeManager | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db: Database = app.state.database
        # Keep serving when the database is down; /db/health reports it.
        try:
            await db.init()
        except PersistenceError:
            logger.error("database_unavailable_at_startup target=%s", db.config.describe())
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(title="Jokes API Fetcher", version=config.SERVICE_VERSION, lifespan=lifespan)
    app.state.database = database or Database()
    app.state.manager = manager or JokeManager()

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(UpstreamError)
    async def upstream_handler(_: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning("upstream_failed provider=%s error=%s", exc.provider, exc)
        return JSONResponse(status_code=502, content={"error": "Joke provider request failed"})

    @app.exception_handler(PersistenceError)
    async def persistence_handler(_: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("persistence_failed error=%s", exc)
        return JSONResponse(status_code=500, content={"error": "Database error"})

    app.include_router(jokes_router.router, tags=["jokes"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "timestamp": _now_iso(), "service": config.SERVICE_NAME}

    @app.get("/db/health")
    async def db_health(request: Request):
        db = get_database(request)
        try:
            is_healthy = await db.test_connection()
        except Exception:
            logger.exception("db_health_failed")
            return JSONResponse(status_code=500, content={"database": "error", "timestamp": _now_iso()})
        return {"database": "connected" if is_healthy else "disconnected", "timestamp": _now_iso()}

    @app.get("/")
    def root(request: Request) -> dict:
        manager = get_manager(request)
        return {
            "name": "Jokes API Fetcher",
            "version": config.SERVICE_VERSION,
            "description": "A joke API fetcher with multiple providers",
            "endpoints": {
                "GET /health": "Service health check",
                "GET /db/health": "Database health check",
                "GET /fetch": "Fetch random jokes from random providers and store them",
                "GET /jokes": "List stored jokes (category, type, provider, safe, limit, offset)",
                "GET /jokes/random": "A random stored joke",
                "GET /jokes/stats": "Stored joke statistics",
                "GET /jokes/stats/providers": "Stored joke counts per provider",
                "GET /jokes/live": "Fetch one joke without storing it (category or provider)",
                "GET /providers": "Configured providers",
                "GET /categories": "Categories across all providers",
            },
            "providers": [
                {"name": p.name, "baseUrl": p.base_url, "categoriesCount": len(p.categories)}
                for p in manager.get_providers()
            ],
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=config.server_host(), port=config.server_port())


if __name__ == "__main__":
    run()
