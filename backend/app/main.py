"""FastAPI application for the concept graph resolver."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import concepts_router, query_flow_router, review_router
from app.core.config import get_feature_flags, settings
from app.core.database import close_db, get_db, init_db
from app.core.queue import clear_queues
from app.core.redis import close_redis, ping_redis
from app.core.schema_health import SchemaHealthChecker, TTLCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "concept-graph-resolver"
VERSION = "0.1.0"

DbSession = Annotated[AsyncSession, Depends(get_db)]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the schema health cache on startup; release queues, Redis and the engine on shutdown."""
    if settings.debug:
        await init_db()

    app.state.schema_health_cache = TTLCache(ttl_seconds=settings.schema_health_ttl_seconds)
    flags = get_feature_flags(settings)
    logger.info(
        f"Concept graph flags: graph={flags.graph_enabled}, rewrite={flags.rewrite_enabled}, "
        f"strict_grounding={flags.strict_grounding}, kill_switch={flags.kill_switch}"
    )

    yield

    # Shutdown
    clear_queues()
    close_redis()
    await close_db()


app = FastAPI(
    title="Concept Graph Resolver",
    description=(
        "Resolves internal terminology in user queries to versioned, scoped definitions, "
        "and runs the human review workflow for mined slang terms."
    ),
    version=VERSION,
    lifespan=lifespan,
)

# Local review UI origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(query_flow_router)
app.include_router(concepts_router)
app.include_router(review_router)


def get_schema_health_cache(request: Request) -> TTLCache:
    """Schema health cache created at startup (created on demand if missing)."""
    cache = getattr(request.app.state, "schema_health_cache", None)
    if cache is None:
        cache = TTLCache(ttl_seconds=settings.schema_health_ttl_seconds)
        request.app.state.schema_health_cache = cache
    return cache


SchemaCache = Annotated[TTLCache, Depends(get_schema_health_cache)]


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe).

    Use /ready for readiness checks.
    """
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/ready", tags=["Health"])
async def readiness_check(db: DbSession, cache: SchemaCache) -> JSONResponse:
    """Readiness check endpoint.

    Verifies the concept graph schema (cached) and Redis connectivity.
    Returns 503 when the schema is incomplete.
    """
    checker = SchemaHealthChecker(cache)
    report = await db.run_sync(checker.check)
    redis_ok = ping_redis()

    body = {
        "status": "ready" if report.ok else "not_ready",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "schema": {
            "ok": report.ok,
            "missing_tables": list(report.missing_tables),
            "missing_columns": {table: list(cols) for table, cols in report.missing_columns.items()},
        },
        "redis": redis_ok,
    }
    return JSONResponse(status_code=200 if report.ok else 503, content=body)


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "Concept Graph Resolver API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
    }
