"""CycleTrack API — FastAPI application entry point.

Run locally:
    uvicorn cycletrack.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cycletrack.config import Settings, get_settings
from cycletrack.errors import register_exception_handlers
from cycletrack.middleware.auth import JWTAuthMiddleware
from cycletrack.routers import health, periods
from cycletrack.services.entry_store import EntryStore
from cycletrack.services.postgres import (
    PostgresPeriodRepository,
    close_pool,
    ensure_schema,
    init_pool,
)
from cycletrack.services.repository import InMemoryPeriodRepository, PeriodRepository

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cycletrack")


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup / shutdown hooks."""
        logger.info(
            "Starting %s API v%s [%s]",
            settings.app_name,
            settings.app_version,
            settings.environment,
        )
        repository: PeriodRepository
        if settings.database_url:
            await init_pool(settings)
            await ensure_schema()
            repository = PostgresPeriodRepository()
        else:
            logger.warning("DATABASE_URL not set, period entries are kept in memory")
            repository = InMemoryPeriodRepository()
        app.state.entry_store = EntryStore(repository, max_limit=settings.max_page_size)
        yield
        if settings.database_url:
            await close_pool()
        logger.info("CycleTrack API shut down")

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=(
            "Period logging with overlap-safe storage and derived cycle "
            "insights: averages, regularity, and next-period predictions."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    register_exception_handlers(app)

    # ---------- Middleware (last added runs first) ----------

    # JWT authentication
    app.add_middleware(JWTAuthMiddleware, settings=settings)

    # CORS wraps auth so preflight is answered before token checks
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(periods.router, prefix="/api/v1")

    return app


app = create_app()
