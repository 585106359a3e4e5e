"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from cycletrack.dependencies import AppSettings, Store

router = APIRouter(tags=["system"])
logger = logging.getLogger("cycletrack.health")


@router.get("/health")
async def health_check(settings: AppSettings, store: Store) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also pings the entry storage backend.
    """
    storage_ok = False
    try:
        await store.repository.ping()
        storage_ok = True
    except Exception as exc:
        logger.warning("Health check storage probe failed: %s", exc)

    return {
        "status": "healthy" if storage_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "storage": "connected" if storage_ok else "unreachable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
