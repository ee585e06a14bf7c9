"""
Store health endpoint.

Probes the configured backend with a bounded timeout. The endpoint
never fails: an unreachable store is reported as unhealthy, not as a 500.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from headlines import __version__
from headlines.api.deps import get_current_settings, get_store
from headlines.api.schemas.health import HealthResponse
from headlines.settings import Settings
from headlines.store.base import HeadlineStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Store backend health",
)
async def health_check(
    store: HeadlineStore = Depends(get_store),
    settings: Settings = Depends(get_current_settings),
) -> HealthResponse:
    try:
        detail = await asyncio.wait_for(store.ping(), timeout=settings.store_timeout)
        healthy = True
    except Exception as exc:
        logger.warning("Health check: %s store unhealthy: %s", store.name, exc)
        detail = str(exc)[:200] or type(exc).__name__
        healthy = False

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        backend=store.name,
        detail=detail,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )
