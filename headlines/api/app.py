"""
FastAPI application factory.

``create_app()`` builds the fully configured application with:
- Lifespan: logging setup, store construction, resource shutdown
- CORS middleware
- RFC 9457 error handlers
- API router at ``/api``
- Static front-end files at ``/`` when ``Settings.static_dir`` exists

Start with::

    uvicorn headlines.api.app:create_app --factory --port 3000
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from headlines import __version__
from headlines.api.deps import close_resources, get_store
from headlines.api.errors import register_error_handlers
from headlines.api.middleware.cors import configure_cors
from headlines.logging_config import setup_logging
from headlines.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, then build the store so bad config fails fast.
    Shutdown: close the store and the shared HTTP session."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        backend=settings.backend,
    )
    logger.info(
        "Headlines API starting (env=%s, backend=%s)",
        settings.environment,
        settings.backend,
    )

    await get_store()

    yield

    logger.info("Headlines API shutting down")
    await close_resources()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the configured FastAPI application.

    Args:
        settings: Settings used for app wiring (CORS, static files).
            Defaults to the cached singleton.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Country Headlines API",
        version=__version__,
        description="Read and write one headline per country, with history.",
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    configure_cors(app, settings)

    from headlines.api.routes.router import api_router

    app.include_router(api_router, prefix="/api")

    # Mounted last: "/" would otherwise shadow the API routes.
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.debug("Static directory %s not found, front end not served", static_dir)

    return app
