"""
FastAPI dependency injection providers.

Thin wrappers that adapt infrastructure (settings, the shared HTTP
session, the headline store, the geolocator) into ``Depends()``
callables. Keep this module free of business logic -- it's pure plumbing.
Tests swap any provider through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Optional

import aiohttp

from headlines.api.services.geolocation import GeoLocator
from headlines.api.services.headline_service import HeadlineService
from headlines.settings import Settings, get_settings
from headlines.store import HeadlineStore, create_store

logger = logging.getLogger(__name__)

# Module-level singletons -- lazy-initialized on first access.
_http_session: Optional[aiohttp.ClientSession] = None
_store: Optional[HeadlineStore] = None
_geolocator: Optional[GeoLocator] = None


def _get_http_session() -> aiohttp.ClientSession:
    """Return the process-wide HTTP session (must be called inside the loop)."""
    global _http_session  # noqa: PLW0603
    if _http_session is None or _http_session.closed:
        _http_session = aiohttp.ClientSession()
    return _http_session


def get_current_settings() -> Settings:
    """Return the cached settings singleton."""
    return get_settings()


async def get_store() -> HeadlineStore:
    """Return the configured ``HeadlineStore`` singleton.

    Raises:
        ValueError: If the settings describe an incomplete backend.
    """
    global _store  # noqa: PLW0603
    if _store is None:
        settings = get_settings()
        session = _get_http_session() if settings.backend == "rest" else None
        _store = create_store(settings, session=session)
    return _store


async def get_headline_service() -> HeadlineService:
    """Build a ``HeadlineService`` over the store singleton.

    The service holds no state of its own, so a fresh one per request is
    fine.
    """
    settings = get_settings()
    return HeadlineService(
        await get_store(),
        max_length=settings.max_length,
        timeout=settings.store_timeout,
    )


async def get_geolocator() -> GeoLocator:
    """Return the ``GeoLocator`` singleton sharing the HTTP session."""
    global _geolocator  # noqa: PLW0603
    if _geolocator is None:
        settings = get_settings()
        _geolocator = GeoLocator(
            session=_get_http_session(),
            base_url=settings.geo_url,
            timeout=settings.geo_timeout,
        )
    return _geolocator


async def close_resources() -> None:
    """Close the store and HTTP session (call from app lifespan shutdown)."""
    global _http_session, _store, _geolocator  # noqa: PLW0603
    if _store is not None:
        try:
            await _store.close()
        except Exception as exc:
            logger.warning("Error closing %s store: %s", _store.name, exc)
        _store = None
    if _geolocator is not None:
        await _geolocator.close()
        _geolocator = None
    if _http_session is not None:
        await _http_session.close()
        _http_session = None
