"""
API router -- aggregates all sub-routers.

Included in the app at the ``/api`` prefix by ``create_app()``.
"""

from __future__ import annotations

from fastapi import APIRouter

from headlines.api.routes.headlines import router as headlines_router
from headlines.api.routes.health import router as health_router
from headlines.api.routes.location import router as location_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(location_router, tags=["location"])
api_router.include_router(headlines_router, tags=["headlines"])
