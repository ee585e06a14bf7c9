"""
Headline endpoints.

Endpoints:
    GET  /headline/{country}   -- Current headline (nulls if none)
    POST /headline/{country}   -- Set a new headline
    GET  /recent/{country}     -- Most recent headlines, newest first

Reads always answer 200. Writes answer 400 for a bad headline and 500
when the store cannot persist it (see ``headlines.api.errors``).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from headlines.api.deps import get_current_settings, get_headline_service
from headlines.api.schemas.headline import (
    HeadlineResponse,
    HeadlineUpdate,
    RecentResponse,
)
from headlines.api.services.headline_service import HeadlineService
from headlines.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/headline/{country}",
    response_model=HeadlineResponse,
    summary="Get the current headline for a country",
)
async def get_headline(
    country: str,
    service: HeadlineService = Depends(get_headline_service),
) -> HeadlineResponse:
    return await service.get_headline(country)


@router.post(
    "/headline/{country}",
    response_model=HeadlineResponse,
    summary="Set the headline for a country",
    description=(
        "Trims the submitted headline, truncates it to the configured maximum "
        "length, stamps it with server time and appends it to the country's "
        "history."
    ),
    responses={400: {"description": "Body unreadable, or headline missing, not a string, or blank"}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": HeadlineUpdate.model_json_schema()}},
        }
    },
)
async def set_headline(
    country: str,
    request: Request,
    service: HeadlineService = Depends(get_headline_service),
) -> HeadlineResponse:
    # Parsed by hand: any unusable body must reach the service as a
    # missing headline (400), never FastAPI's 422.
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    raw = payload.get("headline") if isinstance(payload, dict) else None
    return await service.set_headline(country, raw)


@router.get(
    "/recent/{country}",
    response_model=RecentResponse,
    summary="List recent headlines for a country",
)
async def get_recent(
    country: str,
    service: HeadlineService = Depends(get_headline_service),
    settings: Settings = Depends(get_current_settings),
) -> RecentResponse:
    recent = await service.get_recent(country, limit=settings.recent_limit)
    return RecentResponse(recent=recent)
