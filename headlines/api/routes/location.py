"""
Visitor location endpoint.

    GET /location -- ``{"country": "<name>"}``, ``"Unknown"`` on any failure
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from headlines.api.deps import get_geolocator
from headlines.api.schemas.location import LocationResponse
from headlines.api.services.geolocation import GeoLocator, client_ip

router = APIRouter()


@router.get(
    "/location",
    response_model=LocationResponse,
    summary="Resolve the visitor's country from their IP",
)
async def get_location(
    request: Request,
    geolocator: GeoLocator = Depends(get_geolocator),
) -> LocationResponse:
    ip = client_ip(
        request.headers.get("x-forwarded-for"),
        request.client.host if request.client else None,
    )
    country = await geolocator.resolve_country(ip)
    return LocationResponse(country=country)
