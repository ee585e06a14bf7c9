"""
Pydantic DTO schemas for the headlines API.

    from headlines.api.schemas import HeadlineResponse, RecentResponse
"""

from headlines.api.schemas.common import ProblemDetail
from headlines.api.schemas.headline import (
    HeadlineResponse,
    HeadlineUpdate,
    RecentResponse,
)
from headlines.api.schemas.health import HealthResponse
from headlines.api.schemas.location import UNKNOWN_COUNTRY, LocationResponse

__all__ = [
    "HeadlineResponse",
    "HeadlineUpdate",
    "RecentResponse",
    "LocationResponse",
    "UNKNOWN_COUNTRY",
    "HealthResponse",
    "ProblemDetail",
]
