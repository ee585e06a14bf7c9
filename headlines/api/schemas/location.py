"""Visitor location DTO."""

from pydantic import BaseModel, Field

UNKNOWN_COUNTRY = "Unknown"


class LocationResponse(BaseModel):
    country: str = Field(
        UNKNOWN_COUNTRY, description="Country name, or 'Unknown' if unresolved"
    )
