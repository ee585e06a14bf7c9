"""
Headline DTOs for the read, write and history endpoints.

Field names match the JSON the browser front end consumes, so they are
part of the public contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HeadlineResponse(BaseModel):
    """Current headline for a country, or nulls when none was ever set."""

    model_config = ConfigDict(from_attributes=True)

    country: str = Field(..., description="Country key exactly as requested")
    headline: Optional[str] = Field(None, description="Headline text")
    timestamp: Optional[int] = Field(
        None, description="Server write time in milliseconds since the epoch"
    )


class RecentResponse(BaseModel):
    """Most recent headlines for a country, newest first."""

    recent: list[HeadlineResponse] = Field(default_factory=list)


class HeadlineUpdate(BaseModel):
    """Documented request body for setting a headline.

    The route reads the raw JSON itself so a malformed body is a 400 from
    the service; this model only describes the expected shape.
    """

    model_config = ConfigDict(extra="ignore")

    headline: str = Field(..., description="Headline text, trimmed and truncated on save")
