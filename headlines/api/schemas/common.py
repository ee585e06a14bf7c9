"""
Shared API DTOs.

ProblemDetail follows RFC 9457 for machine-parseable error responses.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """RFC 9457 Problem Details error response.

    All API error responses use this format with Content-Type
    application/problem+json.
    """

    model_config = ConfigDict(from_attributes=True)

    type: str = Field(
        "about:blank",
        description="URI reference identifying the problem type",
    )
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(
        None, description="Human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None,
        description="URI reference identifying the specific occurrence of the problem",
    )
