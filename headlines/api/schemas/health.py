"""
Health check DTO for GET /api/health.

Reports whether the configured store backend answers a probe. The
endpoint itself never fails; a down store is reported as unhealthy.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"] = Field(
        ..., description="Whether the store backend responded"
    )
    backend: str = Field(..., description="Configured store backend name")
    detail: Optional[str] = Field(None, description="Probe result or error message")
    timestamp: datetime = Field(..., description="When the check ran")
    version: str = Field(..., description="API server version string")
