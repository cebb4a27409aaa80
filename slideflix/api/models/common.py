"""
Common models for SlideFlix API
"""

from typing import List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Response timestamp (ISO 8601)")
    uptime: float = Field(..., description="Seconds since the API started")
    service: str = Field(..., description="Service name")


class ServiceInfoResponse(BaseModel):
    """Root endpoint descriptor."""

    service: str
    version: str
    status: str
    endpoints: List[str]
