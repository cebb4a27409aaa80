"""
Health check endpoints for SlideFlix API
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from slideflix import settings
from slideflix.api.models.common import HealthResponse

router = APIRouter()

_STARTED = time.monotonic()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=round(time.monotonic() - _STARTED, 3),
        service=settings.get_app_name(),
    )
