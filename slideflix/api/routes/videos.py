"""
Video generation endpoint for SlideFlix API.

The handler is a plain ``def`` so FastAPI runs the blocking composition in
its threadpool instead of on the event loop.
"""

import base64
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from slideflix import settings
from slideflix.api.dependencies import get_composition_service, get_storage, verify_api_key
from slideflix.api.models.requests import GenerateVideoRequest
from slideflix.api.models.responses import GenerateVideoResponse
from slideflix.composition.service import CompositionService
from slideflix.storage.base import StorageBackend
from slideflix.storage.factory import create_storage_backend_with_config

logger = logging.getLogger(__name__)

router = APIRouter()


def _resolve_publisher(body: GenerateVideoRequest, default: StorageBackend) -> StorageBackend:
    """Per-request Supabase credentials win over the configured backend."""
    if body.has_supabase_credentials:
        return create_storage_backend_with_config(
            "supabase",
            url=body.supabase_url,
            service_key=body.supabase_service_key,
            bucket=settings.get_storage_supabase_bucket(),
            timeout=settings.get_storage_supabase_timeout(),
        )
    return default


@router.post("/generate-video", dependencies=[Depends(verify_api_key)])
def generate_video(
    body: GenerateVideoRequest,
    service: CompositionService = Depends(get_composition_service),
    storage: StorageBackend = Depends(get_storage),
) -> JSONResponse:
    """
    Compose two slides into a crossfade video.

    Returns the public URL of the published video, or the video itself as
    base64 when ``responseFormat`` is ``base64``.
    """
    request = body.to_composition_request(settings.get_default_hold_duration())
    logger.info(
        f"Generate video '{request.output_name}' for {request.owner_id}: "
        f"{len(request.slide_urls)} slides, hold {request.hold_duration}s, "
        f"logo {'yes' if request.logo_url else 'no'}"
    )

    publisher = None if body.inline else _resolve_publisher(body, storage)
    result = service.compose(request, publisher=publisher, inline=body.inline)

    encoded = None
    if result.video_bytes is not None:
        encoded = base64.b64encode(result.video_bytes).decode("ascii")

    return JSONResponse(GenerateVideoResponse.from_result(result, encoded).to_body())
