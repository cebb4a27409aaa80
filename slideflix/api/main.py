from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from slideflix import settings
from slideflix.composition.exceptions import CompositionError
from slideflix.logging_config import setup_logging
from slideflix.media.ffmpeg_utils import find_ffmpeg, is_ffmpeg_available
from slideflix.storage.exceptions import StorageError

from .exceptions import (
    APIException,
    api_exception_handler,
    composition_exception_handler,
    general_exception_handler,
    http_exception_handler,
    storage_exception_handler,
    validation_exception_handler,
)
from .middleware import LoggingMiddleware
from .models.common import ServiceInfoResponse
from .routes import health, videos

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"{settings.get_app_name()} API starting up...")
    if is_ffmpeg_available():
        logger.info(f"✅ FFmpeg found: {find_ffmpeg()}")
    else:
        logger.warning(f"⚠️ FFmpeg not found ({find_ffmpeg()}); video generation will fail")
    logger.info(f"ℹ️ Storage backend: {settings.get_storage_backend()}")

    yield

    logger.info(f"{settings.get_app_name()} API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    load_dotenv()
    setup_logging()

    app = FastAPI(
        title=f"{settings.get_app_name()} API",
        description="Two-slide crossfade video generation API",
        version=settings.get_app_version(),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health.router, tags=["health"])
    app.include_router(videos.router, tags=["videos"])

    @app.get("/", response_model=ServiceInfoResponse)
    async def root() -> ServiceInfoResponse:
        """API root endpoint."""
        return ServiceInfoResponse(
            service=settings.get_app_name(),
            version=settings.get_app_version(),
            status="running",
            endpoints=["/health", "/generate-video"],
        )

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(CompositionError, composition_exception_handler)
    app.add_exception_handler(StorageError, storage_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()

# Allow running with: python -m slideflix.api.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("slideflix.api.main:app", host=settings.get_api_host(), port=settings.get_api_port())
