"""
Custom exceptions and handlers for SlideFlix API.

Every error response has the same body:
``{"success": false, "error": ..., "errorType": ..., "details": {...}}``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slideflix.composition.exceptions import (
    CompositionError,
    DownloadError,
    EncodeError,
    EncodeTimeoutError,
    PublishError,
    ResourceError,
    ValidationError,
)
from slideflix.storage.exceptions import StorageError

from .models.responses import ErrorResponse

logger = logging.getLogger(__name__)

# Diagnostics can be tens of KB; responses carry only the end of it
MAX_DIAGNOSTICS_CHARS = 2000

COMPOSITION_STATUS_CODES = (
    (ValidationError, 400),
    (DownloadError, 502),
    (PublishError, 502),
    (EncodeTimeoutError, 504),
    (EncodeError, 500),
    (ResourceError, 500),
)


class APIException(Exception):
    """Base API exception."""
    error_type = "api_error"

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(APIException):
    """Missing or wrong bearer token."""
    error_type = "unauthorized"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 401, details)


class NotFoundError(APIException):
    """Resource not found error."""
    error_type = "not_found"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 404, details)


def status_code_for(exc: CompositionError) -> int:
    for error_class, status_code in COMPOSITION_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


def _error_response(status_code: int, message: str, error_type: str,
                    details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    body = ErrorResponse(error=message, error_type=error_type, details=details or {})
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body.to_body()))


async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions."""
    return _error_response(exc.status_code, exc.message, exc.error_type, exc.details)


async def composition_exception_handler(request: Request, exc: CompositionError):
    """Map pipeline failures to HTTP status codes."""
    status_code = status_code_for(exc)
    details = dict(exc.details)
    diagnostics = details.get("diagnostics")
    if isinstance(diagnostics, str) and len(diagnostics) > MAX_DIAGNOSTICS_CHARS:
        details["diagnostics"] = diagnostics[-MAX_DIAGNOSTICS_CHARS:]

    log = logger.warning if status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} failed ({exc.kind}): {exc.message}")
    return _error_response(status_code, exc.message, exc.kind, details)


async def storage_exception_handler(request: Request, exc: StorageError):
    """Publisher misconfiguration surfaced while resolving dependencies."""
    logger.error(f"Storage error: {exc}")
    return _error_response(500, str(exc), "storage_error")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400 like every other validation failure."""
    # Rejected input is not echoed back: it may hold NaN/Infinity, which JSON cannot carry
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    return _error_response(400, "Invalid request body", ValidationError.kind,
                           {"errors": jsonable_encoder(errors)})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions (including unknown routes)."""
    if exc.status_code == 404:
        return _error_response(404, "Route not found", "not_found", {"path": request.url.path})
    return _error_response(exc.status_code, str(exc.detail), "http_error", {"status_code": exc.status_code})


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(500, "An internal server error occurred", "internal_error")
