"""
Dependency injection for SlideFlix API
"""

import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Header

from slideflix import settings
from slideflix.composition.service import CompositionService
from slideflix.storage.base import StorageBackend
from slideflix.storage.factory import create_storage_backend

from .exceptions import AuthenticationError

BEARER_PREFIX = "Bearer "


@lru_cache(maxsize=1)
def get_composition_service() -> CompositionService:
    """
    FastAPI dependency for the composition service.

    One service per process; it holds no per-request state.
    """
    return CompositionService.from_settings()


def get_storage() -> StorageBackend:
    """
    FastAPI dependency for the configured publish destination.
    """
    return create_storage_backend()


def verify_api_key(authorization: Optional[str] = Header(None)) -> None:
    """
    Require ``Authorization: Bearer <api key>``.

    Raises:
        AuthenticationError: Header missing, malformed or wrong token
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Unauthorized: missing bearer token")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not secrets.compare_digest(token.encode(), settings.get_api_key().encode()):
        raise AuthenticationError("Unauthorized: invalid token")
