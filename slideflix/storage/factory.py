"""
Storage backend factory for SlideFlix.

This module provides factory functions for creating storage backends
based on configuration or explicit parameters.
"""

from pathlib import Path

from .base import StorageBackend
from .exceptions import StorageBackendError
from .inline import InlineStorage
from .local import LocalStorage
from .supabase import SupabaseStorage

BACKEND_TYPES = ("local", "supabase", "inline")


def create_storage_backend() -> StorageBackend:
    """
    Create storage backend based on configuration.

    Raises:
        StorageBackendError: If backend type is unknown or configuration is invalid
    """
    from slideflix import settings

    backend_type = settings.get_storage_backend()

    if backend_type == "local":
        return LocalStorage(Path(settings.get_storage_local_path()))

    elif backend_type == "supabase":
        url = settings.get_storage_supabase_url()
        key = settings.get_storage_supabase_key()
        if not url or not key:
            raise StorageBackendError("Supabase URL and service key are not configured")
        return SupabaseStorage(
            url,
            key,
            bucket=settings.get_storage_supabase_bucket(),
            timeout=settings.get_storage_supabase_timeout(),
        )

    elif backend_type == "inline":
        return InlineStorage()

    else:
        raise StorageBackendError(f"Unknown storage backend: {backend_type}")


def create_storage_backend_with_config(backend_type: str, **kwargs) -> StorageBackend:
    """
    Create storage backend with explicit configuration.

    Args:
        backend_type: One of "local", "supabase", "inline"
        **kwargs: Backend-specific configuration parameters

    Raises:
        StorageBackendError: If backend type is unknown or configuration is invalid
    """
    if backend_type == "local":
        return LocalStorage(Path(kwargs.get('base_path', 'output')))

    elif backend_type == "supabase":
        url = kwargs.get('url')
        service_key = kwargs.get('service_key')
        if not url or not service_key:
            raise StorageBackendError("url and service_key are required for Supabase backend")
        return SupabaseStorage(
            url,
            service_key,
            bucket=kwargs.get('bucket', 'generated-videos'),
            timeout=kwargs.get('timeout', 120.0),
            upsert=kwargs.get('upsert', False),
            session=kwargs.get('session'),
        )

    elif backend_type == "inline":
        return InlineStorage()

    else:
        raise StorageBackendError(f"Unknown storage backend: {backend_type}")
