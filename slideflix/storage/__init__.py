"""
Storage module for SlideFlix.

Publish destinations for finished videos (local directory, Supabase Storage,
inline data URI).
"""

from .base import StorageBackend
from .exceptions import StorageBackendError, StorageError, StorageNotFoundError, StoragePermissionError
from .factory import create_storage_backend, create_storage_backend_with_config
from .inline import InlineStorage
from .local import LocalStorage
from .supabase import SupabaseStorage

__all__ = [
    'StorageBackend',
    'LocalStorage',
    'SupabaseStorage',
    'InlineStorage',
    'create_storage_backend',
    'create_storage_backend_with_config',
    'StorageError',
    'StorageNotFoundError',
    'StoragePermissionError',
    'StorageBackendError',
]
