"""
Storage-related exceptions for SlideFlix.
"""


class StorageError(Exception):
    """Base storage error."""
    pass


class StorageNotFoundError(StorageError):
    """File not found in storage."""
    pass


class StoragePermissionError(StorageError):
    """Credentials rejected by the storage service."""
    pass


class StorageBackendError(StorageError):
    """Storage backend misconfigured or unknown."""
    pass
