"""
Abstract publish destination for finished videos.

The composition service hands a finished file, a destination key and a
content type to a StorageBackend and gets back a reference the caller can
use (a URL, a local path or a data URI).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    def save_file(self, local_path: Path, remote_path: str, content_type: Optional[str] = None) -> str:
        """
        Save file to storage.

        Args:
            local_path: Path to local file
            remote_path: Destination key in storage
            content_type: MIME type recorded with the object, if supported

        Returns:
            URL or path to stored file

        Raises:
            StorageError: If the file could not be stored
        """
        pass

    @abstractmethod
    def delete_file(self, remote_path: str) -> bool:
        """
        Delete file from storage.

        Returns:
            True if a file was deleted, False otherwise
        """
        pass

    @abstractmethod
    def file_exists(self, remote_path: str) -> bool:
        pass

    @abstractmethod
    def get_file_url(self, remote_path: str) -> str:
        """
        Get public URL for file (if applicable).

        Args:
            remote_path: Path in storage

        Returns:
            Public URL or local path
        """
        pass
