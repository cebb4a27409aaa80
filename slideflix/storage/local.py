"""
Local filesystem storage backend for SlideFlix.

Copies finished videos under a base directory; the returned reference is the
stored file's path.
"""

import shutil
from pathlib import Path
from typing import Optional

from .base import StorageBackend
from .exceptions import StorageError


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: Path):
        """
        Initialize LocalStorage backend.

        Args:
            base_path: Base directory for stored videos
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _resolve(self, remote_path: str) -> Path:
        dest_path = (self.base_path / remote_path).resolve()
        if self.base_path.resolve() not in dest_path.parents:
            raise StorageError(f"Destination escapes storage root: {remote_path}")
        return dest_path

    def save_file(self, local_path: Path, remote_path: str, content_type: Optional[str] = None) -> str:
        """
        Copy file to local storage directory.

        Returns:
            Local file path where file was saved
        """
        dest_path = self._resolve(remote_path)
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(local_path, dest_path)
        except OSError as e:
            raise StorageError(f"Failed to save file {local_path} to {remote_path}: {e}") from e
        return str(dest_path)

    def delete_file(self, remote_path: str) -> bool:
        file_path = self._resolve(remote_path)
        if not file_path.exists():
            return False
        try:
            file_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {remote_path}: {e}") from e
        return True

    def file_exists(self, remote_path: str) -> bool:
        return self._resolve(remote_path).exists()

    def get_file_url(self, remote_path: str) -> str:
        """Return local file path."""
        return str(self._resolve(remote_path))
