"""
Inline "storage": encodes the video into a data URI instead of storing it.

Used when the caller asks for the video in the response body.
"""

import base64
from pathlib import Path
from typing import Dict, Optional, Tuple

from .base import StorageBackend
from .exceptions import StorageError, StorageNotFoundError

DEFAULT_CONTENT_TYPE = "video/mp4"


def to_data_uri(data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


class InlineStorage(StorageBackend):
    """
    Returns ``data:<type>;base64,...`` references.

    Only the source path and content type are remembered per key; the URI is
    rebuilt from the file on lookup, so nothing encoded is held between calls.
    """

    def __init__(self):
        self._sources: Dict[str, Tuple[Path, str]] = {}

    @staticmethod
    def _encode(local_path: Path, content_type: str) -> str:
        try:
            data = Path(local_path).read_bytes()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Source file is gone: {local_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {local_path}: {e}") from e
        return to_data_uri(data, content_type)

    def save_file(self, local_path: Path, remote_path: str, content_type: Optional[str] = None) -> str:
        content_type = content_type or DEFAULT_CONTENT_TYPE
        uri = self._encode(local_path, content_type)
        self._sources[remote_path] = (Path(local_path), content_type)
        return uri

    def delete_file(self, remote_path: str) -> bool:
        return self._sources.pop(remote_path, None) is not None

    def file_exists(self, remote_path: str) -> bool:
        source = self._sources.get(remote_path)
        return source is not None and source[0].is_file()

    def get_file_url(self, remote_path: str) -> str:
        try:
            local_path, content_type = self._sources[remote_path]
        except KeyError:
            raise StorageNotFoundError(f"No inline artifact for {remote_path}")
        return self._encode(local_path, content_type)
