"""
Supabase Storage backend for SlideFlix.

Talks to the Supabase Storage REST API with ``requests``; uploaded objects
are referenced by their public URL.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import requests

from .base import StorageBackend
from .exceptions import StorageBackendError, StorageError, StoragePermissionError

logger = logging.getLogger(__name__)


class SupabaseStorage(StorageBackend):
    """Supabase Storage bucket backend."""

    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str = "generated-videos",
        timeout: float = 120.0,
        upsert: bool = False,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize SupabaseStorage backend.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            service_key: Service role key used as bearer token
            bucket: Destination bucket
            timeout: Upload timeout in seconds
            upsert: Overwrite existing objects with the same key
            session: HTTP session (default: a new Session)
        """
        if not url or not service_key:
            raise StorageBackendError("Supabase URL and service key are required")
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self.upsert = upsert
        self.session = session or requests.Session()

    def _object_url(self, remote_path: str, scope: str = "") -> str:
        key = quote(remote_path.lstrip("/"), safe="/")
        parts = [self.url, "storage/v1/object"]
        if scope:
            parts.append(scope)
        parts += [self.bucket, key]
        return "/".join(parts)

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    @staticmethod
    def _raise_for(response: requests.Response, action: str) -> None:
        if response.ok:
            return
        message = f"Supabase {action} failed: HTTP {response.status_code} {response.text[:500]}"
        if response.status_code in (401, 403):
            raise StoragePermissionError(message)
        raise StorageError(message)

    def save_file(self, local_path: Path, remote_path: str, content_type: Optional[str] = None) -> str:
        """
        Upload file to the bucket.

        Returns:
            Public URL of the uploaded object
        """
        headers = self._headers(content_type or "application/octet-stream")
        headers["x-upsert"] = "true" if self.upsert else "false"
        logger.info(f"Uploading {local_path} to Supabase bucket {self.bucket} as {remote_path}")
        try:
            with open(local_path, "rb") as f:
                response = self.session.post(
                    self._object_url(remote_path),
                    data=f,
                    headers=headers,
                    timeout=self.timeout,
                )
        except OSError as e:
            raise StorageError(f"Failed to read {local_path}: {e}") from e
        except requests.RequestException as e:
            raise StorageError(f"Failed to upload file {local_path} to {remote_path}: {e}") from e

        self._raise_for(response, "upload")
        return self.get_file_url(remote_path)

    def delete_file(self, remote_path: str) -> bool:
        try:
            response = self.session.delete(
                f"{self.url}/storage/v1/object/{self.bucket}",
                json={"prefixes": [remote_path]},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageError(f"Failed to delete {remote_path}: {e}") from e
        if response.status_code == 404:
            return False
        self._raise_for(response, "delete")
        return True

    def file_exists(self, remote_path: str) -> bool:
        try:
            response = self.session.head(
                self._object_url(remote_path, scope="authenticated"),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageError(f"Failed to check {remote_path}: {e}") from e
        if response.status_code in (400, 404):
            return False
        self._raise_for(response, "lookup")
        return True

    def get_file_url(self, remote_path: str) -> str:
        """Public URL of an object in a public bucket."""
        return self._object_url(remote_path, scope="public")
