"""
Remote asset retrieval into a request workspace.

Slides are mandatory: any transport failure raises DownloadError. The logo is
decorative: its failures are logged and reported as a degradation, and the
request continues without it.
"""

import logging
import mimetypes
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import requests

from .exceptions import DownloadError, ResourceError
from .models import LOGO_ROLE, MediaAsset, Workspace, slide_role

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.webp', '.bmp', '.gif', '.tif', '.tiff'}
DEFAULT_SUFFIX = '.png'
CHUNK_SIZE = 64 * 1024


def _guess_suffix(url: str, content_type: Optional[str]) -> str:
    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix in IMAGE_SUFFIXES:
        return suffix
    if content_type:
        guessed = mimetypes.guess_extension(content_type.split(';')[0].strip())
        if guessed and guessed.lower() in IMAGE_SUFFIXES:
            return guessed.lower()
    return DEFAULT_SUFFIX


class AssetFetcher:
    """
    Downloads images over HTTP(S) with ``requests``.

    The session is injected so callers (and tests) control connection pooling,
    adapters and retries.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_bytes: int = 50 * 1024 * 1024,
        concurrent: bool = True,
    ):
        """
        Args:
            session: HTTP session used for every request (default: a new Session)
            timeout: Per-request connect/read timeout in seconds
            max_bytes: Largest accepted asset; larger bodies fail the download
            concurrent: Fetch slides in parallel (results stay bound by index)
        """
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.concurrent = concurrent

    def fetch(self, url: str, workspace: Workspace, role: str, stem: str) -> MediaAsset:
        """
        Download one asset into the workspace.

        Args:
            url: Source URL
            workspace: Destination workspace
            role: Content role recorded on the asset (slide[0], slide[1], logo)
            stem: File name stem inside the workspace

        Returns:
            MediaAsset describing the stored file

        Raises:
            DownloadError: Transport failure, non-success status, empty or oversized body
            ResourceError: The file could not be written into the workspace
        """
        logger.info(f"Downloading {role} from {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {role}: {e}", url=url) from e

        with response:
            if not response.ok:
                raise DownloadError(
                    f"Failed to download {role}: HTTP {response.status_code}",
                    url=url,
                    status_code=response.status_code,
                )

            content_type = response.headers.get('Content-Type')
            declared = response.headers.get('Content-Length')
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise DownloadError(
                    f"{role} is too large ({declared} bytes, limit {self.max_bytes})",
                    url=url,
                )

            path = workspace.file(f"{stem}{_guess_suffix(url, content_type)}")
            size = 0
            try:
                with open(path, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if not chunk:
                            continue
                        size += len(chunk)
                        if size > self.max_bytes:
                            raise DownloadError(
                                f"{role} exceeded the {self.max_bytes} byte limit",
                                url=url,
                            )
                        f.write(chunk)
            except requests.RequestException as e:
                raise DownloadError(f"Connection lost while downloading {role}: {e}", url=url) from e
            except OSError as e:
                raise ResourceError(
                    f"Could not write {role} into workspace: {e}",
                    details={"path": str(path)},
                ) from e

        if size == 0:
            raise DownloadError(f"{role} download returned an empty body", url=url)

        logger.info(f"   {role} downloaded: {size} bytes")
        return MediaAsset(source_url=url, path=path, size_bytes=size, role=role, content_type=content_type)

    def fetch_slides(self, urls: Sequence[str], workspace: Workspace) -> List[MediaAsset]:
        """
        Download all slides, failing on the first error.

        The returned list is in input order: element i always comes from
        urls[i], whatever order the transfers complete in.
        """
        jobs = [(url, slide_role(i), f"slide_{i}") for i, url in enumerate(urls)]

        if not self.concurrent or len(jobs) < 2:
            return [self.fetch(url, workspace, role, stem) for url, role, stem in jobs]

        # Leaving the executor block waits for every transfer, so nothing
        # writes into the workspace after this method returns.
        with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="slide-fetch") as executor:
            futures = [executor.submit(self.fetch, url, workspace, role, stem) for url, role, stem in jobs]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

            return [future.result() for future in futures]

    def fetch_logo(
        self,
        url: Optional[str],
        workspace: Workspace,
        degradations: Optional[List[str]] = None,
    ) -> Optional[MediaAsset]:
        """
        Best-effort logo download.

        Returns None when no URL is given or the transfer fails. Failures are
        logged and appended to ``degradations`` when provided.
        """
        if not url:
            return None

        try:
            return self.fetch(url, workspace, LOGO_ROLE, "logo")
        except DownloadError as e:
            logger.warning(f"Logo download failed, continuing without logo: {e.message}")
            if degradations is not None:
                degradations.append(f"logo_unavailable: {e.message}")
            return None
