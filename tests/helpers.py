"""
Test doubles shared across the SlideFlix test suite.
"""

import shutil
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
import requests

from slideflix.composition.models import EncodeOutcome, EncodeState, MediaAsset

requires_ffmpeg = pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg is not installed")

# 1x1 PNG payload used as slide content
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d00000000"
    "49454e44ae426082"
)


class FakeResponse:
    """Minimal stand-in for a streamed ``requests.Response``."""

    def __init__(self, body: bytes = PNG_BYTES, status_code: int = 200,
                 headers: Optional[Dict[str, str]] = None, delay: float = 0.0,
                 chunk_size: int = 16, fail_midway: bool = False):
        self.body = body
        self.status_code = status_code
        self.headers = headers if headers is not None else {"Content-Type": "image/png"}
        self.delay = delay
        self.chunk_size = chunk_size
        self.fail_midway = fail_midway
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size: int = 1):
        if self.delay:
            time.sleep(self.delay)
        for start in range(0, len(self.body), self.chunk_size):
            if self.fail_midway and start > 0:
                raise requests.ConnectionError("connection reset")
            yield self.body[start:start + self.chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeSession:
    """Routes ``get`` calls to canned responses or exceptions by URL."""

    def __init__(self, routes: Dict[str, Union[FakeResponse, Exception]]):
        self.routes = routes
        self.calls: List[str] = []

    def get(self, url, timeout=None, stream=False):
        self.calls.append(url)
        target = self.routes.get(url)
        if target is None:
            return FakeResponse(b"not found", status_code=404, headers={})
        if isinstance(target, Exception):
            raise target
        return target


def make_asset(path: Path, role: str, url: str = "https://cdn.example.com/a.png") -> MediaAsset:
    return MediaAsset(source_url=url, path=Path(path), size_bytes=len(PNG_BYTES), role=role)


def completed_outcome(output_path: Path, size: int, elapsed: float = 0.25) -> EncodeOutcome:
    return EncodeOutcome(
        state=EncodeState.COMPLETED,
        returncode=0,
        pid=4242,
        output_path=output_path,
        output_bytes=size,
        elapsed_seconds=elapsed,
    )
