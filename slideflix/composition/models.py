"""
Data models for the composition pipeline.

Requests and options are immutable value objects; the workspace is the one
mutable record because it tracks its own release.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .exceptions import ValidationError

SLIDE_COUNT = 2
LOGO_ROLE = "logo"
VIDEO_CONTENT_TYPE = "video/mp4"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def slide_role(index: int) -> str:
    return f"slide[{index}]"


def sanitize_name(name: str) -> str:
    """Make a user-supplied name safe for use as a file or object key."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name.strip()).strip("._")
    return cleaned or "video"


class Corner(str, Enum):
    """Canvas corner a logo is anchored to."""

    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"

    @classmethod
    def parse(cls, value: "Corner | str") -> "Corner":
        if isinstance(value, Corner):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise ValidationError(f"Unknown logo corner '{value}'. Expected one of: {allowed}")


@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int

    def __post_init__(self):
        for name, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(
                    f"Canvas {name} must be a positive integer, got {value!r}",
                    details={"field": f"canvas.{name}"},
                )

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class EncodePolicy:
    """Fixed codec and container settings appended to every encode."""

    codec: str = "libx264"
    pixel_format: str = "yuv420p"
    preset: str = "medium"
    crf: int = 23
    faststart: bool = True


@dataclass(frozen=True)
class CompositionOptions:
    """
    Every option the pipeline recognises, with its default.

    transition_duration: crossfade length in seconds; must stay below the hold
    transition_style: xfade transition name (fade or dissolve)
    canvas: output resolution both slides are normalised to
    frame_rate: frame rate of the looped still inputs
    logo_width / logo_margin / logo_corner: decorative overlay placement
    encode: codec/quality/container policy
    encode_timeout: hard wall-clock limit for the encoder, seconds
    diagnostic_buffer_bytes: cap of the captured encoder stderr
    download_timeout / download_max_bytes: per-asset transport limits
    concurrent_downloads: fetch both slides at once (bound by index)
    """

    transition_duration: float = 0.5
    transition_style: str = "fade"
    canvas: CanvasSize = field(default_factory=lambda: CanvasSize(1920, 1080))
    frame_rate: int = 25
    logo_width: int = 120
    logo_margin: int = 30
    logo_corner: Corner = Corner.BOTTOM_RIGHT
    encode: EncodePolicy = field(default_factory=EncodePolicy)
    encode_timeout: float = 120.0
    diagnostic_buffer_bytes: int = 65536
    download_timeout: float = 30.0
    download_max_bytes: int = 50 * 1024 * 1024
    concurrent_downloads: bool = True

    @classmethod
    def from_settings(cls) -> "CompositionOptions":
        """Build options from the active configuration."""
        from slideflix import settings

        width, height = settings.get_canvas_size()
        return cls(
            transition_duration=settings.get_transition_duration(),
            transition_style=settings.get_transition_style(),
            canvas=CanvasSize(width, height),
            frame_rate=settings.get_frame_rate(),
            logo_width=settings.get_logo_width(),
            logo_margin=settings.get_logo_margin(),
            logo_corner=Corner.parse(settings.get_logo_corner()),
            encode=EncodePolicy(
                codec=settings.get_encode_codec(),
                pixel_format=settings.get_encode_pixel_format(),
                preset=settings.get_encode_preset(),
                crf=settings.get_encode_crf(),
                faststart=settings.get_encode_faststart(),
            ),
            encode_timeout=settings.get_encode_timeout_seconds(),
            diagnostic_buffer_bytes=settings.get_diagnostic_buffer_bytes(),
            download_timeout=settings.get_download_timeout_seconds(),
            download_max_bytes=settings.get_download_max_bytes(),
            concurrent_downloads=settings.get_download_concurrent(),
        )


@dataclass(frozen=True)
class CompositionRequest:
    """
    One composition job: two ordered slides, a hold time, an optional logo.

    slide_urls[0] is the outgoing frame and slide_urls[1] the incoming one.
    """

    slide_urls: Tuple[str, ...]
    hold_duration: float
    output_name: str
    owner_id: str
    logo_url: Optional[str] = None

    def __post_init__(self):
        urls = tuple(self.slide_urls or ())
        object.__setattr__(self, "slide_urls", urls)

        if len(urls) != SLIDE_COUNT:
            raise ValidationError(
                f"Exactly {SLIDE_COUNT} slides are required, got {len(urls)}",
                details={"field": "slideUrls", "count": len(urls)},
            )
        for index, url in enumerate(urls):
            if not isinstance(url, str) or not url.strip():
                raise ValidationError(
                    f"Slide URL {index} is empty",
                    details={"field": f"slideUrls[{index}]"},
                )
        if isinstance(self.hold_duration, bool) or not isinstance(self.hold_duration, (int, float)):
            raise ValidationError(
                f"Hold duration must be a number, got {self.hold_duration!r}",
                details={"field": "duration"},
            )
        if not math.isfinite(self.hold_duration) or self.hold_duration <= 0:
            raise ValidationError(
                f"Hold duration must be a positive finite number, got {self.hold_duration}",
                details={"field": "duration"},
            )
        if not self.output_name or not str(self.output_name).strip():
            raise ValidationError("Output name is required", details={"field": "videoName"})
        if not self.owner_id or not str(self.owner_id).strip():
            raise ValidationError("Owner identifier is required", details={"field": "businessId"})
        if self.logo_url is not None and not str(self.logo_url).strip():
            object.__setattr__(self, "logo_url", None)

    def destination_key(self, timestamp_ms: int) -> str:
        """Object key for the published artifact: ``owner/<ms>_<name>.mp4``."""
        return f"{sanitize_name(self.owner_id)}/{timestamp_ms}_{sanitize_name(self.output_name)}.mp4"


@dataclass
class Workspace:
    """Ephemeral directory owning every file of one request."""

    path: Path
    request_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    released: bool = False

    def file(self, name: str) -> Path:
        return self.path / name

    @property
    def output_path(self) -> Path:
        return self.path / "output.mp4"


@dataclass(frozen=True)
class MediaAsset:
    """A downloaded file inside a workspace."""

    source_url: str
    path: Path
    size_bytes: int
    role: str
    content_type: Optional[str] = None


class EncodeState(str, Enum):
    SPAWNED = "spawned"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SPAWN_ERROR = "spawn_error"


@dataclass(frozen=True)
class EncodeJob:
    """A fully built encoder invocation."""

    argv: List[str]
    output_path: Path
    timeout: float
    expected_duration: Optional[float] = None

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


@dataclass
class EncodeOutcome:
    state: EncodeState
    returncode: Optional[int] = None
    pid: Optional[int] = None
    output_path: Optional[Path] = None
    output_bytes: int = 0
    elapsed_seconds: float = 0.0
    diagnostics: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state is EncodeState.COMPLETED


@dataclass(frozen=True)
class CompositionResult:
    """
    Successful composition.

    Exactly one of ``video_bytes`` (inline delivery) and ``artifact_url``
    (published) is set.
    """

    destination_key: str
    size_bytes: int
    encode_seconds: float
    elapsed_seconds: float
    expected_duration_seconds: float
    logo_applied: bool
    video_bytes: Optional[bytes] = None
    artifact_url: Optional[str] = None
    video_duration_seconds: Optional[float] = None
    content_type: str = VIDEO_CONTENT_TYPE
    degradations: Sequence[str] = ()

    def __post_init__(self):
        if (self.video_bytes is None) == (self.artifact_url is None):
            raise ValueError("CompositionResult needs exactly one of video_bytes or artifact_url")
