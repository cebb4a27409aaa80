"""
FFmpeg utilities for SlideFlix

Binary lookup and ffprobe helpers shared by the encoder and the tests.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

import ffmpeg

from slideflix import settings

logger = logging.getLogger(__name__)


def find_ffmpeg() -> str:
    """Configured ffmpeg executable."""
    return settings.get_ffmpeg_binary()


def find_ffprobe(ffmpeg_binary: Optional[str] = None) -> str:
    """
    Locate ffprobe, preferring the one installed next to ffmpeg.
    """
    binary = ffmpeg_binary or find_ffmpeg()
    sibling = Path(binary).with_name("ffprobe")
    if sibling.parent != Path(".") and sibling.exists():
        return str(sibling)
    return shutil.which("ffprobe") or "ffprobe"


def is_ffmpeg_available() -> bool:
    return shutil.which(find_ffmpeg()) is not None


def run_ffprobe(path: str, timeout: Optional[int] = None) -> Dict[str, Any]:
    """Run ffprobe and return parsed JSON, raising on failure.

    Args:
        path: Path to media file
        timeout: Timeout in seconds (if None, use configuration value)

    Raises:
        TimeoutError: If ffprobe times out
        FileNotFoundError: If ffprobe is not found
        ffmpeg.Error: If both ffprobe and the ffmpeg-python fallback fail
        json.JSONDecodeError: If output cannot be parsed as JSON
    """
    effective_timeout = timeout if timeout is not None else settings.get_ffprobe_timeout_seconds()
    ffprobe = find_ffprobe()
    cmd = [
        ffprobe,
        "-v", "error",
        "-show_format",
        "-show_streams",
        "-of", "json",
        str(path),
    ]
    try:
        completed = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=effective_timeout,
        )
        return json.loads(completed.stdout or "{}")
    except subprocess.TimeoutExpired as e:
        logger.error(f"FFprobe timeout for {path} after {effective_timeout}s")
        raise TimeoutError(f"FFprobe timeout for {path} after {effective_timeout}s") from e
    except subprocess.CalledProcessError as e:
        logger.error(f"FFprobe failed for {path}: returncode={e.returncode}, stderr={e.stderr}")
        # ffmpeg-python probe as a fallback, under the same time limit
        try:
            return ffmpeg.probe(str(path), cmd=ffprobe, timeout=effective_timeout)
        except subprocess.TimeoutExpired as timeout_error:
            logger.error(f"FFprobe fallback timeout for {path} after {effective_timeout}s")
            raise TimeoutError(f"FFprobe timeout for {path} after {effective_timeout}s") from timeout_error
    except FileNotFoundError:
        logger.error("FFprobe not found. Please install ffmpeg.")
        raise


def get_duration_seconds(path: str, timeout: Optional[int] = None) -> Optional[float]:
    """
    Container duration in seconds, or None when the file cannot be probed.
    """
    try:
        probe = run_ffprobe(path, timeout=timeout)
    except (TimeoutError, FileNotFoundError, ffmpeg.Error, json.JSONDecodeError) as e:
        logger.warning(f"Could not probe duration of {path}: {e}")
        return None

    duration = probe.get("format", {}).get("duration")
    if duration is None:
        return None
    try:
        return float(duration)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable duration '{duration}' for {path}")
        return None


def get_video_size(path: str) -> Optional[tuple[int, int]]:
    """(width, height) of the first video stream, or None."""
    try:
        probe = run_ffprobe(path)
    except (TimeoutError, FileNotFoundError, ffmpeg.Error, json.JSONDecodeError) as e:
        logger.warning(f"Could not probe {path}: {e}")
        return None
    for stream in probe.get("streams", []):
        if stream.get("codec_type") == "video" and stream.get("width") and stream.get("height"):
            return int(stream["width"]), int(stream["height"])
    return None
