"""
Media helpers for SlideFlix (ffmpeg/ffprobe access).
"""

from .ffmpeg_utils import find_ffmpeg, find_ffprobe, get_duration_seconds, get_video_size, run_ffprobe

__all__ = ['find_ffmpeg', 'find_ffprobe', 'get_duration_seconds', 'get_video_size', 'run_ffprobe']
