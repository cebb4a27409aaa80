"""
Settings management for SlideFlix application.

This module provides simple accessor functions for configuration values.
All configuration is stored in YAML files (default.yaml, config.yaml) and
may be overridden with SLIDEFLIX_* environment variables.
"""

import logging
import math
import os
import shutil
import tempfile
from typing import Any, Dict, Optional, Tuple

from .config import ConfigLoader

logger = logging.getLogger(__name__)

# Single source of configuration
_config_loader = ConfigLoader()


def reload() -> None:
    """Re-read YAML files and environment overrides."""
    _config_loader.reload()


def _positive_float(value: Any, default: float, name: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value '%s' for %s. Falling back to %s.", value, name, default)
        return default
    if not math.isfinite(parsed) or parsed <= 0:
        logger.warning("Non-positive or non-finite value %s for %s. Falling back to %s.", parsed, name, default)
        return default
    return parsed


def _positive_int(value: Any, default: int, name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value '%s' for %s. Falling back to %s.", value, name, default)
        return default
    if parsed < 1:
        logger.warning("Value %s for %s is below 1. Falling back to %s.", parsed, name, default)
        return default
    return parsed


# ============================================================================
# Section Accessors
# ============================================================================

def get_app_config() -> Dict[str, Any]:
    """Get application settings"""
    return _config_loader.get_section('app')


def get_composition_config() -> Dict[str, Any]:
    """Get composition settings"""
    return _config_loader.get_section('composition')


def get_encode_config() -> Dict[str, Any]:
    """Get encoder settings"""
    return _config_loader.get_section('encode')


def get_download_config() -> Dict[str, Any]:
    """Get asset download settings"""
    return _config_loader.get_section('download')


def get_workspace_config() -> Dict[str, Any]:
    """Get workspace settings"""
    return _config_loader.get_section('workspace')


def get_api_config() -> Dict[str, Any]:
    """Get HTTP API settings"""
    return _config_loader.get_section('api')


# ============================================================================
# Application
# ============================================================================

def get_app_name() -> str:
    return get_app_config().get('name', 'SlideFlix Video Generator')


def get_app_version() -> str:
    return str(get_app_config().get('version', '2.0.0'))


# ============================================================================
# Composition
# ============================================================================

def get_default_hold_duration() -> float:
    """Per-slide hold in seconds used when a request does not specify one (default: 3.0)"""
    return _positive_float(
        get_composition_config().get('hold_duration_seconds', 3.0), 3.0,
        'composition.hold_duration_seconds',
    )


def get_transition_duration() -> float:
    """Crossfade duration in seconds (default: 0.5)"""
    return _positive_float(
        get_composition_config().get('transition_duration_seconds', 0.5), 0.5,
        'composition.transition_duration_seconds',
    )


def get_transition_style() -> str:
    """Crossfade style passed to the transition node (default: fade)"""
    return str(get_composition_config().get('transition', 'fade'))


def get_frame_rate() -> int:
    """Frame rate of the looped still inputs (default: 25)"""
    return _positive_int(get_composition_config().get('frame_rate', 25), 25, 'composition.frame_rate')


def get_canvas_size() -> Tuple[int, int]:
    """
    Get output canvas as (width, height).

    Values are returned as configured; the composition layer rejects
    non-positive sizes with a ValidationError.
    """
    canvas = get_composition_config().get('canvas', {}) or {}
    return int(canvas.get('width', 1920)), int(canvas.get('height', 1080))


def get_logo_config() -> Dict[str, Any]:
    """Get logo overlay settings"""
    return get_composition_config().get('logo', {}) or {}


def get_logo_width() -> int:
    return _positive_int(get_logo_config().get('width', 120), 120, 'composition.logo.width')


def get_logo_margin() -> int:
    margin = get_logo_config().get('margin', 30)
    try:
        return max(0, int(margin))
    except (TypeError, ValueError):
        logger.warning("Invalid logo margin '%s'. Falling back to 30.", margin)
        return 30


def get_logo_corner() -> str:
    return str(get_logo_config().get('corner', 'bottom_right'))


# ============================================================================
# Encoding
# ============================================================================

def get_ffmpeg_binary() -> str:
    """Get ffmpeg executable (config, FFMPEG_BINARY_PATH, then PATH lookup)"""
    configured = get_encode_config().get('ffmpeg_binary')
    if configured:
        return str(configured)
    return os.getenv("FFMPEG_BINARY_PATH") or shutil.which("ffmpeg") or "ffmpeg"


def get_encode_codec() -> str:
    return str(get_encode_config().get('codec', 'libx264'))


def get_encode_pixel_format() -> str:
    return str(get_encode_config().get('pixel_format', 'yuv420p'))


def get_encode_preset() -> str:
    return str(get_encode_config().get('preset', 'medium'))


def get_encode_crf() -> int:
    crf = get_encode_config().get('crf', 23)
    try:
        return int(crf)
    except (TypeError, ValueError):
        logger.warning("Invalid CRF '%s'. Falling back to 23.", crf)
        return 23


def get_encode_faststart() -> bool:
    return bool(get_encode_config().get('faststart', True))


def get_encode_timeout_seconds() -> float:
    """Hard wall-clock limit for one encode (default: 120)"""
    return _positive_float(get_encode_config().get('timeout_seconds', 120), 120.0, 'encode.timeout_seconds')


def get_diagnostic_buffer_bytes() -> int:
    """Cap of the encoder diagnostic ring buffer (default: 64 KiB)"""
    return _positive_int(
        get_encode_config().get('diagnostic_buffer_bytes', 65536), 65536,
        'encode.diagnostic_buffer_bytes',
    )


def get_max_concurrent_encodes() -> int:
    """
    Get the encode admission limit.

    Returns:
        int: 0 when unlimited, otherwise the number of encodes allowed to run at once
    """
    configured = get_encode_config().get('max_concurrent', 0)
    try:
        return max(0, int(configured or 0))
    except (TypeError, ValueError):
        logger.warning("Invalid encode.max_concurrent '%s'. Disabling admission limit.", configured)
        return 0


def get_ffprobe_timeout_seconds() -> int:
    """Get ffprobe timeout in seconds (minimum 1, default 30)"""
    return _positive_int(_config_loader.get('ffprobe.timeout_seconds', 30), 30, 'ffprobe.timeout_seconds')


# ============================================================================
# Downloads
# ============================================================================

def get_download_timeout_seconds() -> float:
    return _positive_float(get_download_config().get('timeout_seconds', 30), 30.0, 'download.timeout_seconds')


def get_download_max_bytes() -> int:
    return _positive_int(get_download_config().get('max_bytes', 50 * 1024 * 1024), 50 * 1024 * 1024, 'download.max_bytes')


def get_download_concurrent() -> bool:
    return bool(get_download_config().get('concurrent', True))


# ============================================================================
# Workspace
# ============================================================================

def get_workspace_base_dir() -> str:
    return get_workspace_config().get('base_dir') or tempfile.gettempdir()


def get_workspace_prefix() -> str:
    return str(get_workspace_config().get('prefix', 'slideflix_'))


# ============================================================================
# Storage Configuration Accessors
# ============================================================================

def get_storage_backend() -> str:
    """Get storage backend type."""
    return _config_loader.get('storage.backend', 'local')


def get_storage_local_path() -> str:
    """Get local storage base path."""
    return _config_loader.get('storage.local.base_path', 'output')


def get_storage_supabase_url() -> Optional[str]:
    return _config_loader.get('storage.supabase.url') or os.getenv('SUPABASE_URL')


def get_storage_supabase_key() -> Optional[str]:
    return _config_loader.get('storage.supabase.service_key') or os.getenv('SUPABASE_SERVICE_KEY')


def get_storage_supabase_bucket() -> str:
    return _config_loader.get('storage.supabase.bucket', 'generated-videos')


def get_storage_supabase_timeout() -> float:
    return _positive_float(
        _config_loader.get('storage.supabase.timeout_seconds', 120), 120.0,
        'storage.supabase.timeout_seconds',
    )


# ============================================================================
# API
# ============================================================================

def get_api_key() -> str:
    """Bearer token for protected endpoints (API_KEY env var wins)"""
    return os.getenv('API_KEY') or str(get_api_config().get('api_key', 'default-key'))


def get_cors_origins() -> list:
    origins = get_api_config().get('cors_origins', ['*'])
    if isinstance(origins, str):
        return [o.strip() for o in origins.split(',') if o.strip()]
    return list(origins)


def get_api_host() -> str:
    return str(get_api_config().get('host', '0.0.0.0'))


def get_api_port() -> int:
    """Listening port (PORT env var wins)"""
    env_port = os.getenv('PORT')
    if env_port and env_port.isdigit():
        return int(env_port)
    return _positive_int(get_api_config().get('port', 3000), 3000, 'api.port')
