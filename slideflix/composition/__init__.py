"""
SlideFlix composition pipeline.

Turns two still images (and an optional logo) into a crossfade MP4.
"""

from .asset_fetcher import AssetFetcher
from .encoder import DiagnosticBuffer, EncodeOrchestrator
from .exceptions import (
    CompositionError,
    DownloadError,
    EncodeError,
    EncodeTimeoutError,
    PublishError,
    ResourceError,
    ValidationError,
)
from .filter_graph import FilterGraph, FilterGraphBuilder, build_filter_graph
from .models import (
    CanvasSize,
    CompositionOptions,
    CompositionRequest,
    CompositionResult,
    Corner,
    EncodeJob,
    EncodeOutcome,
    EncodePolicy,
    EncodeState,
    MediaAsset,
    Workspace,
)
from .service import CompositionService
from .workspace import WorkspaceManager

__all__ = [
    'AssetFetcher',
    'CanvasSize',
    'CompositionError',
    'CompositionOptions',
    'CompositionRequest',
    'CompositionResult',
    'CompositionService',
    'Corner',
    'DiagnosticBuffer',
    'DownloadError',
    'EncodeError',
    'EncodeJob',
    'EncodeOrchestrator',
    'EncodeOutcome',
    'EncodePolicy',
    'EncodeState',
    'EncodeTimeoutError',
    'FilterGraph',
    'FilterGraphBuilder',
    'MediaAsset',
    'PublishError',
    'ResourceError',
    'ValidationError',
    'Workspace',
    'WorkspaceManager',
    'build_filter_graph',
]
