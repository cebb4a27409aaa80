"""
End-to-end composition of one request.

    acquire workspace -> fetch slides -> fetch logo (best effort)
    -> build graph -> encode -> publish or read bytes -> release workspace

The workspace is released on every exit path. Collaborators are injected so
the service holds no process-wide client state.
"""

import logging
import math
import time
from pathlib import Path
from typing import Callable, List, Optional

from slideflix.storage.base import StorageBackend
from slideflix.storage.exceptions import StorageError

from .asset_fetcher import AssetFetcher
from .encoder import EncodeOrchestrator
from .exceptions import PublishError, ResourceError, ValidationError
from .filter_graph import FilterGraphBuilder
from .models import VIDEO_CONTENT_TYPE, CompositionOptions, CompositionRequest, CompositionResult
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class CompositionService:
    """Coordinates workspace, fetcher, graph builder, encoder and publisher."""

    def __init__(
        self,
        workspace_manager: WorkspaceManager,
        fetcher: AssetFetcher,
        builder: FilterGraphBuilder,
        orchestrator: EncodeOrchestrator,
        options: Optional[CompositionOptions] = None,
        publisher: Optional[StorageBackend] = None,
        duration_probe: Optional[Callable[[Path], Optional[float]]] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            workspace_manager: Allocates the per-request directory
            fetcher: Downloads slides and logo
            builder: Computes the filter graph
            orchestrator: Runs the encoder
            options: Pipeline options (transition, canvas, ...)
            publisher: Default publish destination; None means inline delivery
            duration_probe: Optional callable measuring the produced video
            clock: Wall clock in epoch seconds, used for destination keys
        """
        self.workspace_manager = workspace_manager
        self.fetcher = fetcher
        self.builder = builder
        self.orchestrator = orchestrator
        self.options = options or CompositionOptions()
        self.publisher = publisher
        self.duration_probe = duration_probe
        self.clock = clock

    @classmethod
    def from_settings(cls, publisher: Optional[StorageBackend] = None) -> "CompositionService":
        """Wire a service from the active configuration."""
        from slideflix.media.ffmpeg_utils import get_duration_seconds

        options = CompositionOptions.from_settings()
        return cls(
            workspace_manager=WorkspaceManager(),
            fetcher=AssetFetcher(
                timeout=options.download_timeout,
                max_bytes=options.download_max_bytes,
                concurrent=options.concurrent_downloads,
            ),
            builder=FilterGraphBuilder.from_options(options),
            orchestrator=EncodeOrchestrator.from_options(options),
            options=options,
            publisher=publisher,
            duration_probe=get_duration_seconds,
        )

    def validate(self, request: CompositionRequest) -> None:
        """
        Checks that depend on the service options as well as the request.

        Raises:
            ValidationError: Transition not strictly shorter than the hold
        """
        transition = self.options.transition_duration
        if not math.isfinite(request.hold_duration) or request.hold_duration <= transition:
            raise ValidationError(
                f"Hold duration ({request.hold_duration}s) must be longer than "
                f"the transition ({transition}s)",
                details={
                    "field": "duration",
                    "hold_duration": request.hold_duration,
                    "transition_duration": transition,
                },
            )

    def compose(
        self,
        request: CompositionRequest,
        publisher: Optional[StorageBackend] = None,
        inline: bool = False,
    ) -> CompositionResult:
        """
        Run the full pipeline for one request.

        Args:
            request: Validated composition request
            publisher: Publish destination for this request (overrides the default)
            inline: Return the video bytes instead of publishing

        Returns:
            CompositionResult with either ``artifact_url`` or ``video_bytes``

        Raises:
            ValidationError, ResourceError, DownloadError, EncodeError,
            EncodeTimeoutError, PublishError
        """
        self.validate(request)

        started = time.monotonic()
        target = None if inline else (publisher or self.publisher)
        destination_key = request.destination_key(int(self.clock() * 1000))
        degradations: List[str] = []

        logger.info(f"Composing {destination_key} from {len(request.slide_urls)} slides")

        with self.workspace_manager.scoped() as workspace:
            slides = self.fetcher.fetch_slides(request.slide_urls, workspace)
            logo = self.fetcher.fetch_logo(request.logo_url, workspace, degradations)

            graph = self.builder.build(
                slides,
                logo,
                request.hold_duration,
                self.options.transition_duration,
                self.options.canvas,
            )
            logger.debug(f"Filter graph: {graph.serialize()}")

            outcome = self.orchestrator.run(graph, workspace.output_path)

            video_duration = None
            if self.duration_probe is not None:
                video_duration = self.duration_probe(workspace.output_path)

            video_bytes = None
            artifact_url = None
            if target is None:
                try:
                    video_bytes = workspace.output_path.read_bytes()
                except OSError as e:
                    raise ResourceError(f"Could not read encoded output: {e}") from e
            else:
                artifact_url = self._publish(target, workspace.output_path, destination_key)

        elapsed = time.monotonic() - started
        logger.info(
            f"✅ Composed {destination_key} in {elapsed:.2f}s "
            f"(encode {outcome.elapsed_seconds:.2f}s, logo {'on' if logo else 'off'})"
        )
        return CompositionResult(
            destination_key=destination_key,
            size_bytes=outcome.output_bytes,
            encode_seconds=outcome.elapsed_seconds,
            elapsed_seconds=elapsed,
            expected_duration_seconds=graph.total_duration,
            logo_applied=logo is not None,
            video_bytes=video_bytes,
            artifact_url=artifact_url,
            video_duration_seconds=video_duration,
            content_type=VIDEO_CONTENT_TYPE,
            degradations=tuple(degradations),
        )

    @staticmethod
    def _publish(publisher: StorageBackend, path: Path, key: str) -> str:
        logger.info(f"Publishing {key} via {type(publisher).__name__}")
        try:
            return publisher.save_file(path, key, content_type=VIDEO_CONTENT_TYPE)
        except StorageError as e:
            logger.error(f"Publishing {key} failed: {e}")
            raise PublishError(f"Failed to publish video: {e}", details={"destination_key": key}) from e
