"""
Per-request workspace management.

Each composition request gets its own directory under a common base. The
directory owns every downloaded asset and the encoded output, and is removed
when the request ends, whatever the outcome.

Usage:
    manager = WorkspaceManager()

    with manager.scoped() as workspace:
        workspace.file("slide_0.png").write_bytes(data)
    # Directory and all contents are removed here, even on exceptions
"""
import logging
import shutil
import threading
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from .exceptions import ResourceError
from .models import Workspace

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """Allocates and destroys request-scoped working directories."""

    def __init__(self, base_dir: Optional[Path] = None, prefix: Optional[str] = None):
        """
        Initialize workspace manager.

        Args:
            base_dir: Parent directory for workspaces (default: configured or system temp dir)
            prefix: Prefix for workspace directory names
        """
        if base_dir is None or prefix is None:
            from slideflix import settings
            base_dir = base_dir if base_dir is not None else settings.get_workspace_base_dir()
            prefix = prefix if prefix is not None else settings.get_workspace_prefix()

        self.base_dir = Path(base_dir)
        self.prefix = prefix
        self._lock = threading.Lock()
        self._active: set[Path] = set()

    def _new_name(self) -> str:
        # Nanosecond clock plus a random suffix: unique under concurrent bursts
        return f"{self.prefix}{time.time_ns()}_{uuid.uuid4().hex[:12]}"

    def acquire(self) -> Workspace:
        """
        Create a fresh workspace directory.

        Raises:
            ResourceError: If the filesystem rejects creation
        """
        request_id = uuid.uuid4().hex
        path = self.base_dir / self._new_name()
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            # exist_ok=False: a collision must never hand out a shared directory
            path.mkdir(exist_ok=False)
        except OSError as e:
            logger.error(f"Failed to create workspace under {self.base_dir}: {e}")
            raise ResourceError(
                f"Could not create workspace: {e}",
                details={"base_dir": str(self.base_dir)},
            ) from e

        with self._lock:
            self._active.add(path)

        logger.debug(f"Acquired workspace {path}")
        return Workspace(path=path, request_id=request_id)

    def release(self, workspace: Workspace) -> None:
        """
        Remove a workspace recursively. Never raises.

        Releasing an already released or externally deleted workspace is a
        no-op apart from a debug log line.
        """
        with self._lock:
            self._active.discard(workspace.path)

        if workspace.released:
            logger.debug(f"Workspace already released: {workspace.path}")
            return
        workspace.released = True

        if not workspace.path.exists():
            logger.debug(f"Workspace already gone: {workspace.path}")
            return

        try:
            shutil.rmtree(workspace.path)
            logger.debug(f"Released workspace {workspace.path}")
        except OSError as e:
            logger.warning(f"Failed to remove workspace {workspace.path}: {e}")

    @contextmanager
    def scoped(self) -> Generator[Workspace, None, None]:
        """Acquire a workspace and release it on every exit path."""
        workspace = self.acquire()
        try:
            yield workspace
        finally:
            self.release(workspace)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._active)
