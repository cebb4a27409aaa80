"""
Unit tests for WorkspaceManager.

Tests cover:
- Unique directory allocation, including concurrent bursts
- Release on every exit path of the scoped context manager
- Idempotent release and release of externally deleted workspaces
- Creation failures surfacing as ResourceError
"""
import shutil
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from slideflix.composition.exceptions import ResourceError
from slideflix.composition.workspace import WorkspaceManager


class TestWorkspaceManager(unittest.TestCase):
    """Test cases for WorkspaceManager class."""

    def setUp(self):
        self.test_base_dir = Path(tempfile.mkdtemp(prefix="test_workspace_manager_"))
        self.manager = WorkspaceManager(base_dir=self.test_base_dir, prefix="test_")

    def tearDown(self):
        if self.test_base_dir.exists():
            shutil.rmtree(self.test_base_dir)

    def test_acquire_creates_directory(self):
        workspace = self.manager.acquire()
        self.assertTrue(workspace.path.is_dir())
        self.assertEqual(workspace.path.parent, self.test_base_dir)
        self.assertTrue(workspace.path.name.startswith("test_"))
        self.assertEqual(workspace.output_path, workspace.path / "output.mp4")
        self.assertEqual(self.manager.active_count, 1)
        self.manager.release(workspace)

    def test_acquire_creates_missing_base_dir(self):
        manager = WorkspaceManager(base_dir=self.test_base_dir / "nested" / "base", prefix="x_")
        with manager.scoped() as workspace:
            self.assertTrue(workspace.path.is_dir())

    def test_release_removes_contents(self):
        workspace = self.manager.acquire()
        workspace.file("slide_0.png").write_bytes(b"data")
        (workspace.path / "sub").mkdir()
        (workspace.path / "sub" / "file").write_text("x")

        self.manager.release(workspace)

        self.assertFalse(workspace.path.exists())
        self.assertTrue(workspace.released)
        self.assertEqual(self.manager.active_count, 0)

    def test_release_twice_is_noop(self):
        workspace = self.manager.acquire()
        self.manager.release(workspace)
        self.manager.release(workspace)
        self.assertFalse(workspace.path.exists())

    def test_release_after_external_delete(self):
        workspace = self.manager.acquire()
        shutil.rmtree(workspace.path)
        self.manager.release(workspace)
        self.assertTrue(workspace.released)

    def test_release_never_raises(self):
        workspace = self.manager.acquire()
        with patch("slideflix.composition.workspace.shutil.rmtree", side_effect=PermissionError("busy")):
            with self.assertLogs("slideflix.composition.workspace", level="WARNING"):
                self.manager.release(workspace)
        self.assertTrue(workspace.released)

    def test_scoped_releases_on_exception(self):
        captured = []
        with self.assertRaises(RuntimeError):
            with self.manager.scoped() as workspace:
                captured.append(workspace)
                workspace.file("output.mp4").write_bytes(b"partial")
                raise RuntimeError("encode blew up")

        self.assertFalse(captured[0].path.exists())
        self.assertEqual(list(self.test_base_dir.iterdir()), [])

    def test_unique_names_under_concurrency(self):
        workspaces = []
        lock = threading.Lock()

        def grab():
            for _ in range(10):
                ws = self.manager.acquire()
                with lock:
                    workspaces.append(ws)

        threads = [threading.Thread(target=grab) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        paths = {ws.path for ws in workspaces}
        self.assertEqual(len(paths), 80)
        self.assertEqual(len({ws.request_id for ws in workspaces}), 80)
        self.assertEqual(self.manager.active_count, 80)

        for ws in workspaces:
            self.manager.release(ws)
        self.assertEqual(list(self.test_base_dir.iterdir()), [])

    def test_acquire_failure_raises_resource_error(self):
        blocker = self.test_base_dir / "not_a_dir"
        blocker.write_text("file in the way")
        manager = WorkspaceManager(base_dir=blocker, prefix="x_")

        with self.assertRaises(ResourceError):
            manager.acquire()
        self.assertEqual(manager.active_count, 0)


if __name__ == '__main__':
    unittest.main()
