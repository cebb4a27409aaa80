"""
Shared fixtures for SlideFlix tests.
"""

import pytest

from slideflix.composition.workspace import WorkspaceManager


@pytest.fixture
def workspace_root(tmp_path):
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def workspace_manager(workspace_root):
    return WorkspaceManager(base_dir=workspace_root, prefix="test_")


@pytest.fixture
def workspace(workspace_manager):
    with workspace_manager.scoped() as ws:
        yield ws
