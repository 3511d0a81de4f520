"""Tests for WorkspaceLayout and project-type detection."""
from __future__ import annotations

from pathlib import Path

import pytest

from workshop_governance.workspace.context import (
    WorkspaceContext,
    WorkspaceLayout,
    WorkspacePathError,
    detect_project_type,
)


@pytest.fixture()
def layout(tmp_path: Path) -> WorkspaceLayout:
    return WorkspaceLayout(tmp_path)


class TestWorkspaceLayout:
    def test_workspace_path(self, layout: WorkspaceLayout, tmp_path: Path) -> None:
        assert layout.workspace_path("ws-1") == tmp_path / "workspaces" / "ws-1"

    def test_explicit_context_path_wins(self, layout: WorkspaceLayout, tmp_path: Path) -> None:
        context = WorkspaceContext(workspace_id="ws-1", workspace_path=tmp_path / "custom")
        assert layout.workspace_path("ws-1", context) == tmp_path / "custom"

    def test_context_without_path_uses_layout(self, layout: WorkspaceLayout, tmp_path: Path) -> None:
        context = WorkspaceContext(workspace_id="ws-1")
        assert layout.workspace_path("ws-1", context) == tmp_path / "workspaces" / "ws-1"

    @pytest.mark.parametrize("workspace_id", ["", ".", "..", "../etc", "a/b", "a\\b", "a\x00b"])
    def test_unsafe_ids_rejected(self, layout: WorkspaceLayout, workspace_id: str) -> None:
        with pytest.raises(WorkspacePathError) as info:
            layout.workspace_path(workspace_id)
        assert info.value.workspace_id == workspace_id


class TestDetectProjectType:
    def test_review_context_item(self) -> None:
        assert detect_project_type("anything", [{"type": "code_review"}]) == "review"

    def test_review_title(self) -> None:
        assert detect_project_type(None, [{"title": "PR Review notes"}]) == "review"

    def test_analysis_description(self) -> None:
        assert detect_project_type("Investigate the memory leak") == "analysis"

    def test_git_means_development(self) -> None:
        assert detect_project_type("Build the API", has_git=True) == "development"

    def test_general_fallback(self) -> None:
        assert detect_project_type("Build the API") == "general"
        assert detect_project_type(None) == "general"
