"""Workspace inputs and directory layout."""
from __future__ import annotations

from workshop_governance.workspace.context import (
    PROJECT_TYPES,
    WorkspaceContext,
    WorkspaceLayout,
    WorkspacePathError,
    detect_project_type,
)

__all__ = [
    "PROJECT_TYPES",
    "WorkspaceContext",
    "WorkspaceLayout",
    "WorkspacePathError",
    "detect_project_type",
]
