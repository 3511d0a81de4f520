"""Workspace inputs for a document generation run.

Key classes
-----------
WorkspaceContext : Caller-supplied description of one workspace.
WorkspaceLayout  : Maps workspace ids to directories under a storage root.
WorkspacePathError: Raised for workspace ids that would escape the storage root.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

PROJECT_TYPES: frozenset[str] = frozenset({"development", "general", "review", "analysis"})


class WorkspacePathError(ValueError):
    """Raised when a workspace id cannot be mapped to a directory safely."""

    def __init__(self, workspace_id: str, reason: str) -> None:
        self.workspace_id = workspace_id
        super().__init__(f"Invalid workspace id {workspace_id!r}: {reason}")


@dataclass
class WorkspaceContext:
    """Everything the caller knows about a workspace at generation time.

    Attributes
    ----------
    workspace_id:
        Identifier of the workspace; also its directory name.
    workspace_path:
        Explicit workspace root.  When ``None`` the layout's path is used.
    description:
        Short human description rendered into the documents.
    project_type:
        ``development``, ``general``, ``review`` or ``analysis``.
    context_files:
        Optional explicit list of context file names.
    git_info:
        Branch, recent commits and status as reported by the git panel.
    jira_tickets:
        Linked tickets, passed through untouched.
    custom_instructions:
        Extra instructions appended to the coding standards section.
    """

    workspace_id: str
    workspace_path: Path | None = None
    description: str | None = None
    project_type: str | None = None
    context_files: list[str] | None = None
    git_info: dict[str, object] | None = None
    jira_tickets: list[dict[str, object]] = field(default_factory=list)
    custom_instructions: list[str] = field(default_factory=list)


class WorkspaceLayout:
    """Resolves ``<storage_root>/workspaces/<workspace_id>`` paths."""

    def __init__(self, storage_root: Path) -> None:
        self._storage_root = Path(storage_root)

    @property
    def storage_root(self) -> Path:
        return self._storage_root

    @property
    def workspaces_dir(self) -> Path:
        return self._storage_root / "workspaces"

    def workspace_path(self, workspace_id: str, context: WorkspaceContext | None = None) -> Path:
        """Return the workspace root, preferring an explicit path from ``context``.

        Raises
        ------
        WorkspacePathError
            If ``workspace_id`` is empty or contains path components.
        """
        if context is not None and context.workspace_path is not None:
            return Path(context.workspace_path)
        if not workspace_id or workspace_id in (".", ".."):
            raise WorkspacePathError(workspace_id, "empty or relative id")
        if "/" in workspace_id or "\\" in workspace_id or "\x00" in workspace_id:
            raise WorkspacePathError(workspace_id, "contains a path separator")
        return self.workspaces_dir / workspace_id


def detect_project_type(
    description: str | None,
    context_items: Iterable[Mapping[str, object]] = (),
    has_git: bool = False,
) -> str:
    """Guess the project type of a workspace that does not declare one.

    Review context items win, then analysis wording in the description, then
    the presence of a git checkout.
    """
    for item in context_items:
        title = str(item.get("title") or "").lower()
        if item.get("type") == "code_review" or "review" in title or "analysis" in title:
            return "review"

    lowered = (description or "").lower()
    if "analysis" in lowered or "investigate" in lowered:
        return "analysis"
    if has_git:
        return "development"
    return "general"
