"""Generation of the agent-facing workspace documents."""
from __future__ import annotations

from workshop_governance.documents.emitter import (
    COMMANDS_FILE,
    INSTRUCTIONS_FILE,
    PERMISSIONS_FILE,
    REQUIRED_DOCUMENTS,
    SETTINGS_FILE,
    CommandDocumentReport,
    CommandWriteFailure,
    DocumentEmitter,
    DocumentStatus,
    DocumentWriteError,
    render_command_document,
    render_commands_index,
)
from workshop_governance.documents.filesystem import FileSystem, LocalFileSystem
from workshop_governance.documents.formatting import (
    format_commands_list,
    format_permissions_for_agent,
    format_permissions_summary,
    group_commands,
)
from workshop_governance.documents.templating import find_placeholders, substitute

__all__ = [
    "COMMANDS_FILE",
    "INSTRUCTIONS_FILE",
    "PERMISSIONS_FILE",
    "REQUIRED_DOCUMENTS",
    "SETTINGS_FILE",
    "CommandDocumentReport",
    "CommandWriteFailure",
    "DocumentEmitter",
    "DocumentStatus",
    "DocumentWriteError",
    "FileSystem",
    "LocalFileSystem",
    "find_placeholders",
    "format_commands_list",
    "format_permissions_for_agent",
    "format_permissions_summary",
    "group_commands",
    "render_command_document",
    "render_commands_index",
    "substitute",
]
