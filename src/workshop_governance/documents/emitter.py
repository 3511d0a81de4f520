"""Writes the agent-facing documents of a workspace.

Artifacts, relative to the workspace root:

- ``CLAUDE.md``                 human-readable instructions
- ``.claude/settings.json``     compiled allow/deny rules for the agent tool
- ``permissions.json``          legacy dump of the resolved permissions
- ``commands.json``             legacy list of commands and hot keys
- ``.claude/commands/<kw>.md``  one instruction file per command
- ``.claude/commands/README.md`` index of all commands

Error handling
--------------
Loading inputs (global config, workspace metadata, commands) never aborts a
run: failures are logged at WARNING and replaced by defaults.  Only writes
fail loudly, as :class:`DocumentWriteError`.  Inside
:meth:`DocumentEmitter.emit_command_documents` a failed command file is
recorded in the returned :class:`CommandDocumentReport` and the batch goes on.

Every operation overwrites its previous output, so re-running is safe.  Runs
for the same workspace are not coordinated; the last writer wins.

Example
-------
::

    emitter = DocumentEmitter(
        config_provider=FileConfigProvider(Path("workshop.yaml")),
        layout=WorkspaceLayout(Path("storage")),
        command_store=CommandStore(Path("storage/commands")),
    )
    emitter.generate_all("ws-1", WorkspaceContext("ws-1", project_type="review"))
    assert emitter.validate_documents("ws-1")
"""
from __future__ import annotations

import dataclasses
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from workshop_governance.commands.library import seed_commands
from workshop_governance.commands.model import UserCommand
from workshop_governance.commands.store import CommandStore
from workshop_governance.documents.filesystem import FileSystem, LocalFileSystem
from workshop_governance.documents.formatting import (
    format_commands_list,
    format_permissions_summary,
)
from workshop_governance.documents.templating import substitute
from workshop_governance.permissions.defaults import default_permissions
from workshop_governance.permissions.model import WorkspacePermissions
from workshop_governance.permissions.resolver import PermissionResolver
from workshop_governance.plugin.config_loader import ConfigProvider, GlobalConfig
from workshop_governance.rules.builder import CompiledRuleSet
from workshop_governance.rules.compiler import compile_rules
from workshop_governance.workspace.context import WorkspaceContext, WorkspaceLayout

logger = logging.getLogger(__name__)

INSTRUCTIONS_FILE: str = "CLAUDE.md"
SETTINGS_FILE: str = ".claude/settings.json"
PERMISSIONS_FILE: str = "permissions.json"
COMMANDS_FILE: str = "commands.json"
COMMANDS_DIR: str = ".claude/commands"
COMMANDS_INDEX: str = "README.md"
METADATA_FILE: str = "workspace.json"

REQUIRED_DOCUMENTS: tuple[str, ...] = (INSTRUCTIONS_FILE, PERMISSIONS_FILE, COMMANDS_FILE)
STALE_AFTER: timedelta = timedelta(hours=24)

DEFAULT_DESCRIPTION: str = "Development workspace"
DEFAULT_TASK: str = "Not specified"
DEFAULT_PROJECT_TYPE: str = "general"
NO_CONTEXT_FILES: str = "- No context files found"

_KEYWORD_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class DocumentWriteError(RuntimeError):
    """Raised when a generated artifact cannot be written.

    Attributes
    ----------
    path:
        The file that could not be written.
    """

    def __init__(self, path: Path, reason: object) -> None:
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


@dataclass(frozen=True)
class CommandWriteFailure:
    """One command whose instruction file could not be written."""

    command_id: str
    keyword: str
    error: str


@dataclass
class CommandDocumentReport:
    """Outcome of :meth:`DocumentEmitter.emit_command_documents`.

    Attributes
    ----------
    written:
        Paths of the command files written successfully.
    failures:
        Commands whose file could not be written, with the reason.
    index_path:
        Path of the README index.
    """

    written: list[Path] = field(default_factory=list)
    failures: list[CommandWriteFailure] = field(default_factory=list)
    index_path: Path | None = None

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class DocumentStatus:
    """Existence and freshness of one required artifact."""

    file: str
    exists: bool
    recent: bool


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class DocumentEmitter:
    """Generates and validates the documents of individual workspaces.

    Parameters
    ----------
    config_provider:
        Supplies templates, coding standards, role templates and hot keys.
    layout:
        Maps workspace ids to directories.
    command_store:
        Source of user commands.  When ``None`` or failing, the legacy
        ``commands.json`` of the workspace is read instead.
    filesystem:
        Storage used for every read and write.  Defaults to the local disk.
    resolver:
        Permission resolver.  Defaults to one built on ``config_provider``.
    clock:
        Returns the current UTC time; used for timestamps and staleness.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        layout: WorkspaceLayout,
        command_store: CommandStore | None = None,
        filesystem: FileSystem | None = None,
        resolver: PermissionResolver | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config_provider = config_provider
        self._layout = layout
        self._command_store = command_store
        self._fs: FileSystem = filesystem or LocalFileSystem()
        self._resolver = resolver or PermissionResolver(config_provider)
        self._clock = clock or _utcnow

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Instructions document
    # ------------------------------------------------------------------

    def emit_instructions_document(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
        commands: list[UserCommand] | None = None,
    ) -> Path:
        """Write ``CLAUDE.md`` and return its path.

        ``commands`` defaults to the stored commands, falling back to the
        legacy ``commands.json``.

        Raises
        ------
        DocumentWriteError
            If the file cannot be written.
        """
        config = self._load_config()
        workspace_path = self._layout.workspace_path(workspace_id, context)
        metadata = self._load_metadata(workspace_path)
        context = self._effective_context(workspace_id, context, metadata)

        permissions = self._resolver.resolve(workspace_id, context)
        if commands is None:
            commands = self._load_commands(workspace_path)

        content = substitute(
            config.documents.templates.claude_md_template,
            {
                "WORKSPACE_DESCRIPTION": context.description or DEFAULT_DESCRIPTION,
                "CURRENT_TASK": str(metadata.get("currentTask") or DEFAULT_TASK),
                "PERMISSIONS_SUMMARY": format_permissions_summary(permissions),
                "COMMANDS_LIST": format_commands_list(commands),
                "CONTEXT_FILES": self._context_files(workspace_path, context),
                "CODING_STANDARDS": self._coding_standards(config, context),
                "WORKSPACE_ID": workspace_id,
                "TIMESTAMP": self._timestamp(),
            },
        )
        path = workspace_path / INSTRUCTIONS_FILE
        self._write(path, content)
        logger.info("Generated %s for workspace %s", INSTRUCTIONS_FILE, workspace_id)
        return path

    # ------------------------------------------------------------------
    # Settings and legacy permissions
    # ------------------------------------------------------------------

    def emit_settings_document(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> CompiledRuleSet:
        """Write ``.claude/settings.json`` and the legacy ``permissions.json``.

        Returns
        -------
        CompiledRuleSet
            The rules written to the settings file.

        Raises
        ------
        DocumentWriteError
            If either file cannot be written.
        """
        config = self._load_config()
        workspace_path = self._layout.workspace_path(workspace_id, context)
        metadata = self._load_metadata(workspace_path)
        context = self._effective_context(workspace_id, context, metadata)
        project_type = context.project_type or DEFAULT_PROJECT_TYPE

        permissions = self._resolver.resolve(workspace_id, context)
        rules = compile_rules(permissions, project_type)
        timestamp = self._timestamp()

        settings = {
            "permissions": rules.to_settings(),
            "metadata": {
                "workspaceId": workspace_id,
                "projectType": project_type,
                "generated": timestamp,
                "description": context.description or DEFAULT_DESCRIPTION,
            },
        }
        self._write(workspace_path / SETTINGS_FILE, json.dumps(settings, indent=2) + "\n")
        logger.info(
            "Generated %s for workspace %s (%d allow, %d deny)",
            SETTINGS_FILE,
            workspace_id,
            len(rules.allow),
            len(rules.deny),
        )

        legacy = substitute(
            config.documents.templates.permissions_template,
            {
                "WORKSPACE_ID": workspace_id,
                "PERMISSIONS_JSON": json.dumps(permissions.to_document(), indent=2),
                "TIMESTAMP": timestamp,
            },
        )
        self._write(workspace_path / PERMISSIONS_FILE, legacy)
        logger.info("Generated %s for workspace %s", PERMISSIONS_FILE, workspace_id)
        return rules

    # ------------------------------------------------------------------
    # Legacy commands manifest
    # ------------------------------------------------------------------

    def emit_commands_manifest(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
        commands: list[UserCommand] | None = None,
    ) -> Path:
        """Write ``commands.json`` with the resolved commands and hot keys."""
        config = self._load_config()
        workspace_path = self._layout.workspace_path(workspace_id, context)
        if commands is None:
            commands = self._manifest_commands(workspace_path, config)

        content = substitute(
            config.documents.templates.commands_template,
            {
                "WORKSPACE_ID": workspace_id,
                "COMMANDS_JSON": json.dumps(
                    [c.model_dump(exclude_none=True) for c in commands], indent=2
                ),
                "HOTKEYS_JSON": json.dumps(config.commands.hot_keys, indent=2),
                "TIMESTAMP": self._timestamp(),
            },
        )
        path = workspace_path / COMMANDS_FILE
        self._write(path, content)
        logger.info("Generated %s for workspace %s (%d commands)", COMMANDS_FILE, workspace_id, len(commands))
        return path

    # ------------------------------------------------------------------
    # Per-command instruction files
    # ------------------------------------------------------------------

    def emit_command_documents(
        self,
        workspace_id: str,
        commands: list[UserCommand] | None = None,
        context: WorkspaceContext | None = None,
    ) -> CommandDocumentReport:
        """Write one ``.claude/commands/<keyword>.md`` per command plus the index.

        A command whose file cannot be written (including keywords that are
        not plain file names) is logged and reported; the others are still
        written.

        Raises
        ------
        DocumentWriteError
            If the index file cannot be written.
        """
        workspace_path = self._layout.workspace_path(workspace_id, context)
        if commands is None:
            commands = self._load_commands(workspace_path)
        commands_dir = workspace_path / COMMANDS_DIR
        report = CommandDocumentReport()

        index_name = COMMANDS_INDEX.lower()
        for command in commands:
            if not _KEYWORD_RE.match(command.keyword) or ".." in command.keyword:
                reason = "keyword is not a valid file name"
            elif f"{command.keyword}.md".lower() == index_name:
                reason = f"keyword collides with {COMMANDS_INDEX}"
            else:
                reason = None
            if reason is not None:
                logger.error("Skipping command %s: %s", command.id, reason)
                report.failures.append(CommandWriteFailure(command.id, command.keyword, reason))
                continue
            path = commands_dir / f"{command.keyword}.md"
            try:
                self._fs.write_text(path, render_command_document(command))
            except OSError as exc:
                logger.error("Failed to write command file %s: %s", path, exc)
                report.failures.append(CommandWriteFailure(command.id, command.keyword, str(exc)))
                continue
            report.written.append(path)

        index_path = commands_dir / COMMANDS_INDEX
        self._write(index_path, render_commands_index(commands))
        report.index_path = index_path
        logger.info(
            "Generated %d command files for workspace %s (%d failed)",
            len(report.written),
            workspace_id,
            len(report.failures),
        )
        return report

    # ------------------------------------------------------------------
    # Whole-workspace helpers
    # ------------------------------------------------------------------

    def generate_all(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> CommandDocumentReport:
        """Regenerate every artifact in dependency order.

        The command list is resolved once so every document describes the same
        commands, whether or not a previous run left a ``commands.json``.
        """
        workspace_path = self._layout.workspace_path(workspace_id, context)
        commands = self._manifest_commands(workspace_path, self._load_config())
        self.emit_settings_document(workspace_id, context)
        self.emit_instructions_document(workspace_id, context, commands=commands)
        self.emit_commands_manifest(workspace_id, context, commands=commands)
        return self.emit_command_documents(workspace_id, commands=commands, context=context)

    def ensure_documents(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> bool:
        """Generate all artifacts if the workspace has no ``permissions.json`` yet.

        Returns True when documents were generated.
        """
        if self.workspace_has_permissions(workspace_id, context):
            return False
        logger.info("Generating missing documents for workspace %s", workspace_id)
        self.generate_all(workspace_id, context)
        return True

    def workspace_has_permissions(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> bool:
        workspace_path = self._layout.workspace_path(workspace_id, context)
        return self._fs.exists(workspace_path / PERMISSIONS_FILE)

    def load_workspace_permissions(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> WorkspacePermissions:
        """Read back ``permissions.json``; defaults when missing or invalid."""
        path = self._layout.workspace_path(workspace_id, context) / PERMISSIONS_FILE
        try:
            raw = json.loads(self._fs.read_text(path))
            return WorkspacePermissions.model_validate(raw.get("permissions") or {})
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Failed to load %s, using defaults: %s", path, exc)
            return default_permissions()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def document_status(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> list[DocumentStatus]:
        """Existence and freshness of each required artifact."""
        workspace_path = self._layout.workspace_path(workspace_id, context)
        now = self._clock()
        statuses: list[DocumentStatus] = []
        for name in REQUIRED_DOCUMENTS:
            path = workspace_path / name
            try:
                if not self._fs.exists(path):
                    statuses.append(DocumentStatus(name, exists=False, recent=False))
                    continue
                age = now - self._fs.modified_at(path)
            except OSError:
                statuses.append(DocumentStatus(name, exists=False, recent=False))
                continue
            statuses.append(DocumentStatus(name, exists=True, recent=age < STALE_AFTER))
        return statuses

    def validate_documents(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> bool:
        """Return False if a required artifact is missing; stale ones only warn."""
        statuses = self.document_status(workspace_id, context)
        logger.debug("Validation results for %s: %s", workspace_id, statuses)
        missing = [s.file for s in statuses if not s.exists]
        if missing:
            logger.warning("Workspace %s is missing documents: %s", workspace_id, ", ".join(missing))
            return False
        stale = [s.file for s in statuses if not s.recent]
        if stale:
            logger.warning("Workspace %s has outdated documents: %s", workspace_id, ", ".join(stale))
        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def _write(self, path: Path, content: str) -> None:
        try:
            self._fs.write_text(path, content)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise DocumentWriteError(path, exc) from exc

    def _load_config(self) -> GlobalConfig:
        try:
            return self._config_provider.load_config()
        except Exception as exc:
            logger.warning("Failed to load global config, using defaults: %s", exc)
            return GlobalConfig()

    def _load_metadata(self, workspace_path: Path) -> dict[str, object]:
        path = workspace_path / METADATA_FILE
        if not self._fs.exists(path):
            return {}
        try:
            raw = json.loads(self._fs.read_text(path))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load %s, using defaults: %s", path, exc)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _effective_context(
        self,
        workspace_id: str,
        context: WorkspaceContext | None,
        metadata: dict[str, object],
    ) -> WorkspaceContext:
        """Merge ``workspace.json`` into the caller context.

        The stored description wins over the caller's; the caller's project type
        wins over the stored one.
        """
        context = context or WorkspaceContext(workspace_id=workspace_id)
        description = metadata.get("description")
        project_type = metadata.get("projectType")
        return dataclasses.replace(
            context,
            description=str(description) if description else context.description,
            project_type=context.project_type or (str(project_type) if project_type else None),
        )

    def _load_commands(self, workspace_path: Path) -> list[UserCommand]:
        if self._command_store is not None:
            try:
                self._command_store.initialize_storage()
                return self._command_store.get_all_commands()
            except (OSError, ValueError) as exc:
                logger.warning("Failed to load commands from store, falling back to legacy: %s", exc)

        path = workspace_path / COMMANDS_FILE
        try:
            raw = json.loads(self._fs.read_text(path))
        except (OSError, ValueError):
            return []
        entries = raw.get("commands") if isinstance(raw, dict) else None
        if entries is None:
            return []
        if not isinstance(entries, list):
            logger.warning("Legacy %s has no command list, ignoring", path)
            return []
        commands: list[UserCommand] = []
        for entry in entries:
            try:
                commands.append(UserCommand.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping invalid legacy command: %s", exc)
        return commands

    def _manifest_commands(self, workspace_path: Path, config: GlobalConfig) -> list[UserCommand]:
        commands = self._load_commands(workspace_path)
        if commands:
            return commands
        logger.warning("No stored commands, using the built-in library and global commands")
        return seed_commands(self._timestamp()) + list(config.commands.global_commands.values())

    def _context_files(self, workspace_path: Path, context: WorkspaceContext) -> str:
        if context.context_files:
            files = sorted(context.context_files)
        else:
            try:
                files = self._fs.list_files(workspace_path / "context")
            except OSError:
                return NO_CONTEXT_FILES
        if not files:
            return NO_CONTEXT_FILES
        return "\n".join(f"- {name}" for name in files)

    def _coding_standards(self, config: GlobalConfig, context: WorkspaceContext) -> str:
        standards = config.documents.coding_standards or "Follow standard best practices"
        if not context.custom_instructions:
            return standards
        extra = "\n".join(f"- {line}" for line in context.custom_instructions)
        return f"{standards}\n\n### Workspace Instructions\n\n{extra}"


def render_command_document(command: UserCommand) -> str:
    """Render the instruction file for a single command."""
    parts = [command.base_prompt.rstrip()]

    if command.context_adaptations:
        lines = "\n".join(
            f"- **{name}**: {text}" for name, text in command.context_adaptations.items()
        )
        parts.append(f"## Context Adaptations\n\n{lines}")

    additions = (command.custom_prompt_additions or []) + (command.custom_additions or [])
    if additions:
        parts.append("## Additional Instructions\n\n" + "\n".join(f"- {a}" for a in additions))

    follow_ups = ", ".join(command.follow_up_commands) or "none"
    parts.append(
        "<!--\n"
        f"category: {command.category}\n"
        f"estimated_duration: {command.estimated_duration or 'unknown'}\n"
        f"requires_approval: {'true' if command.requires_approval else 'false'}\n"
        f"follow_up_commands: {follow_ups}\n"
        "-->"
    )
    return "\n\n".join(parts) + "\n"


def render_commands_index(commands: list[UserCommand]) -> str:
    """Render ``.claude/commands/README.md``."""
    lines = [
        "# Workspace Commands",
        "",
        "Invoke a command in the agent session with `/<keyword>`.",
        "",
    ]
    if not commands:
        lines.append("No commands are configured for this workspace.")
    for command in commands:
        approval = " (requires approval)" if command.requires_approval else ""
        lines.append(
            f"- `/{command.keyword}`: **{command.name}** [{command.category}]{approval}"
            f" {command.summary_line}".rstrip()
        )
    return "\n".join(lines) + "\n"
