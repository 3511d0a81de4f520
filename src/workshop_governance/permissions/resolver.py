"""Selects the effective permissions for a workspace.

Sources are tried in priority order and the first one that yields a result
wins:

1. ``workspacePermissions`` in the user settings file (trusted verbatim).
2. A native ``permissions.allow`` list in the same file, reverse-derived by
   :func:`derive_from_native_allow_list`.
3. The role template for the workspace's project type.
4. The hardcoded default.

A read or parse failure at any tier is logged and the next tier is tried;
:meth:`PermissionResolver.resolve` never raises.

Example
-------
::

    resolver = PermissionResolver(StaticConfigProvider(), user_settings_path=Path("/nonexistent"))
    perms = resolver.resolve("ws-1", WorkspaceContext("ws-1", project_type="review"))
    assert perms.file_system.write == ["feedback/**"]
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from workshop_governance.permissions.defaults import default_permissions
from workshop_governance.permissions.model import WorkspacePermissions
from workshop_governance.rules.patterns import parse_capability

if TYPE_CHECKING:
    from workshop_governance.plugin.config_loader import ConfigProvider
    from workshop_governance.workspace.context import WorkspaceContext

logger = logging.getLogger(__name__)

DEFAULT_USER_SETTINGS_PATH: Path = Path.home() / ".claude" / "settings.json"

_ROLE_BY_PROJECT_TYPE: dict[str, str] = {
    "review": "reviewer",
    "analysis": "analyst",
}

_INSTALL_MARKERS: tuple[str, ...] = ("install", "npm i ", "yarn add", "pnpm add", "poetry add")
_EDIT_CAPABILITIES: frozenset[str] = frozenset({"Edit", "Write", "MultiEdit"})
_NETWORK_CAPABILITIES: frozenset[str] = frozenset({"WebFetch", "WebSearch"})
_NETWORK_COMMANDS: frozenset[str] = frozenset({"curl", "wget", "ssh", "scp", "rsync"})


def role_for_project_type(project_type: str | None) -> str:
    """Map a project type to its role template name (``developer`` by default)."""
    return _ROLE_BY_PROJECT_TYPE.get(project_type or "", "developer")


def derive_from_native_allow_list(allow: list[str]) -> WorkspacePermissions:
    """Approximate workspace permissions from a flat native allow list.

    This is a best-effort, lossy derivation.  Known limitations:

    * only the first word of a ``Bash(...)`` scope is kept as the command name,
      so argument restrictions are lost;
    * ``chmod`` anywhere in the list grants ``target/**`` execution;
    * any install-like command turns package installation on wholesale;
    * network access is on only when a web tool or network command is listed;
    * fields the list says nothing about keep their default values;
    * entries that are not capability patterns are skipped.
    """
    permissions = default_permissions()
    commands: list[str] = []
    git_operations: list[str] = []
    reads: list[str] = []
    writes: list[str] = []
    can_install = False
    saw_network_tool = False

    for entry in allow:
        parsed = parse_capability(entry)
        if parsed is None:
            logger.debug("Ignoring unrecognised native permission %r", entry)
            continue
        name, scope = parsed
        if name == "Bash" and scope:
            words = scope.split()
            command = words[0]
            if command not in commands:
                commands.append(command)
            if command == "git" and len(words) > 1 and words[1] != "*":
                if words[1] not in git_operations:
                    git_operations.append(words[1])
            if any(marker in f"{scope} " for marker in _INSTALL_MARKERS):
                can_install = True
        elif name == "Read" and scope:
            reads.append(scope)
        elif name in _EDIT_CAPABILITIES and scope:
            if scope not in writes:
                writes.append(scope)
        elif name in _NETWORK_CAPABILITIES:
            saw_network_tool = True

    if commands:
        permissions.commands.allowed = commands
    if git_operations:
        permissions.git.allowed_operations = git_operations
    if reads:
        permissions.file_system.read = reads
    if writes:
        permissions.file_system.write = writes
    permissions.file_system.execute = ["target/**"] if "chmod" in commands else []
    permissions.system_access.can_install_packages = can_install
    permissions.system_access.can_access_network = saw_network_tool or any(
        command in _NETWORK_COMMANDS for command in commands
    )
    return permissions


class PermissionResolver:
    """Resolves :class:`WorkspacePermissions` from the layered sources.

    Parameters
    ----------
    config_provider:
        Supplies the global config holding the role templates.
    user_settings_path:
        User-level settings file living outside every workspace.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        user_settings_path: Path = DEFAULT_USER_SETTINGS_PATH,
    ) -> None:
        self._config_provider = config_provider
        self._user_settings_path = Path(user_settings_path)

    @property
    def user_settings_path(self) -> Path:
        return self._user_settings_path

    def resolve(
        self,
        workspace_id: str,
        context: WorkspaceContext | None = None,
    ) -> WorkspacePermissions:
        """Return the effective permissions for ``workspace_id``."""
        settings = self._load_user_settings()

        override = self._from_override(settings)
        if override is not None:
            logger.info("Using user permission override for workspace %s", workspace_id)
            return override

        derived = self._from_native_settings(settings)
        if derived is not None:
            logger.info("Derived permissions for workspace %s from native settings", workspace_id)
            return derived

        role = role_for_project_type(context.project_type if context else None)
        template = self._from_role_template(role)
        if template is not None:
            logger.info("Using %s role template for workspace %s", role, workspace_id)
            return template

        logger.info("Using default permissions for workspace %s", workspace_id)
        return default_permissions()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load_user_settings(self) -> dict[str, object]:
        try:
            if not self._user_settings_path.exists():
                return {}
            raw = json.loads(self._user_settings_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read user settings %s: %s", self._user_settings_path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("User settings %s is not a JSON object, ignoring", self._user_settings_path)
            return {}
        return raw

    def _from_override(self, settings: dict[str, object]) -> WorkspacePermissions | None:
        override = settings.get("workspacePermissions")
        if override is None:
            return None
        try:
            return WorkspacePermissions.model_validate(override)
        except ValidationError as exc:
            logger.warning("Invalid workspacePermissions override, ignoring: %s", exc)
            return None

    def _from_native_settings(self, settings: dict[str, object]) -> WorkspacePermissions | None:
        native = settings.get("permissions")
        if not isinstance(native, dict):
            return None
        allow = native.get("allow")
        if not isinstance(allow, list) or not allow:
            return None
        if not all(isinstance(entry, str) for entry in allow):
            logger.warning("Native permissions.allow contains non-string entries, ignoring")
            return None
        return derive_from_native_allow_list(allow)

    def _from_role_template(self, role: str) -> WorkspacePermissions | None:
        try:
            config = self._config_provider.load_config()
        except Exception as exc:
            logger.warning("Failed to load global config for role templates: %s", exc)
            return None
        template = config.permissions.templates.get(role)
        if template is None:
            return None
        return template.to_workspace_permissions()
