"""workshop-governance: workspace policy compiler for agent sessions.

Resolves the permissions of a workspace, compiles them into allow/deny
capability rules, and writes the documents an agent session reads on start.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import workshop_governance as gov
>>> gov.__version__
'0.1.0'
>>> rules = gov.compile_rules(gov.default_permissions(), "review")
>>> gov.RuleChecker(rules).check("Edit(feedback/notes.md)").allowed
True
>>> gov.RuleChecker(rules).check("Edit(target/app.py)").allowed
False
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------
from workshop_governance.permissions.defaults import default_permissions, default_role_templates
from workshop_governance.permissions.model import PermissionSet, WorkspacePermissions
from workshop_governance.permissions.resolver import (
    PermissionResolver,
    derive_from_native_allow_list,
    role_for_project_type,
)

# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
from workshop_governance.rules.builder import (
    CompiledRuleSet,
    RuleOrderError,
    RulePhase,
    RuleSetBuilder,
    ScopeEscapeError,
)
from workshop_governance.rules.checker import RuleChecker, RuleDecision
from workshop_governance.rules.compiler import compile_rules

# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------
from workshop_governance.documents.emitter import (
    CommandDocumentReport,
    DocumentEmitter,
    DocumentWriteError,
)
from workshop_governance.documents.filesystem import FileSystem, LocalFileSystem
from workshop_governance.documents.formatting import (
    format_commands_list,
    format_permissions_for_agent,
    format_permissions_summary,
)
from workshop_governance.documents.templating import substitute

# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
from workshop_governance.commands.model import UserCommand
from workshop_governance.commands.store import CommandStore, CommandStoreError

# ---------------------------------------------------------------------------
# Configuration and workspaces
# ---------------------------------------------------------------------------
from workshop_governance.plugin.config_loader import (
    ConfigLoader,
    FileConfigProvider,
    GlobalConfig,
    StaticConfigProvider,
)
from workshop_governance.workspace.context import (
    WorkspaceContext,
    WorkspaceLayout,
    WorkspacePathError,
    detect_project_type,
)

__all__ = [
    "__version__",
    # Permissions
    "PermissionResolver",
    "PermissionSet",
    "WorkspacePermissions",
    "default_permissions",
    "default_role_templates",
    "derive_from_native_allow_list",
    "role_for_project_type",
    # Rules
    "CompiledRuleSet",
    "RuleChecker",
    "RuleDecision",
    "RuleOrderError",
    "RulePhase",
    "RuleSetBuilder",
    "ScopeEscapeError",
    "compile_rules",
    # Documents
    "CommandDocumentReport",
    "DocumentEmitter",
    "DocumentWriteError",
    "FileSystem",
    "LocalFileSystem",
    "format_commands_list",
    "format_permissions_for_agent",
    "format_permissions_summary",
    "substitute",
    # Commands
    "CommandStore",
    "CommandStoreError",
    "UserCommand",
    # Configuration and workspaces
    "ConfigLoader",
    "FileConfigProvider",
    "GlobalConfig",
    "StaticConfigProvider",
    "WorkspaceContext",
    "WorkspaceLayout",
    "WorkspacePathError",
    "detect_project_type",
]
