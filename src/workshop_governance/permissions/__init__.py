"""Workspace permission model and layered resolution.

Example
-------
::

    from workshop_governance.permissions import PermissionResolver, default_permissions

    perms = default_permissions()
    assert "target/**" in perms.file_system.write
"""
from __future__ import annotations

from workshop_governance.permissions.defaults import (
    default_permissions,
    default_role_templates,
)
from workshop_governance.permissions.model import (
    REDACTED,
    CommandPermissions,
    ExternalPermissions,
    FileSystemPermissions,
    GitPermissions,
    PermissionSet,
    ResourceUsage,
    SystemAccess,
    WorkspacePermissions,
)
from workshop_governance.permissions.resolver import (
    DEFAULT_USER_SETTINGS_PATH,
    PermissionResolver,
    derive_from_native_allow_list,
    role_for_project_type,
)

__all__ = [
    # Model
    "REDACTED",
    "CommandPermissions",
    "ExternalPermissions",
    "FileSystemPermissions",
    "GitPermissions",
    "PermissionSet",
    "ResourceUsage",
    "SystemAccess",
    "WorkspacePermissions",
    # Defaults
    "default_permissions",
    "default_role_templates",
    # Resolution
    "DEFAULT_USER_SETTINGS_PATH",
    "PermissionResolver",
    "derive_from_native_allow_list",
    "role_for_project_type",
]
