"""Resolved permission model for a single workspace.

``WorkspacePermissions`` is the source-agnostic permission object produced by
:class:`~workshop_governance.permissions.resolver.PermissionResolver`.  It is
stored on disk with camelCase keys (``fileSystem``, ``allowedOperations`` ...)
and exposed in Python with snake_case attributes.

Every section carries a default, so validating a partial mapping always yields
a complete object.

Example
-------
>>> perms = WorkspacePermissions.model_validate({"fileSystem": {"read": ["target/**"]}})
>>> perms.file_system.read
['target/**']
>>> perms.system_access.can_access_network
True
"""
from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

REDACTED: str = "[REDACTED]"

_MODEL_CONFIG = {
    "extra": "allow",
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class FileSystemPermissions(BaseModel):
    """Glob scopes for file reads, writes and execution."""

    model_config = _MODEL_CONFIG

    read: list[str] = Field(default_factory=list)
    write: list[str] = Field(default_factory=list)
    execute: list[str] = Field(default_factory=list)
    max_file_size: int | None = Field(default=None, ge=0)
    allowed_extensions: list[str] | None = Field(default=None)
    backup_before_edit: bool | None = Field(default=None)


class GitPermissions(BaseModel):
    """Git operations the agent may run."""

    model_config = _MODEL_CONFIG

    allowed_operations: list[str] = Field(default_factory=list)
    protected_branches: list[str] = Field(default_factory=list)
    requires_approval: list[str] = Field(default_factory=list)
    max_commits_per_session: int | None = Field(default=None, ge=0)
    require_staged_changes: bool | None = Field(default=None)


class ExternalPermissions(BaseModel):
    """Outbound hosts and opaque API credentials."""

    model_config = _MODEL_CONFIG

    allowed_hosts: list[str] = Field(default_factory=list)
    api_keys: dict[str, str] = Field(default_factory=dict, repr=False)
    rate_limits: dict[str, int] | None = Field(default=None)


class CommandPermissions(BaseModel):
    """Shell command names split by trust level."""

    model_config = _MODEL_CONFIG

    allowed: list[str] = Field(default_factory=list)
    requires_approval: list[str] = Field(default_factory=list)
    forbidden: list[str] = Field(default_factory=list)
    timeout_seconds: int | None = Field(default=None, ge=1)
    max_concurrent: int | None = Field(default=None, ge=1)


class ResourceUsage(BaseModel):
    """Resource quotas (memory in MB, cpu in percent, disk in MB)."""

    model_config = _MODEL_CONFIG

    memory: float = Field(default=512, ge=0)
    cpu: float = Field(default=50, ge=0)
    disk: float = Field(default=100, ge=0)


class SystemAccess(BaseModel):
    """Host-level capabilities."""

    model_config = _MODEL_CONFIG

    can_install_packages: bool = Field(default=False)
    can_modify_environment: bool = Field(default=False)
    can_access_network: bool = Field(default=True)
    max_resource_usage: ResourceUsage = Field(default_factory=ResourceUsage)


class WorkspacePermissions(BaseModel):
    """Complete permission object for one workspace.

    Attributes
    ----------
    file_system:
        Read, write and execute glob scopes relative to the workspace root.
    git:
        Allowed, approval-gated operations and protected branch names.
    external:
        Allowed hosts and API keys.  Key values are never rendered.
    commands:
        Allowed, approval-gated and forbidden shell command names.
    system_access:
        Package installation, environment, network and resource quotas.
    """

    model_config = _MODEL_CONFIG

    file_system: FileSystemPermissions = Field(default_factory=FileSystemPermissions)
    git: GitPermissions = Field(default_factory=GitPermissions)
    external: ExternalPermissions = Field(default_factory=ExternalPermissions)
    commands: CommandPermissions = Field(default_factory=CommandPermissions)
    system_access: SystemAccess = Field(default_factory=SystemAccess)

    def to_document(self) -> dict[str, object]:
        """Return the camelCase mapping written to disk, with API keys redacted."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        external = data.get("external")
        if isinstance(external, dict):
            external["apiKeys"] = {name: REDACTED for name in self.external.api_keys}
        return data


class PermissionSet(WorkspacePermissions):
    """A named role template (developer, reviewer, analyst ...)."""

    name: str | None = Field(default=None)
    description: str | None = Field(default=None)

    def to_workspace_permissions(self) -> WorkspacePermissions:
        """Drop the template metadata and return plain workspace permissions."""
        return WorkspacePermissions.model_validate(
            self.model_dump(by_alias=True, exclude={"name", "description"})
        )
