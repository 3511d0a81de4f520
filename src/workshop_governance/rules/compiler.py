"""Compiles workspace permissions into agent allow/deny capability lists.

The output order is significant: the consuming tool may let later entries
shadow earlier ones, so the four blocks are always emitted as

1. base-security allow (constant),
2. configurable allow (from permissions and project type),
3. base-security deny (constant),
4. configurable deny (from permissions).

Every configurable shell rule is scoped to a workspace directory; no allow
rule ever names a parent or absolute path.

Example
-------
>>> from workshop_governance.permissions import default_permissions
>>> rules = compile_rules(default_permissions(), "review")
>>> "Edit(feedback/**)" in rules.allow and "Edit(target/**)" not in rules.allow
True
>>> "Bash(sudo *)" in rules.deny
True
"""
from __future__ import annotations

import logging

from workshop_governance.permissions.model import WorkspacePermissions
from workshop_governance.rules.base_security import (
    BASE_ALLOW,
    BASE_DENY,
    DESTRUCTIVE_COMMANDS,
)
from workshop_governance.rules.builder import CompiledRuleSet, RulePhase, RuleSetBuilder
from workshop_governance.rules.patterns import capability

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: tuple[str, ...] = (
    "py", "js", "jsx", "ts", "tsx", "json", "md", "yaml", "yml", "toml",
    "css", "scss", "html", "sh", "go", "rs", "java", "rb", "sql", "txt",
)
EDIT_CAPABILITIES: tuple[str, ...] = ("Edit", "Write", "MultiEdit")

# Directories the configurable shell tiers may address.
SHELL_SCOPES: tuple[str, ...] = ("context", "target", "feedback")

GIT_READ_OPERATIONS: tuple[str, ...] = ("status", "diff", "log", "show", "blame")
GIT_WRITE_PATTERNS: dict[str, tuple[str, ...]] = {
    "add": ("git add target/*", "git add feedback/*"),
    "commit": ("git commit -m *",),
    "stash": ("git stash", "git stash list", "git stash pop"),
    "branch": ("git branch", "git branch --list"),
}
PACKAGE_INTROSPECTION: tuple[str, ...] = (
    "npm ls", "npm list", "npm --version", "node --version",
    "pip show *", "pip list", "pip --version", "python --version", "python3 --version",
)
SYSTEM_INFO: tuple[str, ...] = ("ps", "ps aux", "uname", "uname -a", "hostname")

# Tests the read-only search tier may pass to find.
FIND_TESTS: tuple[str, ...] = ("-name", "-iname", "-type", "-path")
# find actions that write, delete or run other programs; each also covers
# its suffixed variants (-execdir, -fprintf).
FIND_ACTIONS: tuple[str, ...] = ("-delete", "-exec", "-ok", "-fprint", "-fls")

NETWORK_COMMANDS: tuple[str, ...] = ("curl", "wget", "ssh", "scp", "rsync")
SENSITIVE_PATHS: tuple[str, ...] = (
    ".env*",
    "**/.env*",
    "**/*.key",
    "**/*.pem",
    "**/node_modules/**",
    "**/.git/**",
)


def bash(command: str) -> str:
    return capability("Bash", command)


def _file_type_rules() -> list[str]:
    return [capability("Read", f"target/**/*.{ext}") for ext in SOURCE_EXTENSIONS]


def _edit_rules(project_type: str | None) -> list[str]:
    """Edit scopes for exactly one of the three project-type branches."""
    if project_type == "review":
        scopes: tuple[str, ...] = ("feedback/**",)
        extra: list[str] = []
    elif project_type == "analysis":
        scopes = ("feedback/**", "analysis/**")
        extra = [capability("Read", "analysis/**"), capability("LS", "analysis")]
    else:
        scopes = ("target/**", "feedback/**", "*.md")
        extra = []
    rules = [capability(tool, scope) for scope in scopes for tool in EDIT_CAPABILITIES]
    return rules + extra


def _shell_rules(permissions: WorkspacePermissions) -> list[str]:
    """Graduated shell tiers, each scoped to the workspace directories."""
    rules: list[str] = []

    # Listing
    rules.append(bash("ls"))
    for scope in SHELL_SCOPES:
        rules.extend(bash(c) for c in (f"ls {scope}", f"ls {scope}/*", f"ls -la {scope}", f"tree {scope}"))
    # Viewing
    for scope in SHELL_SCOPES:
        rules.extend(bash(f"{tool} {scope}/*") for tool in ("cat", "head", "tail", "less"))
    # Search
    for scope in SHELL_SCOPES:
        rules.extend(bash(f"find {scope} {test} *") for test in FIND_TESTS)
        rules.append(bash(f"grep -r * {scope}"))
        rules.append(bash(f"grep * {scope}/*"))
    # Text processing
    for scope in SHELL_SCOPES:
        rules.extend(bash(f"{tool} {scope}/*") for tool in ("wc", "sort", "uniq", "diff"))
    # System information, read only
    rules.extend(bash(c) for c in SYSTEM_INFO)
    # Git
    for operation in GIT_READ_OPERATIONS:
        rules.append(bash(f"git {operation}"))
        rules.append(bash(f"git {operation} *"))
    for operation in permissions.git.allowed_operations:
        rules.extend(bash(c) for c in GIT_WRITE_PATTERNS.get(operation, ()))
    # Package manager introspection
    rules.extend(bash(c) for c in PACKAGE_INTROSPECTION)
    return rules


def _sensitive_file_rules() -> list[str]:
    return [capability(tool, path) for path in SENSITIVE_PATHS for tool in ("Edit", "Write")]


def _network_rules() -> list[str]:
    rules: list[str] = []
    for command in NETWORK_COMMANDS:
        rules.append(bash(command))
        rules.append(bash(f"{command} *"))
    return rules


def _search_guard_rules() -> list[str]:
    """Keep the search tier read only and inside the workspace."""
    rules = [bash(f"find * {action}*") for action in FIND_ACTIONS]
    rules.append(bash("grep * /*"))
    rules.append(bash("grep * ~*"))
    return rules


def _forbidden_command_rules(permissions: WorkspacePermissions) -> list[str]:
    rules: list[str] = []
    for command in permissions.commands.forbidden:
        command = command.strip()
        if not command or command in DESTRUCTIVE_COMMANDS:
            continue
        rules.append(bash(command))
        rules.append(bash(f"{command} *"))
    return rules


def compile_rules(
    permissions: WorkspacePermissions,
    project_type: str | None = "general",
) -> CompiledRuleSet:
    """Compile ``permissions`` into ordered allow and deny lists.

    Parameters
    ----------
    permissions:
        Resolved workspace permissions.
    project_type:
        ``development``/``general`` (or anything unrecognised), ``review`` or
        ``analysis``; selects which directories are editable.

    Returns
    -------
    CompiledRuleSet
        Pure function of its inputs; never raises for valid permissions.
    """
    builder = RuleSetBuilder()

    builder.extend(RulePhase.BASE_ALLOW, BASE_ALLOW)

    builder.extend(RulePhase.CONFIGURABLE_ALLOW, _file_type_rules())
    builder.extend(RulePhase.CONFIGURABLE_ALLOW, _edit_rules(project_type))
    if permissions.commands.allowed:
        builder.extend(RulePhase.CONFIGURABLE_ALLOW, _shell_rules(permissions))

    builder.extend(RulePhase.BASE_DENY, BASE_DENY)

    builder.extend(RulePhase.CONFIGURABLE_DENY, _sensitive_file_rules())
    if not permissions.system_access.can_access_network:
        builder.extend(RulePhase.CONFIGURABLE_DENY, _network_rules())
    builder.extend(RulePhase.CONFIGURABLE_DENY, _forbidden_command_rules(permissions))
    if permissions.commands.allowed:
        builder.extend(RulePhase.CONFIGURABLE_DENY, _search_guard_rules())

    rules = builder.build()
    logger.debug(
        "Compiled %d allow and %d deny rules (project_type=%s)",
        len(rules.allow),
        len(rules.deny),
        project_type,
    )
    return rules
