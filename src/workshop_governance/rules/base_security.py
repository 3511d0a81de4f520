"""Fixed, non-overridable base security rules.

``BASE_ALLOW`` and ``BASE_DENY`` are identical for every workspace.  The
compiler emits them verbatim before any configurable rule, and nothing a
workspace configures can remove them.

Allowed file scopes are limited to the workspace subtree; denied scopes cover
parent traversal, system roots, the hosting application's tree, VCS internals,
the agent's own settings and destructive or privileged shell commands.
"""
from __future__ import annotations

from workshop_governance.rules.patterns import capability

WORKSPACE_DIRS: tuple[str, ...] = ("context", "target", "feedback", "agents")
WORKSPACE_ROOT_FILES: tuple[str, ...] = (
    "CLAUDE.md",
    "README.md",
    "permissions.json",
    "commands.json",
    "workspace.json",
)
SAFE_TOOLS: tuple[str, ...] = ("Task", "TodoRead", "TodoWrite", "WebFetch", "WebSearch")
SAFE_SHELL: tuple[str, ...] = ("pwd", "whoami", "date", "echo *", "printf *")

SYSTEM_PATHS: tuple[str, ...] = (
    "/home", "/root", "/etc", "/var", "/usr", "/sys", "/proc", "/dev", "/tmp",
)
DESTRUCTIVE_COMMANDS: tuple[str, ...] = (
    "rm", "rmdir", "sudo", "su", "passwd", "shutdown", "reboot", "chmod", "chown",
)

# File capabilities whose scope is a glob over paths.
PATH_CAPABILITIES: tuple[str, ...] = ("Read", "Edit", "Write", "MultiEdit", "Glob", "Grep")

# Relative to a workspace at <app>/storage/workspaces/<id>.
APPLICATION_PATHS: tuple[str, ...] = (
    "../../../src/**",
    "../../../node_modules/**",
    "../../../package.json",
    "../../../.env*",
    "../../../.git/**",
)
PROTECTED_WORKSPACE_PATHS: tuple[str, ...] = (
    ".git/**",
    ".claude/**",
    ".claude-agent-data/**",
)


def _build_base_allow() -> tuple[str, ...]:
    rules: list[str] = []
    for directory in WORKSPACE_DIRS:
        rules.append(capability("Read", f"{directory}/**"))
    for name in WORKSPACE_ROOT_FILES:
        rules.append(capability("Read", name))
    rules.append(capability("LS", "."))
    for directory in WORKSPACE_DIRS:
        rules.append(capability("LS", directory))
    for tool in ("Glob", "Grep"):
        for directory in WORKSPACE_DIRS:
            rules.append(capability(tool, f"{directory}/**"))
    rules.extend(SAFE_TOOLS)
    rules.extend(capability("Bash", command) for command in SAFE_SHELL)
    return tuple(rules)


def _build_base_deny() -> tuple[str, ...]:
    rules: list[str] = []

    # Parent traversal and system roots for every file capability.
    for tool in PATH_CAPABILITIES:
        rules.append(capability(tool, "../**"))
        rules.extend(capability(tool, f"{path}/**") for path in SYSTEM_PATHS)
    rules.append(capability("LS", ".."))
    rules.append(capability("LS", "../**"))
    rules.extend(capability("LS", path) for path in SYSTEM_PATHS)

    # Shell equivalents.
    rules.extend(
        capability("Bash", command)
        for command in ("cd ..", "cd ../*", "cd /", "cd /*", "cd ~", "ls ..", "ls ../*", "find / *", "find .. *")
    )
    for path in SYSTEM_PATHS:
        rules.append(capability("Bash", f"cd {path}"))
        rules.append(capability("Bash", f"ls {path}"))
        rules.append(capability("Bash", f"ls {path}/*"))
        rules.append(capability("Bash", f"cat {path}/*"))
        rules.append(capability("Bash", f"find {path} *"))
        rules.append(capability("Bash", f"grep * {path}/*"))
    rules.append(capability("Bash", "cat ../*"))
    rules.append(capability("Bash", "grep * ../*"))

    # Hosting application and workspace internals.
    for path in APPLICATION_PATHS:
        rules.extend(capability(tool, path) for tool in ("Read", "Edit", "Write"))
    for path in PROTECTED_WORKSPACE_PATHS:
        rules.extend(capability(tool, path) for tool in ("Edit", "Write", "MultiEdit"))
    rules.append(capability("Read", ".claude-agent-data/**"))

    # Destructive and privileged commands.
    for command in DESTRUCTIVE_COMMANDS:
        rules.append(capability("Bash", command))
        rules.append(capability("Bash", f"{command} *"))
    return tuple(rules)


BASE_ALLOW: tuple[str, ...] = _build_base_allow()
BASE_DENY: tuple[str, ...] = _build_base_deny()
