"""Human-readable renderings of permissions and commands."""
from __future__ import annotations

from workshop_governance.commands.model import (
    REPLY_COMMAND_IDS,
    STARTUP_COMMAND_IDS,
    UserCommand,
)
from workshop_governance.permissions.model import WorkspacePermissions

NO_COMMANDS: str = "- No custom commands available"
APPROVAL_MARKER: str = " ⚠️ *Requires approval*"


def _join(values: list[str]) -> str:
    return ", ".join(values) if values else "none"


def format_permissions_summary(permissions: WorkspacePermissions) -> str:
    """Short bullet summary used in the instructions document."""
    fs = permissions.file_system
    packages = (
        "Package installation allowed"
        if permissions.system_access.can_install_packages
        else "No package installation"
    )
    return "\n".join(
        [
            "You have the following permissions in this workspace:",
            f"- **File System**: Read {_join(fs.read)}, Write {_join(fs.write)}",
            f"- **Git**: {_join(permissions.git.allowed_operations)}",
            f"- **Commands**: {_join(permissions.commands.allowed)}",
            f"- **System**: {packages}",
        ]
    )


def format_permissions_for_agent(permissions: WorkspacePermissions) -> str:
    """Full sectioned summary suitable for an agent system prompt."""
    fs = permissions.file_system
    git = permissions.git
    commands = permissions.commands
    system = permissions.system_access

    def allowed(flag: bool) -> str:
        return "Allowed" if flag else "Denied"

    sections = [
        "## File System Access",
        f"- **Read Access**: {_join(fs.read)}",
        f"- **Write Access**: {_join(fs.write)}",
        f"- **Execute Access**: {_join(fs.execute)}",
        "",
        "## Git Operations",
        f"- **Allowed**: {_join(git.allowed_operations)}",
        f"- **Protected Branches**: {_join(git.protected_branches)}",
        f"- **Requires Approval**: {_join(git.requires_approval)}",
        "",
        "## Commands",
        f"- **Allowed**: {_join(commands.allowed)}",
        f"- **Requires Approval**: {_join(commands.requires_approval)}",
        f"- **Forbidden**: {_join(commands.forbidden)}",
        "",
        "## System Access",
        f"- **Package Installation**: {allowed(system.can_install_packages)}",
        f"- **Environment Modification**: {allowed(system.can_modify_environment)}",
        f"- **Network Access**: {allowed(system.can_access_network)}",
        "",
        "⚠️  **Important**: These permissions are strictly enforced. "
        "Any operation outside these boundaries will be blocked.",
    ]
    return "\n".join(sections)


def format_command_line(command: UserCommand) -> str:
    """``- **Name** (`keyword`): first prompt line`` plus an approval marker."""
    line = f"- **{command.name}** (`{command.keyword}`): {command.summary_line}"
    return line + APPROVAL_MARKER if command.requires_approval else line


def group_commands(commands: list[UserCommand]) -> dict[str, list[UserCommand]]:
    """Split commands into the Startup, Reply and Custom buckets.

    Non-default commands always go to Custom.  Default commands outside the
    startup and reply id sets are not listed.
    """
    groups: dict[str, list[UserCommand]] = {"Startup": [], "Reply": [], "Custom": []}
    for command in commands:
        if not command.is_default:
            groups["Custom"].append(command)
        elif command.id in STARTUP_COMMAND_IDS:
            groups["Startup"].append(command)
        elif command.id in REPLY_COMMAND_IDS:
            groups["Reply"].append(command)
    return groups


def format_commands_list(commands: list[UserCommand]) -> str:
    """Render the commands section of the instructions document."""
    if not commands:
        return NO_COMMANDS

    blocks: list[str] = []
    for title, members in group_commands(commands).items():
        if members:
            lines = "\n".join(format_command_line(c) for c in members)
            blocks.append(f"### {title} Commands\n{lines}")
    if not blocks:
        return NO_COMMANDS
    return "\n" + "\n\n".join(blocks)
