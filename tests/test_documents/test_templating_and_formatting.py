"""Tests for placeholder substitution and the human-readable formatters."""
from __future__ import annotations

from workshop_governance.commands.library import seed_commands
from workshop_governance.commands.model import UserCommand
from workshop_governance.documents.formatting import (
    APPROVAL_MARKER,
    NO_COMMANDS,
    format_command_line,
    format_commands_list,
    format_permissions_for_agent,
    format_permissions_summary,
    group_commands,
)
from workshop_governance.documents.templating import (
    find_placeholders,
    placeholder,
    substitute,
)
from workshop_governance.permissions.defaults import default_permissions
from workshop_governance.templates.document_templates import get_template


def _command(command_id: str, is_default: bool = False, **extra: object) -> UserCommand:
    return UserCommand.model_validate(
        {
            "id": command_id,
            "name": command_id.title(),
            "keyword": command_id,
            "base_prompt": f"# {command_id.title()} prompt\nMore text.",
            "is_default": is_default,
            **extra,
        }
    )


# ---------------------------------------------------------------------------
# Templating
# ---------------------------------------------------------------------------

class TestSubstitute:
    def test_replaces_every_occurrence(self) -> None:
        assert substitute("{{A}}-{{A}}-{{B}}", {"A": "x", "B": "y"}) == "x-x-y"

    def test_unknown_placeholders_are_left(self) -> None:
        assert substitute("{{A}} {{MISSING}}", {"A": "x"}) == "x {{MISSING}}"

    def test_no_escaping(self) -> None:
        assert substitute("{{A}}", {"A": "<b>{\"k\": 1}</b>"}) == "<b>{\"k\": 1}</b>"

    def test_placeholder(self) -> None:
        assert placeholder("NAME") == "{{NAME}}"


class TestFindPlaceholders:
    def test_distinct_in_order(self) -> None:
        assert find_placeholders("{{B}} {{A}} {{B}}") == ["B", "A"]

    def test_ignores_lowercase_and_single_braces(self) -> None:
        assert find_placeholders("{{name}} {A} {{ A }}") == []

    def test_bundled_instructions_template(self) -> None:
        assert set(find_placeholders(get_template("claude_md"))) == {
            "WORKSPACE_DESCRIPTION",
            "CURRENT_TASK",
            "PERMISSIONS_SUMMARY",
            "COMMANDS_LIST",
            "CONTEXT_FILES",
            "CODING_STANDARDS",
            "WORKSPACE_ID",
            "TIMESTAMP",
        }


# ---------------------------------------------------------------------------
# Permissions formatting
# ---------------------------------------------------------------------------

class TestPermissionsSummary:
    def test_default_summary(self) -> None:
        summary = format_permissions_summary(default_permissions())
        assert summary.splitlines() == [
            "You have the following permissions in this workspace:",
            "- **File System**: Read context/**, target/**, feedback/**, Write target/**, feedback/**",
            "- **Git**: diff, status, log, show, blame, add, commit",
            "- **Commands**: ls, cat, head, tail, grep, find, git, npm, node",
            "- **System**: No package installation",
        ]

    def test_package_installation_allowed(self) -> None:
        perms = default_permissions()
        perms.system_access.can_install_packages = True
        assert "Package installation allowed" in format_permissions_summary(perms)

    def test_empty_lists_render_none(self) -> None:
        perms = default_permissions()
        perms.commands.allowed = []
        assert "- **Commands**: none" in format_permissions_summary(perms)


class TestPermissionsForAgent:
    def test_sections(self) -> None:
        text = format_permissions_for_agent(default_permissions())
        for heading in ("## File System Access", "## Git Operations", "## Commands", "## System Access"):
            assert heading in text
        assert "- **Protected Branches**: main, master, production" in text
        assert "- **Network Access**: Allowed" in text
        assert "- **Package Installation**: Denied" in text


# ---------------------------------------------------------------------------
# Commands formatting
# ---------------------------------------------------------------------------

class TestCommandsFormatting:
    def test_empty_list(self) -> None:
        assert format_commands_list([]) == NO_COMMANDS

    def test_line_strips_heading_marker(self) -> None:
        line = format_command_line(_command("investigate"))
        assert line == "- **Investigate** (`investigate`): Investigate prompt"

    def test_approval_marker(self) -> None:
        line = format_command_line(_command("deploy", requires_approval=True))
        assert line.endswith(APPROVAL_MARKER)

    def test_custom_command_goes_to_custom(self) -> None:
        text = format_commands_list([_command("deploy")])
        assert "### Custom Commands" in text
        assert "### Startup Commands" not in text
        assert "### Reply Commands" not in text

    def test_non_default_with_startup_id_is_custom_only(self) -> None:
        groups = group_commands([_command("investigate", is_default=False)])
        assert [c.id for c in groups["Custom"]] == ["investigate"]
        assert groups["Startup"] == []

    def test_seed_commands_split_into_buckets(self) -> None:
        groups = group_commands(seed_commands("2026-01-01T00:00:00+00:00"))
        assert [c.id for c in groups["Startup"]] == ["investigate", "analyze", "plan"]
        assert [c.id for c in groups["Reply"]] == ["implement", "debug", "review", "test"]
        assert groups["Custom"] == []

    def test_section_layout(self) -> None:
        text = format_commands_list(
            [_command("investigate", is_default=True), _command("implement", is_default=True), _command("deploy")]
        )
        assert text == (
            "\n### Startup Commands\n"
            "- **Investigate** (`investigate`): Investigate prompt\n\n"
            "### Reply Commands\n"
            "- **Implement** (`implement`): Implement prompt\n\n"
            "### Custom Commands\n"
            "- **Deploy** (`deploy`): Deploy prompt"
        )

    def test_unbucketed_defaults_only(self) -> None:
        assert format_commands_list([_command("other", is_default=True)]) == NO_COMMANDS
