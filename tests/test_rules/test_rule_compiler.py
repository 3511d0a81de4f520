"""Tests for compile_rules and the base security lists."""
from __future__ import annotations

import pytest

from workshop_governance.permissions.defaults import (
    default_permissions,
    default_role_templates,
)
from workshop_governance.permissions.model import WorkspacePermissions
from workshop_governance.rules.base_security import (
    BASE_ALLOW,
    BASE_DENY,
    DESTRUCTIVE_COMMANDS,
    SYSTEM_PATHS,
)
from workshop_governance.rules.checker import RuleChecker
from workshop_governance.rules.compiler import NETWORK_COMMANDS, compile_rules
from workshop_governance.rules.patterns import find_scope_escapes

PROJECT_TYPES = ["development", "general", "review", "analysis", "unknown", None]


def _permission_inputs() -> list[WorkspacePermissions]:
    templates = default_role_templates()
    empty = WorkspacePermissions.model_validate({})
    risky = default_permissions()
    risky.commands.allowed = ["rm", "sudo", "chmod", "curl"]
    risky.commands.forbidden = []
    risky.git.allowed_operations = ["add", "commit", "stash", "branch", "push"]
    offline = default_permissions()
    offline.system_access.can_access_network = False
    return [
        default_permissions(),
        empty,
        risky,
        offline,
        *(t.to_workspace_permissions() for t in templates.values()),
    ]


@pytest.fixture(params=range(len(_permission_inputs())))
def permissions(request: pytest.FixtureRequest) -> WorkspacePermissions:
    return _permission_inputs()[request.param]


# ---------------------------------------------------------------------------
# Base security invariance
# ---------------------------------------------------------------------------

class TestBaseSecurityInvariance:
    @pytest.mark.parametrize("project_type", PROJECT_TYPES)
    def test_base_lists_lead_verbatim(
        self, permissions: WorkspacePermissions, project_type: str | None
    ) -> None:
        rules = compile_rules(permissions, project_type)
        assert rules.base_allow == BASE_ALLOW
        assert rules.allow[: len(BASE_ALLOW)] == BASE_ALLOW
        assert rules.base_deny == BASE_DENY
        assert rules.deny[: len(BASE_DENY)] == BASE_DENY

    def test_base_lists_are_non_trivial(self) -> None:
        assert "Read(context/**)" in BASE_ALLOW
        assert "Read(CLAUDE.md)" in BASE_ALLOW
        assert "TodoWrite" in BASE_ALLOW
        assert "Read(../**)" in BASE_DENY
        assert "Edit(.claude/**)" in BASE_DENY

    def test_compile_is_pure(self) -> None:
        assert compile_rules(default_permissions(), "general") == compile_rules(default_permissions(), "general")


# ---------------------------------------------------------------------------
# No path escape
# ---------------------------------------------------------------------------

class TestNoPathEscape:
    @pytest.mark.parametrize("project_type", PROJECT_TYPES)
    def test_allow_entries_stay_in_workspace(
        self, permissions: WorkspacePermissions, project_type: str | None
    ) -> None:
        rules = compile_rules(permissions, project_type)
        assert find_scope_escapes(rules.allow) == []
        for pattern in rules.allow:
            assert "../" not in pattern
            assert "(/" not in pattern

    @pytest.mark.parametrize(
        "pattern",
        [
            "Read(../**)",
            "Edit(../**)",
            "Write(../**)",
            "Glob(../**)",
            "Grep(../**)",
            "LS(..)",
            "Bash(cd ..)",
            "Bash(ls ..)",
            "Bash(cat ../*)",
        ],
    )
    def test_traversal_patterns_are_denied(self, pattern: str) -> None:
        assert pattern in compile_rules(default_permissions()).deny

    @pytest.mark.parametrize("root", SYSTEM_PATHS)
    def test_system_roots_are_denied(self, root: str) -> None:
        deny = compile_rules(default_permissions()).deny
        assert f"Read({root}/**)" in deny
        assert f"Bash(cd {root})" in deny


# ---------------------------------------------------------------------------
# Deny precedence
# ---------------------------------------------------------------------------

class TestDestructiveCommands:
    @pytest.mark.parametrize("project_type", PROJECT_TYPES)
    def test_always_denied(self, permissions: WorkspacePermissions, project_type: str | None) -> None:
        deny = compile_rules(permissions, project_type).deny
        for command in DESTRUCTIVE_COMMANDS:
            assert f"Bash({command})" in deny
            assert f"Bash({command} *)" in deny

    def test_allowed_destructive_command_is_still_denied(self) -> None:
        perms = default_permissions()
        perms.commands.allowed.append("rm")
        rules = compile_rules(perms)
        assert "Bash(rm *)" in rules.deny
        assert "Bash(rm *)" not in rules.allow

    def test_forbidden_commands_are_added_once(self) -> None:
        perms = default_permissions()
        perms.commands.forbidden = ["sudo", "make", " ", "make"]
        rules = compile_rules(perms)
        assert rules.configurable_deny.count("Bash(make *)") == 1
        assert "Bash(sudo *)" not in rules.configurable_deny


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------

class TestNetworkRules:
    def test_offline_denies_network_commands(self) -> None:
        perms = default_permissions()
        perms.system_access.can_access_network = False
        deny = compile_rules(perms).deny
        for command in NETWORK_COMMANDS:
            assert f"Bash({command})" in deny
            assert f"Bash({command} *)" in deny

    def test_online_leaves_network_commands_alone(self) -> None:
        perms = default_permissions()
        perms.system_access.can_access_network = True
        rules = compile_rules(perms)
        for command in NETWORK_COMMANDS:
            assert f"Bash({command} *)" not in rules.deny
        assert rules.base_deny == BASE_DENY


# ---------------------------------------------------------------------------
# Project types
# ---------------------------------------------------------------------------

class TestProjectTypeEdits:
    def test_analysis_edits_analysis_not_target(self) -> None:
        allow = compile_rules(default_permissions(), "analysis").allow
        assert "Edit(analysis/**)" in allow
        assert "Write(analysis/**)" in allow
        assert "Read(analysis/**)" in allow
        assert "LS(analysis)" in allow
        assert "Edit(target/**)" not in allow
        assert "Write(target/**)" not in allow

    def test_review_edits_feedback_only(self) -> None:
        allow = compile_rules(default_permissions(), "review").allow
        assert "Edit(feedback/**)" in allow
        assert "Edit(target/**)" not in allow
        assert "Edit(*.md)" not in allow

    @pytest.mark.parametrize("project_type", ["development", "general", "unknown", None])
    def test_development_edits_target_feedback_and_markdown(self, project_type: str | None) -> None:
        allow = compile_rules(default_permissions(), project_type).allow
        for tool in ("Edit", "Write", "MultiEdit"):
            assert f"{tool}(target/**)" in allow
            assert f"{tool}(feedback/**)" in allow
            assert f"{tool}(*.md)" in allow
        assert "Edit(analysis/**)" not in allow

    def test_source_extension_reads(self) -> None:
        allow = compile_rules(default_permissions()).allow
        assert "Read(target/**/*.py)" in allow
        assert "Read(target/**/*.ts)" in allow


# ---------------------------------------------------------------------------
# Shell tiers
# ---------------------------------------------------------------------------

class TestShellRules:
    def test_no_allowed_commands_means_no_shell_tiers(self) -> None:
        perms = default_permissions()
        perms.commands.allowed = []
        rules = compile_rules(perms)
        assert "Bash(ls context)" not in rules.allow
        assert "Bash(git status)" not in rules.allow
        assert "Bash(pwd)" in rules.allow

    def test_shell_tiers_are_scoped(self) -> None:
        allow = compile_rules(default_permissions()).allow
        assert "Bash(ls context)" in allow
        assert "Bash(cat target/*)" in allow
        assert "Bash(grep -r * feedback)" in allow
        assert "Bash(ls *)" not in allow
        assert "Read(*)" not in allow

    def test_search_tier_is_read_only(self) -> None:
        rules = compile_rules(default_permissions())
        assert "Bash(find target -name *)" in rules.allow
        assert "Bash(find target *)" not in rules.allow
        assert "Bash(find * -delete*)" in rules.configurable_deny

        checker = RuleChecker(rules)
        assert checker.check("Bash(find target -name *.py)").allowed
        assert checker.check("Bash(grep -r TODO target)").allowed
        assert not checker.check("Bash(find target -name x -delete)").allowed
        assert not checker.check("Bash(find target -type f -exec rm {} ;)").allowed
        assert not checker.check("Bash(find target -name x -execdir sh -c id ;)").allowed
        assert not checker.check("Bash(grep -r x /etc target)").allowed

    def test_search_guards_follow_shell_tiers(self) -> None:
        perms = default_permissions()
        perms.commands.allowed = []
        assert "Bash(find * -exec*)" not in compile_rules(perms).deny

    def test_git_write_follows_allowed_operations(self) -> None:
        perms = default_permissions()
        allow = compile_rules(perms).allow
        assert "Bash(git add target/*)" in allow
        assert "Bash(git commit -m *)" in allow
        assert "Bash(git stash)" not in allow

        perms.git.allowed_operations = ["status"]
        allow = compile_rules(perms).allow
        assert "Bash(git status)" in allow
        assert "Bash(git commit -m *)" not in allow

    def test_sensitive_files_are_never_editable(self) -> None:
        deny = compile_rules(default_permissions()).configurable_deny
        for path in (".env*", "**/*.key", "**/*.pem", "**/node_modules/**", "**/.git/**"):
            assert f"Edit({path})" in deny
            assert f"Write({path})" in deny
