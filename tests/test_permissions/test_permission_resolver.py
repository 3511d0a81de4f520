"""Tests for PermissionResolver and native allow-list derivation."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from workshop_governance.permissions.defaults import (
    default_permissions,
    default_role_templates,
)
from workshop_governance.permissions.resolver import (
    PermissionResolver,
    derive_from_native_allow_list,
    role_for_project_type,
)
from workshop_governance.plugin.config_loader import (
    GlobalConfig,
    PermissionsConfig,
    StaticConfigProvider,
)
from workshop_governance.workspace.context import WorkspaceContext


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

class _FailingProvider:
    def load_config(self) -> GlobalConfig:
        raise RuntimeError("config service unavailable")


@pytest.fixture()
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


def _write_settings(path: Path, data: object) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def _resolver(settings_path: Path, provider: object | None = None) -> PermissionResolver:
    return PermissionResolver(provider or StaticConfigProvider(), user_settings_path=settings_path)


def _review(workspace_id: str = "ws-1") -> WorkspaceContext:
    return WorkspaceContext(workspace_id=workspace_id, project_type="review")


# ---------------------------------------------------------------------------
# role_for_project_type
# ---------------------------------------------------------------------------

class TestRoleForProjectType:
    @pytest.mark.parametrize(
        "project_type, role",
        [
            ("review", "reviewer"),
            ("analysis", "analyst"),
            ("development", "developer"),
            ("general", "developer"),
            ("something-else", "developer"),
            (None, "developer"),
        ],
    )
    def test_mapping(self, project_type: str | None, role: str) -> None:
        assert role_for_project_type(project_type) == role


# ---------------------------------------------------------------------------
# Resolution tiers
# ---------------------------------------------------------------------------

class TestResolverOverride:
    def test_override_wins_over_everything(self, settings_path: Path) -> None:
        _write_settings(
            settings_path,
            {
                "workspacePermissions": {"fileSystem": {"read": ["context/**"], "write": []}},
                "permissions": {"allow": ["Bash(make)"]},
            },
        )
        perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.read == ["context/**"]
        assert perms.file_system.write == []

    def test_override_gaps_are_filled(self, settings_path: Path) -> None:
        _write_settings(settings_path, {"workspacePermissions": {}})
        perms = _resolver(settings_path).resolve("ws-1")
        assert perms.system_access.max_resource_usage.disk == 100

    def test_invalid_override_falls_through(
        self, settings_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_settings(settings_path, {"workspacePermissions": {"fileSystem": "nope"}})
        with caplog.at_level(logging.WARNING):
            perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms == default_role_templates()["reviewer"].to_workspace_permissions()
        assert "Invalid workspacePermissions" in caplog.text


class TestResolverNativeSettings:
    def test_native_allow_list_is_derived(self, settings_path: Path) -> None:
        _write_settings(settings_path, {"permissions": {"allow": ["Bash(make build)", "Edit(src/**)"]}})
        perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.commands.allowed == ["make"]
        assert perms.file_system.write == ["src/**"]

    def test_empty_allow_list_falls_through(self, settings_path: Path) -> None:
        _write_settings(settings_path, {"permissions": {"allow": []}})
        perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.write == ["feedback/**"]

    def test_non_string_entries_fall_through(self, settings_path: Path) -> None:
        _write_settings(settings_path, {"permissions": {"allow": ["Bash(ls)", 3]}})
        perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.write == ["feedback/**"]


class TestResolverFallthrough:
    def test_review_returns_reviewer_template(self, settings_path: Path) -> None:
        perms = _resolver(settings_path).resolve("ws-1", _review())
        expected = default_role_templates()["reviewer"].to_workspace_permissions()
        assert perms == expected
        assert perms != default_permissions()

    def test_analysis_returns_analyst_template(self, settings_path: Path) -> None:
        context = WorkspaceContext(workspace_id="ws-1", project_type="analysis")
        perms = _resolver(settings_path).resolve("ws-1", context)
        assert perms.system_access.can_access_network is False

    def test_no_context_uses_developer_template(self, settings_path: Path) -> None:
        perms = _resolver(settings_path).resolve("ws-1")
        assert "stash" in perms.git.allowed_operations

    def test_missing_template_falls_back_to_default(self, settings_path: Path) -> None:
        config = GlobalConfig(permissions=PermissionsConfig(templates={}))
        perms = _resolver(settings_path, StaticConfigProvider(config)).resolve("ws-1", _review())
        assert perms == default_permissions()

    def test_corrupt_settings_file_is_ignored(
        self, settings_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings_path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.write == ["feedback/**"]
        assert "Failed to read user settings" in caplog.text

    def test_undecodable_settings_file_is_ignored(
        self, settings_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings_path.write_bytes(b'{"x": "\xff\xfe"}')
        with caplog.at_level(logging.WARNING):
            perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.write == ["feedback/**"]
        assert "Failed to read user settings" in caplog.text

    def test_non_object_settings_file_is_ignored(self, settings_path: Path) -> None:
        _write_settings(settings_path, ["not", "an", "object"])
        perms = _resolver(settings_path).resolve("ws-1", _review())
        assert perms.file_system.write == ["feedback/**"]

    def test_failing_config_provider_yields_default(
        self, settings_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            perms = _resolver(settings_path, _FailingProvider()).resolve("ws-1", _review())
        assert perms == default_permissions()
        assert "config service unavailable" in caplog.text


# ---------------------------------------------------------------------------
# derive_from_native_allow_list
# ---------------------------------------------------------------------------

class TestDeriveFromNativeAllowList:
    def test_bash_first_word_becomes_command(self) -> None:
        perms = derive_from_native_allow_list(["Bash(npm run test)", "Bash(ls *)", "Bash(npm install)"])
        assert perms.commands.allowed == ["npm", "ls"]

    def test_git_operations_are_collected(self) -> None:
        perms = derive_from_native_allow_list(["Bash(git status)", "Bash(git diff *)", "Bash(git *)"])
        assert perms.git.allowed_operations == ["status", "diff"]

    def test_read_and_edit_scopes(self) -> None:
        perms = derive_from_native_allow_list(
            ["Read(docs/**)", "Edit(src/**)", "Write(src/**)", "MultiEdit(lib/**)"]
        )
        assert perms.file_system.read == ["docs/**"]
        assert perms.file_system.write == ["src/**", "lib/**"]

    def test_execute_requires_chmod(self) -> None:
        assert derive_from_native_allow_list(["Bash(ls)"]).file_system.execute == []
        assert derive_from_native_allow_list(["Bash(chmod +x run.sh)"]).file_system.execute == ["target/**"]

    def test_install_marker_enables_packages(self) -> None:
        assert derive_from_native_allow_list(["Bash(pip install *)"]).system_access.can_install_packages
        assert not derive_from_native_allow_list(["Bash(pip list)"]).system_access.can_install_packages

    def test_network_follows_web_tools_and_commands(self) -> None:
        assert not derive_from_native_allow_list(["Bash(ls)"]).system_access.can_access_network
        assert derive_from_native_allow_list(["WebFetch"]).system_access.can_access_network
        assert derive_from_native_allow_list(["Bash(curl *)"]).system_access.can_access_network

    def test_unmentioned_fields_keep_defaults(self) -> None:
        perms = derive_from_native_allow_list(["Bash(ls)"])
        defaults = default_permissions()
        assert perms.file_system.read == defaults.file_system.read
        assert perms.git.protected_branches == defaults.git.protected_branches
        assert perms.commands.forbidden == defaults.commands.forbidden

    def test_unparseable_entries_are_skipped(self) -> None:
        perms = derive_from_native_allow_list(["((", "Bash(make)"])
        assert perms.commands.allowed == ["make"]
