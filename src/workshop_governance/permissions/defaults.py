"""Hardcoded fallback permissions and the bundled role templates."""
from __future__ import annotations

from workshop_governance.permissions.model import PermissionSet, WorkspacePermissions

_DEFAULT_PERMISSIONS: dict[str, object] = {
    "fileSystem": {
        "read": ["context/**", "target/**", "feedback/**"],
        "write": ["target/**", "feedback/**"],
        "execute": ["target/**"],
    },
    "git": {
        "allowedOperations": ["diff", "status", "log", "show", "blame", "add", "commit"],
        "protectedBranches": ["main", "master", "production"],
        "requiresApproval": ["push", "branch", "checkout"],
    },
    "external": {
        "allowedHosts": ["api.github.com", "api.openai.com"],
        "apiKeys": {},
    },
    "commands": {
        "allowed": ["ls", "cat", "head", "tail", "grep", "find", "git", "npm", "node"],
        "requiresApproval": ["rm", "rmdir", "mv", "cp", "chmod", "chown"],
        "forbidden": ["sudo", "su", "passwd", "shutdown", "reboot"],
    },
    "systemAccess": {
        "canInstallPackages": False,
        "canModifyEnvironment": False,
        "canAccessNetwork": True,
        "maxResourceUsage": {"memory": 512, "cpu": 50, "disk": 100},
    },
}


def default_permissions() -> WorkspacePermissions:
    """Return a fresh copy of the hardcoded default permissions."""
    return WorkspacePermissions.model_validate(_DEFAULT_PERMISSIONS)


def default_role_templates() -> dict[str, PermissionSet]:
    """Return the developer, reviewer and analyst templates shipped by default."""
    developer = PermissionSet.model_validate(
        {
            **_DEFAULT_PERMISSIONS,
            "name": "developer",
            "description": "Edit code in target/ and report in feedback/",
            "git": {
                "allowedOperations": [
                    "status", "diff", "log", "show", "blame", "add", "commit", "stash", "branch",
                ],
                "protectedBranches": ["main", "master", "production"],
                "requiresApproval": ["push", "checkout"],
            },
        }
    )
    reviewer = PermissionSet.model_validate(
        {
            **_DEFAULT_PERMISSIONS,
            "name": "reviewer",
            "description": "Read everything, write review notes to feedback/ only",
            "fileSystem": {
                "read": ["context/**", "target/**", "feedback/**"],
                "write": ["feedback/**"],
                "execute": [],
            },
            "git": {
                "allowedOperations": ["status", "diff", "log", "show", "blame"],
                "protectedBranches": ["main", "master", "production"],
                "requiresApproval": ["add", "commit", "push", "branch", "checkout"],
            },
            "commands": {
                "allowed": ["ls", "cat", "head", "tail", "grep", "find", "git"],
                "requiresApproval": ["mv", "cp"],
                "forbidden": ["rm", "rmdir", "chmod", "chown", "sudo", "su", "passwd", "shutdown", "reboot"],
            },
        }
    )
    analyst = PermissionSet.model_validate(
        {
            **_DEFAULT_PERMISSIONS,
            "name": "analyst",
            "description": "Read-only code access, findings in feedback/ and analysis/",
            "fileSystem": {
                "read": ["context/**", "target/**", "feedback/**", "analysis/**"],
                "write": ["feedback/**", "analysis/**"],
                "execute": [],
            },
            "git": {
                "allowedOperations": ["status", "diff", "log", "show", "blame"],
                "protectedBranches": ["main", "master", "production"],
                "requiresApproval": ["add", "commit", "push", "branch", "checkout"],
            },
            "systemAccess": {
                "canInstallPackages": False,
                "canModifyEnvironment": False,
                "canAccessNetwork": False,
                "maxResourceUsage": {"memory": 1024, "cpu": 50, "disk": 200},
            },
        }
    )
    return {"developer": developer, "reviewer": reviewer, "analyst": analyst}
