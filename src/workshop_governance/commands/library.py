"""Seed commands written to a fresh command store.

Prompts are deliberately short; users customise them through the UI.
"""
from __future__ import annotations

from workshop_governance.commands.model import UserCommand

_SEED_COMMANDS: list[dict[str, object]] = [
    {
        "id": "investigate",
        "name": "Investigate Workspace",
        "keyword": "investigate",
        "category": "analysis",
        "base_prompt": (
            "# Workspace Investigation\n"
            "Survey the workspace: structure, context files, open issues and next steps."
        ),
        "context_adaptations": {"git": "Focus on recent commits", "jira": "Link to relevant tickets"},
        "estimated_duration": "10-15 minutes",
        "follow_up_commands": ["implement", "plan", "review"],
        "required_permissions": ["read_context", "read_target", "git_access"],
        "roles": ["developer", "reviewer", "tester", "planner"],
    },
    {
        "id": "analyze",
        "name": "Code Analysis",
        "keyword": "analyze",
        "category": "analysis",
        "base_prompt": (
            "# Code Analysis\n"
            "Assess architecture, code quality, performance and security of target/."
        ),
        "context_adaptations": {"git": "Analyze recent changes", "jira": "Reference analysis tickets"},
        "estimated_duration": "15-25 minutes",
        "follow_up_commands": ["implement", "review", "test"],
        "required_permissions": ["read_context", "read_target", "git_access"],
        "roles": ["developer", "reviewer", "tester"],
    },
    {
        "id": "plan",
        "name": "Create Plan",
        "keyword": "plan",
        "category": "planning",
        "base_prompt": "# Development Plan\nBreak the work down into ordered, reviewable tasks.",
        "context_adaptations": {"jira": "Base the plan on ticket priorities"},
        "estimated_duration": "15-20 minutes",
        "follow_up_commands": ["implement"],
        "required_permissions": ["read_context", "read_target"],
        "roles": ["planner", "developer"],
    },
    {
        "id": "implement",
        "name": "Implement Feature",
        "keyword": "implement",
        "category": "development",
        "base_prompt": "# Feature Implementation\nImplement the requested change in target/ with tests.",
        "context_adaptations": {"jira": "Reference ticket requirements", "git": "Follow branching strategy"},
        "estimated_duration": "30-45 minutes",
        "follow_up_commands": ["test", "review"],
        "required_permissions": ["read_context", "write_target", "git_access"],
        "roles": ["developer"],
    },
    {
        "id": "debug",
        "name": "Debug Issue",
        "keyword": "debug",
        "category": "development",
        "base_prompt": "# Debug Investigation\nReproduce the issue, find the root cause and fix it.",
        "context_adaptations": {"git": "Check recent changes"},
        "estimated_duration": "20-30 minutes",
        "follow_up_commands": ["test", "review"],
        "required_permissions": ["read_context", "write_target", "git_access"],
        "roles": ["developer"],
    },
    {
        "id": "review",
        "name": "Code Review",
        "keyword": "review",
        "category": "analysis",
        "base_prompt": "# Code Review\nReview the pending changes and write findings to feedback/.",
        "context_adaptations": {"git": "Review the current diff"},
        "estimated_duration": "15-20 minutes",
        "follow_up_commands": ["implement"],
        "required_permissions": ["read_target", "write_feedback", "git_access"],
        "roles": ["reviewer"],
    },
    {
        "id": "test",
        "name": "Write Tests",
        "keyword": "test",
        "category": "testing",
        "base_prompt": "# Test Coverage\nAdd or extend tests for the changed behaviour.",
        "estimated_duration": "20-30 minutes",
        "follow_up_commands": ["review"],
        "required_permissions": ["read_target", "write_target"],
        "roles": ["tester", "developer"],
    },
]


def seed_commands(timestamp: str) -> list[UserCommand]:
    """Return the default command set stamped with ``timestamp``."""
    return [
        UserCommand.model_validate(
            {**raw, "is_default": True, "created_at": timestamp, "updated_at": timestamp}
        )
        for raw in _SEED_COMMANDS
    ]
