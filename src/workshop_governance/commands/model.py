"""Agent-invocable command model.

A ``UserCommand`` is a named prompt template that the agent runs when the user
types ``/<keyword>``.  The on-disk shape uses snake_case keys.
"""
from __future__ import annotations

import re

from pydantic import BaseModel, Field

_HEADING_MARKER = re.compile(r"^#\s*")

# Command ids grouped into the two built-in invocation modes.
STARTUP_COMMAND_IDS: tuple[str, ...] = ("investigate", "analyze", "plan", "setup")
REPLY_COMMAND_IDS: tuple[str, ...] = ("implement", "debug", "review", "test", "explain", "continue")


class UserCommand(BaseModel):
    """A slash command with its prompt, approval flag and usage statistics."""

    model_config = {"extra": "allow"}

    id: str
    name: str
    keyword: str
    category: str = Field(default="general")
    base_prompt: str = Field(default="")
    context_adaptations: dict[str, str] = Field(default_factory=dict)
    requires_approval: bool = Field(default=False)
    estimated_duration: str = Field(default="")
    follow_up_commands: list[str] = Field(default_factory=list)
    usage_count: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    average_completion_time_ms: float = Field(default=0.0, ge=0.0)
    required_permissions: list[str] = Field(default_factory=list)
    user_modified: bool = Field(default=False)
    custom_prompt_additions: list[str] | None = Field(default=None)
    custom_additions: list[str] | None = Field(default=None)
    roles: list[str] = Field(default_factory=list)
    is_default: bool = Field(default=False)
    created_at: str | None = Field(default=None)
    updated_at: str | None = Field(default=None)

    @property
    def summary_line(self) -> str:
        """First line of the prompt with any leading markdown heading marker removed."""
        return _HEADING_MARKER.sub("", self.base_prompt.split("\n", 1)[0])
