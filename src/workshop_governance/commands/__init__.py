"""User commands: model, built-in library and JSON storage."""
from __future__ import annotations

from workshop_governance.commands.library import seed_commands
from workshop_governance.commands.model import (
    REPLY_COMMAND_IDS,
    STARTUP_COMMAND_IDS,
    UserCommand,
)
from workshop_governance.commands.store import CommandStore, CommandStoreError, infer_roles

__all__ = [
    "REPLY_COMMAND_IDS",
    "STARTUP_COMMAND_IDS",
    "CommandStore",
    "CommandStoreError",
    "UserCommand",
    "infer_roles",
    "seed_commands",
]
