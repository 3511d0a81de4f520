"""JSON-backed storage for user commands.

All commands live in a single ``user-commands.json`` file::

    {
      "commands": [...],
      "categories": ["analysis", "development", ...],
      "version": "1.0.0",
      "last_updated": "2026-01-01T00:00:00+00:00"
    }

A missing file is seeded with the default library on
:meth:`CommandStore.initialize_storage`.  Commands flagged ``is_default`` can
be edited but never deleted.

Example
-------
>>> store = CommandStore(Path("/tmp/commands"))
>>> store.initialize_storage()
>>> [c.keyword for c in store.get_commands_by_mode("startup")]
['investigate', 'analyze', 'plan']
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from workshop_governance.commands.library import seed_commands
from workshop_governance.commands.model import (
    REPLY_COMMAND_IDS,
    STARTUP_COMMAND_IDS,
    UserCommand,
)

logger = logging.getLogger(__name__)

STORAGE_VERSION: str = "1.0.0"
DEFAULT_CATEGORIES: tuple[str, ...] = ("analysis", "development", "testing", "documentation", "planning")


class CommandStoreError(RuntimeError):
    """Raised when a command cannot be saved or deleted."""


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def infer_roles(command: UserCommand) -> list[str]:
    """Guess the roles for a command stored before roles existed."""
    if command.id.startswith("dev_") or command.keyword in ("implement", "debug"):
        return ["developer"]
    if command.id.startswith("review_") or command.keyword == "review":
        return ["reviewer"]
    if command.id.startswith("test_") or command.keyword == "test":
        return ["tester"]
    if command.id.startswith("plan_") or command.keyword == "plan":
        return ["planner"]
    if command.keyword in ("investigate", "analyze"):
        return ["developer", "reviewer", "tester", "planner"]
    return ["developer"]


class CommandStore:
    """Reads and writes user commands under ``storage_dir``.

    Parameters
    ----------
    storage_dir:
        Directory holding ``user-commands.json``.  Created on demand.
    """

    FILE_NAME: str = "user-commands.json"

    def __init__(self, storage_dir: Path) -> None:
        self._storage_dir = Path(storage_dir)
        self._commands_file = self._storage_dir / self.FILE_NAME

    @property
    def commands_file(self) -> Path:
        return self._commands_file

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize_storage(self) -> None:
        """Create the storage file with seed commands, or migrate an existing one.

        Raises
        ------
        OSError
            If the storage directory or file cannot be written.
        """
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        if self._commands_file.exists():
            self.migrate_existing_commands()
        else:
            self.seed_default_commands()

    def seed_default_commands(self) -> None:
        """Overwrite the storage file with the default command library."""
        commands = seed_commands(_now())
        self._write(commands, list(DEFAULT_CATEGORIES))
        logger.info("Seeded %d default commands into %s", len(commands), self._commands_file)

    def migrate_existing_commands(self) -> None:
        """Assign roles to stored commands that have none."""
        storage = self._load_storage()
        commands = self._parse_commands(storage)
        changed = False
        for command in commands:
            if not command.roles:
                command.roles = infer_roles(command)
                command.updated_at = _now()
                changed = True
        if changed:
            self._write(commands, self._categories(storage))
            logger.info("Migrated stored commands with inferred roles")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_commands(self) -> list[UserCommand]:
        """Return every stored command, or an empty list when storage is unreadable."""
        try:
            raw = json.loads(self._commands_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to load commands from %s: %s", self._commands_file, exc)
            return []
        return self._parse_commands(raw)

    def get_command(self, command_id: str) -> UserCommand | None:
        return next((c for c in self.get_all_commands() if c.id == command_id), None)

    def get_commands_by_role(self, role: str) -> list[UserCommand]:
        return [
            c for c in self.get_all_commands()
            if role in c.roles or c.id.startswith(f"{role}_")
        ]

    def get_commands_by_mode(self, mode: Literal["startup", "reply"]) -> list[UserCommand]:
        keywords = STARTUP_COMMAND_IDS if mode == "startup" else REPLY_COMMAND_IDS
        return [c for c in self.get_all_commands() if c.keyword in keywords]

    def get_commands_by_category(self, category: str) -> list[UserCommand]:
        return [c for c in self.get_all_commands() if c.category == category]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save_command(self, command: UserCommand) -> UserCommand:
        """Insert or update a command by id and return the stored version."""
        storage = self._load_storage()
        commands = self._parse_commands(storage)
        now = _now()
        stored = command.model_copy(update={"updated_at": now})
        for index, existing in enumerate(commands):
            if existing.id == command.id:
                commands[index] = stored
                break
        else:
            stored = stored.model_copy(update={"created_at": now})
            commands.append(stored)
        self._write(commands, self._categories(storage))
        return stored

    def delete_command(self, command_id: str) -> None:
        """Delete a user command.

        Raises
        ------
        CommandStoreError
            If the command does not exist or is one of the default commands.
        """
        storage = self._load_storage()
        commands = self._parse_commands(storage)
        target = next((c for c in commands if c.id == command_id), None)
        if target is None:
            raise CommandStoreError(f"Command {command_id!r} not found.")
        if target.is_default:
            raise CommandStoreError(f"Default command {command_id!r} cannot be deleted.")
        remaining = [c for c in commands if c.id != command_id]
        self._write(remaining, self._categories(storage))

    def record_usage(self, command_id: str, success: bool, duration_ms: float) -> UserCommand:
        """Fold one run into the command's usage statistics.

        ``success_rate`` and ``average_completion_time_ms`` are running means
        over ``usage_count`` runs.
        """
        command = self.get_command(command_id)
        if command is None:
            raise CommandStoreError(f"Command {command_id!r} not found.")
        count = command.usage_count + 1
        updated = command.model_copy(
            update={
                "usage_count": count,
                "success_rate": (command.success_rate * command.usage_count + (1.0 if success else 0.0)) / count,
                "average_completion_time_ms": (
                    command.average_completion_time_ms * command.usage_count + duration_ms
                ) / count,
            }
        )
        return self.save_command(updated)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load_storage(self) -> dict[str, object]:
        try:
            raw = json.loads(self._commands_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {"commands": [], "categories": [], "version": STORAGE_VERSION}
        return raw if isinstance(raw, dict) else {"commands": []}

    def _parse_commands(self, storage: object) -> list[UserCommand]:
        raw_commands = storage.get("commands") if isinstance(storage, dict) else None
        if raw_commands is None:
            return []
        if not isinstance(raw_commands, list):
            logger.warning("Stored commands in %s are not a list, ignoring", self._commands_file)
            return []
        commands: list[UserCommand] = []
        for index, raw in enumerate(raw_commands):
            try:
                commands.append(UserCommand.model_validate(raw))
            except ValidationError as exc:
                logger.warning("Skipping invalid stored command at index %d: %s", index, exc)
        return commands

    def _categories(self, storage: dict[str, object]) -> list[str]:
        categories = storage.get("categories")
        if isinstance(categories, list) and categories:
            return [str(c) for c in categories]
        return list(DEFAULT_CATEGORIES)

    def _write(self, commands: list[UserCommand], categories: list[str]) -> None:
        payload = {
            "commands": [c.model_dump(exclude_none=True) for c in commands],
            "categories": categories,
            "version": STORAGE_VERSION,
            "last_updated": _now(),
        }
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self._commands_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")
