"""Capability pattern micro-grammar.

A capability pattern is either a bare tool name (``"TodoWrite"``) or a tool
name with a scope expression (``"Read(target/**)"``, ``"Bash(git diff *)"``).
"""
from __future__ import annotations

import re

_CAPABILITY_RE = re.compile(r"^\s*(?P<name>[A-Za-z][A-Za-z0-9_]*)\s*(?:\((?P<scope>.*)\))?\s*$")


def parse_capability(pattern: str) -> tuple[str, str | None] | None:
    """Split ``"Bash(git status)"`` into ``("Bash", "git status")``.

    Returns ``None`` when the string is not a capability pattern.
    """
    match = _CAPABILITY_RE.match(pattern)
    if match is None:
        return None
    scope = match.group("scope")
    return match.group("name"), scope.strip() if scope is not None else None


def capability(name: str, scope: str | None = None) -> str:
    """Format a capability pattern."""
    return name if scope is None else f"{name}({scope})"


def escapes_workspace(pattern: str) -> bool:
    """Return True if the pattern's scope can address a path outside the workspace.

    A scope escapes when any of its whitespace-separated words is a parent
    reference (``..`` as a path segment), an absolute path, or a home-relative
    path.  Bare capabilities never escape.
    """
    parsed = parse_capability(pattern)
    if parsed is None:
        return True
    _, scope = parsed
    if scope is None:
        return False
    for word in scope.split():
        if word.startswith(("/", "~", "$HOME")):
            return True
        if ".." in word.split("/"):
            return True
    return False


def find_scope_escapes(patterns: list[str] | tuple[str, ...]) -> list[str]:
    """Return the patterns for which :func:`escapes_workspace` is true."""
    return [p for p in patterns if escapes_workspace(p)]
