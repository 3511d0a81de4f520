"""Ordered, append-only construction of a compiled rule set.

Rules are appended in four named phases that must be entered in order::

    BASE_ALLOW -> CONFIGURABLE_ALLOW -> BASE_DENY -> CONFIGURABLE_DENY

Going back to an earlier phase raises :class:`RuleOrderError`, so the
"base rules first" property of the output is enforced by construction rather
than by the order of statements in the compiler.

Example
-------
>>> builder = RuleSetBuilder()
>>> builder.extend(RulePhase.BASE_ALLOW, ["Read(target/**)"])
>>> builder.extend(RulePhase.BASE_DENY, ["Read(../**)"])
>>> rules = builder.build()
>>> rules.allow, rules.deny
(('Read(target/**)',), ('Read(../**)',))
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from workshop_governance.rules.patterns import escapes_workspace

logger = logging.getLogger(__name__)


class RuleOrderError(ValueError):
    """Raised when rules are appended to a phase that has already closed."""


class ScopeEscapeError(ValueError):
    """Raised when an allow rule would reach outside the workspace subtree.

    Attributes
    ----------
    pattern:
        The offending capability pattern.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"Allow rule {pattern!r} addresses a path outside the workspace.")


class RulePhase(IntEnum):
    """Construction phases, in their required order."""

    BASE_ALLOW = 0
    CONFIGURABLE_ALLOW = 1
    BASE_DENY = 2
    CONFIGURABLE_DENY = 3

    @property
    def is_allow(self) -> bool:
        return self in (RulePhase.BASE_ALLOW, RulePhase.CONFIGURABLE_ALLOW)


@dataclass(frozen=True)
class CompiledRuleSet:
    """Immutable output of the rule compiler.

    Attributes
    ----------
    allow:
        Allow patterns; the base-security block comes first.
    deny:
        Deny patterns; the base-security block comes first.
    base_allow_count:
        Number of leading ``allow`` entries that came from the base phase.
    base_deny_count:
        Number of leading ``deny`` entries that came from the base phase.
    """

    allow: tuple[str, ...]
    deny: tuple[str, ...]
    base_allow_count: int = 0
    base_deny_count: int = 0

    @property
    def base_allow(self) -> tuple[str, ...]:
        return self.allow[: self.base_allow_count]

    @property
    def configurable_allow(self) -> tuple[str, ...]:
        return self.allow[self.base_allow_count:]

    @property
    def base_deny(self) -> tuple[str, ...]:
        return self.deny[: self.base_deny_count]

    @property
    def configurable_deny(self) -> tuple[str, ...]:
        return self.deny[self.base_deny_count:]

    def to_settings(self) -> dict[str, list[str]]:
        """Return the ``permissions`` block of the agent settings file."""
        return {"allow": list(self.allow), "deny": list(self.deny)}


class RuleSetBuilder:
    """Collects rules phase by phase and freezes them into a :class:`CompiledRuleSet`.

    Duplicate patterns within one list are dropped, keeping the first
    occurrence, so a configurable rule never displaces a base rule.  Allow
    rules whose scope escapes the workspace are rejected.
    """

    def __init__(self) -> None:
        self._phase = RulePhase.BASE_ALLOW
        self._allow: list[str] = []
        self._deny: list[str] = []
        self._seen_allow: set[str] = set()
        self._seen_deny: set[str] = set()
        self._counts: dict[RulePhase, int] = {phase: 0 for phase in RulePhase}

    @property
    def phase(self) -> RulePhase:
        return self._phase

    def add(self, phase: RulePhase, pattern: str) -> None:
        """Append one pattern to ``phase``.

        Raises
        ------
        RuleOrderError
            If a later phase has already received rules.
        ScopeEscapeError
            If an allow pattern addresses a path outside the workspace.
        """
        if phase < self._phase:
            raise RuleOrderError(
                f"Cannot add to {phase.name} after {self._phase.name} has started."
            )
        self._phase = phase

        if phase.is_allow:
            if escapes_workspace(pattern):
                raise ScopeEscapeError(pattern)
            target, seen = self._allow, self._seen_allow
        else:
            target, seen = self._deny, self._seen_deny

        if pattern in seen:
            logger.debug("Dropping duplicate %s rule %s", phase.name, pattern)
            return
        seen.add(pattern)
        target.append(pattern)
        self._counts[phase] += 1

    def extend(self, phase: RulePhase, patterns: Iterable[str]) -> None:
        for pattern in patterns:
            self.add(phase, pattern)

    def build(self) -> CompiledRuleSet:
        return CompiledRuleSet(
            allow=tuple(self._allow),
            deny=tuple(self._deny),
            base_allow_count=self._counts[RulePhase.BASE_ALLOW],
            base_deny_count=self._counts[RulePhase.BASE_DENY],
        )
