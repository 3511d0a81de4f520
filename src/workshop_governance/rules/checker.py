"""Evaluates concrete tool calls against a compiled rule set.

Deny is authoritative: a call matching any deny pattern is refused even when
an allow pattern matches too.  A call matching nothing is refused as well.
Calls whose arguments leave the workspace (parent segments, absolute or
home-relative paths) are refused before any pattern is consulted.

Scopes are matched with :mod:`fnmatch`, so ``*`` also crosses ``/``.  A
pattern without a scope (``"TodoWrite"``) matches every call of that tool.

Example
-------
::

    checker = RuleChecker(compile_rules(default_permissions(), "general"))
    assert checker.check("Read(target/src/app.py)").allowed
    assert not checker.check("Bash(rm -rf target)").allowed
"""
from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass

from workshop_governance.rules.builder import CompiledRuleSet
from workshop_governance.rules.patterns import escapes_workspace, parse_capability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleDecision:
    """Immutable result of a rule check.

    Attributes
    ----------
    allowed:
        Whether the call is permitted.
    reason:
        Human-readable explanation of the decision.
    call:
        The call that was evaluated.
    matched_pattern:
        The pattern that decided the outcome, or ``None`` for default deny.
    """

    allowed: bool
    reason: str
    call: str
    matched_pattern: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


def pattern_matches(pattern: str, tool: str, argument: str | None) -> bool:
    """Return True if ``pattern`` covers a call of ``tool`` with ``argument``."""
    parsed = parse_capability(pattern)
    if parsed is None:
        return False
    name, scope = parsed
    if name != tool:
        return False
    if scope is None:
        return True
    if argument is None:
        return False
    return fnmatch.fnmatchcase(argument, scope)


class RuleChecker:
    """Checks tool calls against a :class:`CompiledRuleSet`."""

    def __init__(self, rules: CompiledRuleSet) -> None:
        self._rules = rules

    @property
    def rules(self) -> CompiledRuleSet:
        return self._rules

    def check(self, call: str) -> RuleDecision:
        """Evaluate a call written as ``"Tool(argument)"`` or ``"Tool"``."""
        parsed = parse_capability(call)
        if parsed is None:
            return RuleDecision(False, f"Unrecognised tool call {call!r}.", call)
        tool, argument = parsed
        return self.check_tool(tool, argument)

    def check_tool(self, tool: str, argument: str | None = None) -> RuleDecision:
        """Evaluate a call of ``tool`` with an optional argument string."""
        call = tool if argument is None else f"{tool}({argument})"

        # "target/../../etc" would otherwise match "target/**".
        if escapes_workspace(call):
            logger.debug("Rule DENY: call=%s escapes the workspace", call)
            return RuleDecision(False, f"{call} addresses a path outside the workspace.", call)

        for pattern in self._rules.deny:
            if pattern_matches(pattern, tool, argument):
                logger.debug("Rule DENY: call=%s pattern=%s", call, pattern)
                return RuleDecision(False, f"Denied by {pattern}.", call, pattern)

        for pattern in self._rules.allow:
            if pattern_matches(pattern, tool, argument):
                logger.debug("Rule ALLOW: call=%s pattern=%s", call, pattern)
                return RuleDecision(True, f"Allowed by {pattern}.", call, pattern)

        logger.debug("Rule DEFAULT-DENY: call=%s", call)
        return RuleDecision(False, f"No rule allows {call}.", call)

    def check_all(self, calls: list[str]) -> list[RuleDecision]:
        """Evaluate several calls, preserving order."""
        return [self.check(call) for call in calls]
