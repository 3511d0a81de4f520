"""Compilation of workspace permissions into agent capability rules.

Example
-------
::

    from workshop_governance.permissions import default_permissions
    from workshop_governance.rules import RuleChecker, compile_rules

    rules = compile_rules(default_permissions(), "development")
    checker = RuleChecker(rules)
    assert checker.check("Edit(target/app.py)").allowed
    assert not checker.check("Read(/etc/passwd)").allowed
"""
from __future__ import annotations

from workshop_governance.rules.patterns import (
    capability,
    escapes_workspace,
    find_scope_escapes,
    parse_capability,
)
from workshop_governance.rules.base_security import (
    BASE_ALLOW,
    BASE_DENY,
    DESTRUCTIVE_COMMANDS,
    SYSTEM_PATHS,
)
from workshop_governance.rules.builder import (
    CompiledRuleSet,
    RuleOrderError,
    RulePhase,
    RuleSetBuilder,
    ScopeEscapeError,
)
from workshop_governance.rules.compiler import NETWORK_COMMANDS, compile_rules
from workshop_governance.rules.checker import RuleChecker, RuleDecision

__all__ = [
    # Patterns
    "capability",
    "escapes_workspace",
    "find_scope_escapes",
    "parse_capability",
    # Base security
    "BASE_ALLOW",
    "BASE_DENY",
    "DESTRUCTIVE_COMMANDS",
    "SYSTEM_PATHS",
    # Builder
    "CompiledRuleSet",
    "RuleOrderError",
    "RulePhase",
    "RuleSetBuilder",
    "ScopeEscapeError",
    # Compiler
    "NETWORK_COMMANDS",
    "compile_rules",
    # Checker
    "RuleChecker",
    "RuleDecision",
]
