"""Document template library for workshop-governance.

Provides the built-in ``CLAUDE.md``, ``permissions.json`` and
``commands.json`` templates used when the global config does not override them.
"""
from __future__ import annotations

from workshop_governance.templates.document_templates import (
    TEMPLATES,
    get_template,
    list_templates,
    write_template,
)

__all__ = [
    "TEMPLATES",
    "get_template",
    "list_templates",
    "write_template",
]
