"""``{{NAME}}`` placeholder substitution.

Plain global string replacement over a fixed set of variables: no escaping,
no nesting and no conditionals.  Placeholders without a value are left in
place.

Example
-------
>>> substitute("Hello {{NAME}}, bye {{NAME}}", {"NAME": "ws-1"})
'Hello ws-1, bye ws-1'
>>> find_placeholders("{{A}} and {{B}}")
['A', 'B']
"""
from __future__ import annotations

import re
from typing import Mapping

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


def placeholder(name: str) -> str:
    return "{{" + name + "}}"


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every ``{{KEY}}`` occurrence with ``variables[KEY]``."""
    content = template
    for key, value in variables.items():
        content = content.replace(placeholder(key), value)
    return content


def find_placeholders(text: str) -> list[str]:
    """Return the distinct placeholder names still present in ``text``, in order."""
    seen: list[str] = []
    for name in _PLACEHOLDER_RE.findall(text):
        if name not in seen:
            seen.append(name)
    return seen
