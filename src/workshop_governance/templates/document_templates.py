"""Built-in templates for the generated workspace documents.

Three templates are bundled: the ``CLAUDE.md`` instructions document and the
two legacy JSON artifacts (``permissions.json`` and ``commands.json``).  They
use ``{{NAME}}`` placeholders filled by
:func:`workshop_governance.documents.templating.substitute`.

Example
-------
>>> from workshop_governance.templates.document_templates import get_template, list_templates
>>> list_templates()
['claude_md', 'commands', 'permissions']
>>> "{{PERMISSIONS_JSON}}" in get_template("permissions")
True
"""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Template definitions
# ---------------------------------------------------------------------------

_CLAUDE_MD = """\
# Workspace Instructions

{{WORKSPACE_DESCRIPTION}}

## Current Task

{{CURRENT_TASK}}

## Workspace Layout

- `context/`: reference material (read only)
- `target/`: the code you are working on
- `feedback/`: status reports, notes and review findings
- `agents/`: per-agent scratch data

Never access files outside this workspace and always use paths relative to
the workspace root.

## Permissions

{{PERMISSIONS_SUMMARY}}

## Available Commands
{{COMMANDS_LIST}}

## Context Files

{{CONTEXT_FILES}}

## Coding Standards

{{CODING_STANDARDS}}

---
Workspace: {{WORKSPACE_ID}}
Generated: {{TIMESTAMP}}
"""

_PERMISSIONS_JSON = """\
{
  "workspaceId": "{{WORKSPACE_ID}}",
  "version": "1.0",
  "generated": "{{TIMESTAMP}}",
  "permissions": {{PERMISSIONS_JSON}}
}
"""

_COMMANDS_JSON = """\
{
  "workspaceId": "{{WORKSPACE_ID}}",
  "version": "1.0",
  "generated": "{{TIMESTAMP}}",
  "commands": {{COMMANDS_JSON}},
  "hotKeys": {{HOTKEYS_JSON}}
}
"""

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

TEMPLATES: dict[str, str] = {
    "claude_md": _CLAUDE_MD,
    "permissions": _PERMISSIONS_JSON,
    "commands": _COMMANDS_JSON,
}


def get_template(name: str) -> str:
    """Return the text of a built-in document template.

    Raises
    ------
    KeyError
        If no template with the given name is registered.
    """
    if name not in TEMPLATES:
        available = ", ".join(sorted(TEMPLATES))
        raise KeyError(
            f"Template {name!r} not found. Available templates: {available}."
        )
    return TEMPLATES[name]


def list_templates() -> list[str]:
    """Return a sorted list of all built-in template names."""
    return sorted(TEMPLATES)


def write_template(name: str, output_path: Path) -> Path:
    """Write a built-in template to a file so it can be customised.

    Parent directories are created automatically if they do not exist.

    Returns
    -------
    Path
        The absolute path of the written file.

    Raises
    ------
    KeyError
        If no template with the given name is registered.
    """
    content = get_template(name)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    return output_path.resolve()
