"""CLI entry point for workshop-governance.

Invoked as::

    workshop-gov [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m workshop_governance.cli.main

Commands
--------
- version         Show version information
- generate        Write every document of a workspace
- validate        Check that a workspace has its required documents
- compile         Print the allow/deny rules for a project type
- permissions     Show the resolved permissions of a workspace
- check           Evaluate one tool call against a workspace's rules
- commands list   List the stored user commands
- templates list  List the built-in document templates
- templates export Write a built-in template to a file
"""
from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from workshop_governance.commands.store import CommandStore
from workshop_governance.documents.emitter import DocumentEmitter, DocumentWriteError
from workshop_governance.documents.formatting import format_permissions_for_agent
from workshop_governance.permissions.defaults import default_permissions
from workshop_governance.permissions.resolver import PermissionResolver
from workshop_governance.plugin.config_loader import FileConfigProvider
from workshop_governance.rules.checker import RuleChecker
from workshop_governance.rules.compiler import compile_rules
from workshop_governance.templates.document_templates import list_templates, write_template
from workshop_governance.workspace.context import (
    PROJECT_TYPES,
    WorkspaceContext,
    WorkspaceLayout,
    WorkspacePathError,
)

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("workshop.yaml")
_DEFAULT_STORAGE = Path("storage")
_PROJECT_TYPE_CHOICE = click.Choice(sorted(PROJECT_TYPES))


@dataclass
class _Settings:
    storage: Path
    config: Path
    user_settings: Path | None

    def resolver(self) -> PermissionResolver:
        provider = FileConfigProvider(self.config)
        if self.user_settings is None:
            return PermissionResolver(provider)
        return PermissionResolver(provider, user_settings_path=self.user_settings)

    def emitter(self) -> DocumentEmitter:
        provider = FileConfigProvider(self.config)
        return DocumentEmitter(
            config_provider=provider,
            layout=WorkspaceLayout(self.storage),
            command_store=CommandStore(self.storage / "commands"),
            resolver=self.resolver(),
        )


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="workshop-governance")
@click.option(
    "--storage",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=str(_DEFAULT_STORAGE),
    show_default=True,
    help="Storage root holding workspaces/ and commands/.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    help="Path to the global workshop config (YAML or JSON).",
)
@click.option(
    "--user-settings",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="User settings file to read permission overrides from.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    storage: Path,
    config_path: Path,
    user_settings: Path | None,
    verbose: bool,
) -> None:
    """Workshop Governance CLI: permissions, rules and workspace documents."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )
    ctx.obj = _Settings(storage=storage, config=config_path, user_settings=user_settings)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from workshop_governance import __version__

    console.print(
        Panel(
            f"[bold]workshop-governance[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Workspace policy compiler for agent sessions.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


@cli.command(name="generate")
@click.argument("workspace_id")
@click.option("--project-type", "-t", type=_PROJECT_TYPE_CHOICE, default=None, help="Project type of the workspace.")
@click.option("--description", "-d", default=None, help="Workspace description.")
@click.option(
    "--instruction",
    "-i",
    "instructions",
    multiple=True,
    help="Extra instruction appended to the coding standards. Repeatable.",
)
@click.pass_obj
def generate_command(
    settings: _Settings,
    workspace_id: str,
    project_type: str | None,
    description: str | None,
    instructions: tuple[str, ...],
) -> None:
    """Write every document of a workspace."""
    context = WorkspaceContext(
        workspace_id=workspace_id,
        project_type=project_type,
        description=description,
        custom_instructions=list(instructions),
    )
    try:
        report = settings.emitter().generate_all(workspace_id, context)
    except (DocumentWriteError, WorkspacePathError) as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    console.print(f"[green]Generated[/green] documents for workspace [bold]{workspace_id}[/bold]")
    console.print(f"  Command files: [cyan]{len(report.written)}[/cyan]")
    for failure in report.failures:
        console.print(f"  [yellow]Skipped[/yellow] {failure.keyword!r}: {failure.error}")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("workspace_id")
@click.pass_obj
def validate_command(settings: _Settings, workspace_id: str) -> None:
    """Check that a workspace has all required documents."""
    emitter = settings.emitter()
    try:
        statuses = emitter.document_status(workspace_id)
        valid = emitter.validate_documents(workspace_id)
    except WorkspacePathError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    table = Table(title=f"Documents of {workspace_id}", box=box.SIMPLE)
    table.add_column("File", style="cyan")
    table.add_column("Exists")
    table.add_column("Recent")
    for status in statuses:
        table.add_row(
            status.file,
            "[green]yes[/green]" if status.exists else "[red]no[/red]",
            "[green]yes[/green]" if status.recent else "[yellow]no[/yellow]",
        )
    console.print(table)

    if valid:
        console.print("[green]VALID[/green]")
    else:
        console.print("[red]INVALID[/red]")
    sys.exit(0 if valid else 1)


# ---------------------------------------------------------------------------
# compile
# ---------------------------------------------------------------------------


@cli.command(name="compile")
@click.option(
    "--project-type",
    "-t",
    type=_PROJECT_TYPE_CHOICE,
    default="general",
    show_default=True,
    help="Project type selecting the edit rules.",
)
@click.option(
    "--workspace",
    "-w",
    "workspace_id",
    default=None,
    help="Resolve permissions for this workspace instead of using the defaults.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the rules as JSON.")
@click.pass_obj
def compile_command(settings: _Settings, project_type: str, workspace_id: str | None, as_json: bool) -> None:
    """Print the allow/deny rules compiled for a project type."""
    if workspace_id is None:
        permissions = default_permissions()
    else:
        context = WorkspaceContext(workspace_id=workspace_id, project_type=project_type)
        permissions = settings.resolver().resolve(workspace_id, context)
    rules = compile_rules(permissions, project_type)

    if as_json:
        click.echo(json.dumps(rules.to_settings(), indent=2))
        return

    for title, patterns, style in (
        ("Allow", rules.allow, "green"),
        ("Deny", rules.deny, "red"),
    ):
        table = Table(title=f"{title} ({len(patterns)})", box=box.SIMPLE)
        table.add_column("Pattern", style=style)
        for pattern in patterns:
            table.add_row(pattern)
        console.print(table)


# ---------------------------------------------------------------------------
# permissions
# ---------------------------------------------------------------------------


@cli.command(name="permissions")
@click.argument("workspace_id")
@click.option("--project-type", "-t", type=_PROJECT_TYPE_CHOICE, default=None, help="Project type of the workspace.")
@click.option("--json", "as_json", is_flag=True, help="Print the permissions document as JSON.")
@click.pass_obj
def permissions_command(settings: _Settings, workspace_id: str, project_type: str | None, as_json: bool) -> None:
    """Show the resolved permissions of a workspace."""
    context = WorkspaceContext(workspace_id=workspace_id, project_type=project_type)
    permissions = settings.resolver().resolve(workspace_id, context)
    if as_json:
        click.echo(json.dumps(permissions.to_document(), indent=2))
        return
    console.print(Panel(format_permissions_for_agent(permissions), title=f"Permissions: {workspace_id}", border_style="blue"))


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("workspace_id")
@click.argument("call")
@click.option(
    "--project-type",
    "-t",
    type=_PROJECT_TYPE_CHOICE,
    default="general",
    show_default=True,
    help="Project type selecting the edit rules.",
)
@click.pass_obj
def check_command(settings: _Settings, workspace_id: str, call: str, project_type: str) -> None:
    """Evaluate a tool call such as 'Bash(rm -rf target)' against a workspace's rules."""
    context = WorkspaceContext(workspace_id=workspace_id, project_type=project_type)
    permissions = settings.resolver().resolve(workspace_id, context)
    decision = RuleChecker(compile_rules(permissions, project_type)).check(call)

    status_str = "[green]ALLOWED[/green]" if decision.allowed else "[red]DENIED[/red]"
    console.print(Panel(status_str, title="Rule Check Result", border_style="blue"))
    console.print(f"  Reason: {decision.reason}")
    sys.exit(0 if decision.allowed else 1)


# ---------------------------------------------------------------------------
# commands group
# ---------------------------------------------------------------------------


@cli.group(name="commands")
def commands_group() -> None:
    """User command library."""


@commands_group.command(name="list")
@click.option("--role", "-r", default=None, help="Only show commands for this role.")
@click.pass_obj
def commands_list_command(settings: _Settings, role: str | None) -> None:
    """List the stored user commands."""
    store = CommandStore(settings.storage / "commands")
    store.initialize_storage()
    commands = store.get_commands_by_role(role) if role else store.get_all_commands()

    if not commands:
        console.print("[yellow]No commands found.[/yellow]")
        return

    table = Table(title="User Commands", box=box.SIMPLE)
    table.add_column("Keyword", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Approval")
    table.add_column("Uses", justify="right")
    for command in commands:
        table.add_row(
            f"/{command.keyword}",
            command.name,
            command.category,
            "[yellow]required[/yellow]" if command.requires_approval else "-",
            str(command.usage_count),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# templates group
# ---------------------------------------------------------------------------


@cli.group(name="templates")
def templates_group() -> None:
    """Built-in document templates."""


@templates_group.command(name="list")
def templates_list_command() -> None:
    """List the built-in document templates."""
    for name in list_templates():
        console.print(f"  [cyan]{name}[/cyan]")


@templates_group.command(name="export")
@click.argument("name", type=click.Choice(list_templates()))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def templates_export_command(name: str, output: Path) -> None:
    """Write a built-in template to OUTPUT so it can be customised."""
    path = write_template(name, output)
    console.print(f"[green]Exported[/green] template [bold]{name}[/bold] to [bold]{path}[/bold]")


if __name__ == "__main__":
    cli()
