"""lwb env commands - function environment variables."""

from pathlib import Path
from typing import Optional

import typer
from dotenv import dotenv_values
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.exceptions import WorkbenchError
from ..utils.workspace import fail, open_workspace, require_function, workspace_option

console = Console()


def _parse_assignments(assignments: list[str]) -> dict[str, str]:
    variables: dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(
                f"'{assignment}' is not a KEY=VALUE pair", param_hint="VARIABLES"
            )
        variables[key.strip()] = value
    return variables


def show_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    workspace: Optional[Path] = workspace_option(),
):
    """Show a function's environment variables and their origin."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)
    environment = config.environment

    if not environment.variables:
        console.print(f"No environment variables set for {escape(config.function_name)}")
        return

    table = Table(title=f"Environment of {escape(config.function_name)}")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", overflow="fold")
    for key, value in environment.variables.items():
        table.add_row(escape(str(key)), escape(str(value)))
    console.print(table)

    origin = environment.origin_label or environment.source
    console.print(
        f"Source: {environment.source} ({escape(origin)}), "
        f"updated {environment.last_updated or 'never'}"
    )


def set_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    variables: list[str] = typer.Argument(..., help="KEY=VALUE pairs"),
    merge: bool = typer.Option(
        False, "--merge", help="Keep existing variables not named on the command line"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Set a function's environment variables by hand."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)
    new_variables = _parse_assignments(variables)

    if merge:
        new_variables = {
            **{str(k): str(v) for k, v in config.environment.variables.items()},
            **new_variables,
        }

    try:
        updated = ws.store.update_environment(config.function_dir, new_variables)
    except WorkbenchError as e:
        fail(str(e))
    console.print(
        f"Set {len(updated.environment.variables)} variable(s) on "
        f"[bold]{escape(updated.function_name)}[/bold]"
    )


def import_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    dotenv_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help=".env file to import"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Replace a function's environment with the contents of a .env file."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)

    values = dotenv_values(dotenv_file)
    variables = {key: value for key, value in values.items() if value is not None}
    ignored = sorted(key for key, value in values.items() if value is None)

    try:
        updated = ws.store.update_environment(
            config.function_dir, variables, origin_label=str(dotenv_file)
        )
    except WorkbenchError as e:
        fail(str(e))

    console.print(
        f"Imported {len(updated.environment.variables)} variable(s) from "
        f"{escape(str(dotenv_file))} into [bold]{escape(updated.function_name)}[/bold]"
    )
    if ignored:
        console.print(f"[yellow]Ignored keys without a value:[/yellow] {escape(', '.join(ignored))}")
