"""Function configuration commands."""

from pathlib import Path
from typing import Optional

import questionary
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...core.detector import is_function_source
from ...core.events import write_event_file
from ...core.exceptions import WorkbenchError
from ...core.freshness import BuildFreshnessOracle
from ...core.manifest.models import FunctionConfiguration
from ..utils.workspace import (
    check_event_type,
    fail,
    open_workspace,
    require_function,
    source_path,
    workspace_option,
)

console = Console()


def _describe(config: FunctionConfiguration) -> str:
    return (
        f"[bold]Function:[/bold] {escape(config.function_name)}\n"
        f"[bold]Source:[/bold] {escape(config.source_file or '-')}\n"
        f"[bold]Event type:[/bold] {config.event_type}\n"
        f"[bold]Runtime:[/bold] {config.runtime} ({config.architecture})\n"
        f"[bold]Memory / timeout:[/bold] {config.memory_size} MB / {config.timeout} s\n"
        f"[bold]Manifest:[/bold] {escape(str(config.manifest_path))}"
    )


def configure_command(
    source_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Function entry point (main.go)"
    ),
    event_type: Optional[str] = typer.Option(
        None,
        "--event-type",
        "-e",
        callback=check_event_type,
        help="Event source (detected from the source when omitted)",
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Function name (derived from the source path when omitted)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Configure even if the file is not a Lambda entry point"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Create or update the manifest of a source file."""
    ws = open_workspace(workspace)
    source = source_path(source_file)

    if not force and not is_function_source(source):
        fail(
            f"{source_file} is not a Lambda entry point "
            "(main.go importing aws-lambda-go/lambda). Use --force to configure it anyway."
        )

    try:
        existing = ws.registry.find_by_source_file(source)
        if existing is not None:
            ws.store.write_metadata(
                existing.function_dir,
                source,
                existing.source_dir or str(Path(source).parent),
                event_type or existing.event_type,
            )
            config = ws.store.extract_configuration(existing.function_dir)
            title = "Function Updated"
        else:
            ws.paths.ensure_root()
            settings = ws.registry.settings_for(source, event_type=event_type, function_name=name)
            config = ws.registry.register(settings)
            write_event_file(config.function_dir, config.event_type)
            title = "Function Configured"
    except (WorkbenchError, OSError) as e:
        fail(str(e))

    console.print(Panel(_describe(config), title=title, expand=False))


def list_command(workspace: Optional[Path] = workspace_option()):
    """List configured functions and their build status."""
    ws = open_workspace(workspace)
    report = ws.registry.scan()
    oracle = BuildFreshnessOracle()

    if not report.items:
        console.print(
            Panel(
                f"No functions found in workspace: {escape(str(ws.paths.root))}\n\n"
                "Run [bold]lwb configure <main.go>[/bold] to add one.",
                title="Functions",
                expand=False,
            )
        )
        return

    table = Table(title=f"Functions in {escape(str(ws.paths.root))}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Event", style="magenta")
    table.add_column("Arch")
    table.add_column("Build", justify="center")
    table.add_column("Source", overflow="fold")

    for config in report.values:
        decision = oracle.check(config)
        build = "[yellow]stale[/yellow]" if decision.needed else "[green]fresh[/green]"
        table.add_row(
            config.function_name,
            config.event_type,
            config.architecture,
            build,
            escape(config.source_file),
        )
    console.print(table)

    for item in report.skipped:
        console.print(
            f"[yellow]Skipped[/yellow] {escape(item.name)}: {item.skipped} "
            "(run [bold]lwb validate[/bold])"
        )
    for item in report.failed:
        console.print(f"[red]Failed[/red] {escape(item.name)}: {escape(item.error or '')}")


def status_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    workspace: Optional[Path] = workspace_option(),
):
    """Show a function's configuration and whether it needs a rebuild."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)
    decision = BuildFreshnessOracle().check(config)

    build = (
        f"[yellow]Rebuild needed[/yellow] ({decision.reason.value})"
        if decision.needed
        else "[green]Up to date[/green]"
    )
    console.print(
        Panel(
            f"{_describe(config)}\n[bold]Build:[/bold] {build}\n{escape(decision.detail)}",
            title="Function Status",
            expand=False,
        )
    )


def event_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace an existing event.json"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Generate the sample event.json of a function."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)
    try:
        event_file = write_event_file(config.function_dir, config.event_type, overwrite)
    except OSError as e:
        fail(str(e))
    console.print(f"Event file: {escape(str(event_file))}")


def remove_command(
    source_file: Path = typer.Argument(..., help="Function entry point"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    workspace: Optional[Path] = workspace_option(),
):
    """Remove a function directory. The source file is kept."""
    ws = open_workspace(workspace)
    config = require_function(ws, source_file)

    if not force:
        try:
            confirmed = questionary.confirm(
                f"Remove function '{config.function_name}' and {config.function_dir}?"
            ).ask()
        except KeyboardInterrupt:
            confirmed = False
        if not confirmed:
            console.print("Removal cancelled")
            return

    if ws.registry.unregister(source_path(source_file)):
        console.print(f"Removed function [bold]{escape(config.function_name)}[/bold]")
    else:
        console.print("Function was already removed")
