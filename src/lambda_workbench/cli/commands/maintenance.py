"""Workspace maintenance commands: validate, repair and migrate."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.exceptions import WorkbenchError
from ...core.migration import WorkspaceMigrator
from ...core.results import Report
from ...core.validation import ManifestState, MetadataValidator
from ..utils.workspace import (
    check_event_type,
    fail,
    open_workspace,
    source_path,
    workspace_option,
)

console = Console()


def _print_report(report: Report[ManifestState], action: str) -> None:
    for item in report.succeeded:
        console.print(f"[green]{action}[/green] {escape(item.name)}")
    for item in report.skipped:
        console.print(f"[dim]Skipped {escape(item.name)}: {item.skipped}[/dim]")
    for item in report.failed:
        console.print(f"[red]Failed[/red] {escape(item.name)}: {escape(item.error or '')}")


def validate_command(workspace: Optional[Path] = workspace_option()):
    """Check that every function manifest carries complete metadata."""
    ws = open_workspace(workspace)
    validator = MetadataValidator(ws.paths, ws.store, ws.registry)
    report = validator.validate_workspace()

    if report.is_clean:
        console.print(f"[green]All {len(report.valid)} function(s) have valid metadata[/green]")
        return

    table = Table(title="Manifest issues")
    table.add_column("Function", style="cyan", no_wrap=True)
    table.add_column("State", style="yellow")
    table.add_column("Issue", overflow="fold")
    for issue in report.issues:
        table.add_row(escape(issue.function_name), issue.state.value, escape(issue.message))
    console.print(table)
    console.print(
        f"{len(report.valid)} valid, {len(report.invalid_functions)} invalid. "
        "Run [bold]lwb repair --all[/bold] to fix missing metadata."
    )
    raise typer.Exit(1)


def repair_command(
    name: Optional[str] = typer.Argument(None, help="Function directory name"),
    source_file: Optional[Path] = typer.Option(
        None, "--source-file", help="Source file to record"
    ),
    source_dir: Optional[Path] = typer.Option(
        None, "--source-dir", help="Source directory to record"
    ),
    event_type: Optional[str] = typer.Option(
        None, "--event-type", "-e", callback=check_event_type, help="Event type to record"
    ),
    all_functions: bool = typer.Option(
        False, "--all", help="Repair every function in the workspace"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Restore missing or incomplete metadata in function manifests."""
    if all_functions == (name is not None):
        raise typer.BadParameter("Pass either a function name or --all")

    ws = open_workspace(workspace)
    validator = MetadataValidator(ws.paths, ws.store, ws.registry)

    if all_functions:
        report = validator.repair_workspace()
        _print_report(report, "Repaired")
        if report.failed:
            raise typer.Exit(1)
        return

    function_dir = ws.paths.function_dir(name)
    try:
        validator.repair(
            function_dir,
            source_path(source_file) if source_file else None,
            source_path(source_dir) if source_dir else None,
            event_type,
        )
    except WorkbenchError as e:
        fail(str(e))
    console.print(f"[green]Metadata of {escape(name)} is valid[/green]")


def migrate_command(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show the legacy entries without migrating"
    ),
    workspace: Optional[Path] = workspace_option(),
):
    """Move functions from the legacy registry file into their manifests."""
    ws = open_workspace(workspace)
    migrator = WorkspaceMigrator(ws.paths, ws.store)

    if not migrator.needs_migration():
        console.print("No legacy registry found, nothing to migrate")
        return

    try:
        if dry_run:
            entries = migrator.legacy_entries()
            table = Table(title=f"Legacy entries in {escape(str(ws.paths.legacy_registry))}")
            table.add_column("Function", style="cyan")
            table.add_column("Event")
            table.add_column("Source", overflow="fold")
            for entry in entries.values():
                table.add_row(
                    escape(entry.function_name), entry.event_type, escape(entry.source_file)
                )
            console.print(table)
            return

        report = migrator.migrate()
    except WorkbenchError as e:
        fail(str(e))

    _print_report(report.results, "Migrated")
    console.print(f"Legacy registry moved to {escape(str(report.backup_path))}")
    if report.results.failed:
        raise typer.Exit(1)
