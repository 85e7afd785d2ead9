"""Shared helpers for commands operating on a function workspace."""

import os
from pathlib import Path
from typing import NamedTuple, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...config import WORKSPACE_ENV_VAR, WorkspacePaths, get_workspace_paths
from ...core.manifest.models import EventType, FunctionConfiguration
from ...core.manifest.store import ManifestStore
from ...core.registry import FunctionRegistry

console = Console()


class Workspace(NamedTuple):
    """Components wired to one workspace path."""

    paths: WorkspacePaths
    store: ManifestStore
    registry: FunctionRegistry


def workspace_option():
    return typer.Option(
        None,
        "--workspace",
        "-w",
        envvar=WORKSPACE_ENV_VAR,
        help="Function workspace directory (default: ~/lambda-workspace)",
    )


def open_workspace(workspace: Optional[Path]) -> Workspace:
    paths = get_workspace_paths(workspace)
    store = ManifestStore()
    return Workspace(paths=paths, store=store, registry=FunctionRegistry(paths, store))


def source_path(source_file: Path) -> str:
    """Absolute, symlink-free form under which source files are recorded."""
    return os.fspath(Path(source_file).expanduser().resolve())


def check_event_type(event_type: Optional[str]) -> Optional[str]:
    if event_type is not None and event_type not in EventType.values():
        raise typer.BadParameter(
            f"'{event_type}' is not one of: {', '.join(EventType.values())}",
            param_hint="--event-type",
        )
    return event_type


def fail(message: str) -> NoReturn:
    """Print an error with its original text and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def require_function(ws: Workspace, source_file: Path) -> FunctionConfiguration:
    config = ws.registry.find_by_source_file(source_path(source_file))
    if config is None:
        fail(
            f"{source_file} is not configured in {ws.paths.root}. "
            "Run 'lwb configure' first."
        )
    return config
