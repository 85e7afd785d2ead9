"""Main CLI entry point for the Lambda Workbench CLI."""

import typer
from importlib import metadata
from rich.console import Console
from rich.panel import Panel

from .commands import env, functions, maintenance


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("lambda-workbench")
    except metadata.PackageNotFoundError:
        return "unknown"


console = Console()

# command: lwb
app = typer.Typer(
    name="lwb",
    help="Lambda Workbench - manage local Go Lambda functions",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# command: lwb <command>
app.command("configure")(functions.configure_command)
app.command("list")(functions.list_command)
app.command("status")(functions.status_command)
app.command("event")(functions.event_command)
app.command("remove")(functions.remove_command)
app.command("validate")(maintenance.validate_command)
app.command("repair")(maintenance.repair_command)
app.command("migrate")(maintenance.migrate_command)


# command: lwb env <subcommand>
env_app = typer.Typer(
    name="env",
    help="Function environment variables",
    no_args_is_help=True,
)

env_app.command("show")(env.show_command)
env_app.command("set")(env.set_command)
env_app.command("import")(env.import_command)

app.add_typer(env_app, name="env")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """Lambda Workbench - manage local Go Lambda functions."""
    if version:
        console.print(f"Lambda Workbench CLI v{get_version()}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            Panel(
                "[bold blue]Lambda Workbench[/bold blue]\n\n"
                "Configure, inspect and maintain Go Lambda functions in a local workspace.\n\n"
                "Use [bold]lwb --help[/bold] to see available commands.",
                title="Welcome",
                expand=False,
            )
        )


if __name__ == "__main__":
    app()
