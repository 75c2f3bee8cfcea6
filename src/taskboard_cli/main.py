"""Main entry point for Taskboard CLI."""

import typer

from taskboard_cli import __version__
from taskboard_cli.commands import config, dates, tasks
from taskboard_cli.config import get_config_manager
from taskboard_cli.utils.ui.console import get_console

app = typer.Typer(
    name="taskboard",
    help="Command-line client for Taskboard projects and tasks",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task commands")
app.add_typer(dates.app, name="dates", help="Jalali/Gregorian date conversion")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version(
    profile: str = typer.Option("default", "--profile", help="Configuration profile"),
) -> None:
    """Show version information and the configured API endpoint."""
    console.print(f"[bold]Taskboard CLI[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"[dim]API endpoint: {get_config_manager(profile).api_endpoint}[/dim]")


if __name__ == "__main__":
    app()
