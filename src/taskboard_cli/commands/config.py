"""Configuration management commands."""

import typer

from taskboard_cli.config import get_config_manager
from taskboard_cli.utils import exit_codes
from taskboard_cli.utils.ui.console import get_console
from taskboard_cli.utils.ui.formatters import format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)
console = get_console()


def _parse_value(value: str) -> str | int | bool | None:
    """Convert a command-line value to the most likely config type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    if value.lower() in ("none", "null"):
        return None
    return value


@app.command("view")
@command_wrapper
def view_config(
    profile: str = typer.Option("default", "--profile", help="Profile name"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_dict = get_config_manager(profile).config.model_dump()
    if config_dict["api"].get("token"):
        config_dict["api"]["token"] = "********"
    format_output(config_dict, output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Get a configuration value."""
    value = get_config_manager(profile).get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", exit_codes.ERROR_INVALID_ARGS)
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    value: str = typer.Argument(..., help="Configuration value"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """Set a configuration value."""
    parsed_value = _parse_value(value)
    try:
        get_config_manager(profile).set(key, parsed_value)
    except KeyError as e:
        raise AppError(str(e.args[0]), exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    profile: str = typer.Option("default", "--profile", help="Profile name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            raise typer.Exit(exit_codes.SUCCESS)

    try:
        get_config_manager(profile).reset(key)
    except KeyError as e:
        raise AppError(str(e.args[0]), exit_codes.ERROR_INVALID_ARGS) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("list")
@command_wrapper
def list_profiles(
    profile: str = typer.Option("default", "--profile", help="Profile name"),
) -> None:
    """List all configuration profiles."""
    profiles = get_config_manager(profile).list_profiles()
    if not profiles:
        console.print("[yellow]No profiles found[/yellow]")
        return

    for prof in profiles:
        marker = " *" if prof == profile else ""
        console.print(f"{prof}{marker}")
