"""Date conversion commands between the Jalali and Gregorian calendars."""

from datetime import date

import typer

from taskboard_cli.utils import exit_codes
from taskboard_cli.utils.jalali import alternate_to_canonical, canonical_to_alternate
from taskboard_cli.utils.task_filters import parse_instant
from taskboard_cli.utils.ui.console import get_console

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Calendar conversion", no_args_is_help=True)
console = get_console()


@app.command("to-gregorian")
@command_wrapper
def to_gregorian(
    value: str = typer.Argument(..., help="Jalali date, e.g. 1403/01/15"),
) -> None:
    """Convert a Jalali date to Gregorian."""
    converted = alternate_to_canonical(value)
    if converted is None:
        raise AppError(f"Invalid Jalali date: '{value}'", exit_codes.ERROR_INVALID_ARGS)
    console.print(converted.date().isoformat())


@app.command("to-jalali")
@command_wrapper
def to_jalali(
    value: str | None = typer.Argument(None, help="Gregorian date (YYYY-MM-DD), default today"),
) -> None:
    """Convert a Gregorian date to Jalali."""
    instant = date.today() if value is None else parse_instant(value)
    converted = canonical_to_alternate(instant)
    if not converted:
        raise AppError(f"Invalid Gregorian date: '{value}'", exit_codes.ERROR_INVALID_ARGS)
    console.print(converted)
