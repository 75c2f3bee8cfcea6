"""Output formatters for different formats."""

import json
from datetime import date, datetime, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from rich.table import Table

from taskboard_cli.models import Task
from taskboard_cli.utils.jalali import canonical_to_alternate, normalize_to_day_start
from taskboard_cli.utils.ui.console import get_console

console = get_console()


def display_zone(name: str | None) -> tzinfo | None:
    """Resolve a configured IANA zone name; None means the system zone."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def format_date(
    value: date | datetime | None, calendar: str = "jalali", tz: tzinfo | None = None
) -> str:
    """Render a date for display in the configured calendar."""
    if value is None:
        return "-"
    if calendar == "jalali":
        return canonical_to_alternate(value, tz) or "-"
    day = normalize_to_day_start(value, tz)
    return day.date().isoformat() if day else "-"


def task_rows(
    tasks: list[Task], calendar: str = "jalali", tz: tzinfo | None = None
) -> list[dict[str, Any]]:
    """Flatten tasks into display rows."""
    return [
        {
            "id": task.id,
            "title": task.title,
            "priority": task.priority,
            "done": task.completed,
            "start": format_date(task.start_date, calendar, tz),
            "due": format_date(task.due_date, calendar, tz),
        }
        for task in tasks
    ]


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    else:
        format_table(data)


def format_table(data: Any) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, list):
        if isinstance(data[0], dict):
            format_dict_table(data)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        if "tasks" in data:
            format_dict_table(data["tasks"])
        else:
            format_single_item(data)
    else:
        console.print(data)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        table.add_row(key.replace("_", " ").title(), _cell(value))

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")
