"""Task commands - list, inspect and change tasks of a project."""

from datetime import datetime, tzinfo

import typer

from taskboard_cli.config import get_config_manager
from taskboard_cli.models import FilterCriteria, SyncStatus, Task, TaskCreate, TaskUpdate
from taskboard_cli.services.api.client import get_client
from taskboard_cli.services.api.tasks import TasksAPI
from taskboard_cli.services.task_sync import TaskCollectionSynchronizer
from taskboard_cli.utils import exit_codes
from taskboard_cli.utils.jalali import alternate_to_canonical
from taskboard_cli.utils.task_filters import get_active_filter_count, parse_instant
from taskboard_cli.utils.ui.console import get_console
from taskboard_cli.utils.ui.formatters import (
    display_zone,
    format_output,
    format_success,
    task_rows,
)

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Task commands", no_args_is_help=True)
console = get_console()

ProfileOption = typer.Option("default", "--profile", help="Configuration profile")


def parse_date_option(value: str | None, calendar: str) -> datetime | None:
    """Parse a date given on the command line.

    Slash-separated dates are read in the configured calendar; ISO dates
    (YYYY-MM-DD) are always Gregorian.
    """
    if value is None:
        return None

    parsed = None
    if calendar == "jalali" and "/" in value:
        parsed = alternate_to_canonical(value)
    else:
        instant = parse_instant(value.replace("/", "-"))
        if isinstance(instant, datetime):
            parsed = instant

    if parsed is None:
        raise AppError(f"Invalid date: '{value}'", exit_codes.ERROR_INVALID_ARGS)
    return parsed


def _emit(tasks: list[Task], output: str, calendar: str, zone: tzinfo | None) -> None:
    if output == "table":
        format_output(task_rows(tasks, calendar, zone), output)
    else:
        format_output({"tasks": [t.model_dump(mode="json") for t in tasks]}, output)


def _synchronizer(client, profile: str) -> TaskCollectionSynchronizer:
    config = get_config_manager(profile).config
    return TaskCollectionSynchronizer(TasksAPI(client), page_size=config.sync.page_size)


@app.command("list")
@command_wrapper
async def list_tasks(
    project_id: str = typer.Argument(..., help="Project ID"),
    search: str | None = typer.Option(None, "--search", "-s", help="Match title or description"),
    start_from: str | None = typer.Option(None, "--start-from", help="Start date lower bound"),
    start_to: str | None = typer.Option(None, "--start-to", help="Start date upper bound"),
    due_from: str | None = typer.Option(None, "--due-from", help="Due date lower bound"),
    due_to: str | None = typer.Option(None, "--due-to", help="Due date upper bound"),
    pages: int = typer.Option(1, "--pages", min=1, help="Number of pages to fetch"),
    all_pages: bool = typer.Option(False, "--all", help="Fetch every page"),
    output: str | None = typer.Option(None, "--output", "-o", help="table, json or yaml"),
    profile: str = ProfileOption,
) -> None:
    """List a project's tasks, filtered locally."""
    config = get_config_manager(profile).config
    calendar = config.ui.calendar
    criteria = FilterCriteria(
        text=search,
        start_date_from=parse_date_option(start_from, calendar),
        start_date_to=parse_date_option(start_to, calendar),
        due_date_from=parse_date_option(due_from, calendar),
        due_date_to=parse_date_option(due_to, calendar),
    )

    async with get_client(profile) as client:
        sync = _synchronizer(client, profile)
        await sync.load(project_id)
        if sync.status is SyncStatus.ERROR:
            raise AppError(f"Failed to load tasks: {sync.error}", exit_codes.ERROR_NETWORK)

        fetched = 1
        while (all_pages or fetched < pages) and sync.window.has_more:
            if not await sync.load_more():
                break
            fetched += 1

    zone = display_zone(config.ui.timezone)
    tasks = sync.filter(criteria, zone)
    output = output or config.output.format
    _emit(tasks, output, calendar, zone)

    if output == "table":
        window = sync.window
        summary = f"[dim]{len(tasks)} shown, {len(sync.tasks)} loaded of {window.total}"
        active = get_active_filter_count(criteria)
        if active:
            summary += f", {active} filter{'s' if active > 1 else ''} active"
        if window.has_more:
            summary += " (more available: --pages / --all)"
        console.print(summary + "[/dim]")
    if sync.error:
        console.print(f"[yellow]Stopped early: {sync.error}[/yellow]")


@app.command("show")
@command_wrapper
async def show_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="table, json or yaml"),
    profile: str = ProfileOption,
) -> None:
    """Show a single task."""
    config = get_config_manager(profile).config
    async with get_client(profile) as client:
        task = await _synchronizer(client, profile).get_by_id(task_id)
    _emit(
        [task],
        output or config.output.format,
        config.ui.calendar,
        display_zone(config.ui.timezone),
    )


@app.command("add")
@command_wrapper
async def add_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Option("", "--description", "-d", help="Task description"),
    priority: str = typer.Option("Medium", "--priority", "-p", help="Low, Medium or High"),
    start: str | None = typer.Option(None, "--start", help="Start date"),
    due: str | None = typer.Option(None, "--due", help="Due date"),
    profile: str = ProfileOption,
) -> None:
    """Create a task in a project."""
    calendar = get_config_manager(profile).config.ui.calendar
    data = TaskCreate(
        title=title,
        description=description,
        priority=priority,
        start_date=parse_date_option(start, calendar),
        due_date=parse_date_option(due, calendar),
    )

    async with get_client(profile) as client:
        sync = _synchronizer(client, profile)
        task = await sync.create(project_id, data)

    format_success(f"Created task {task.id}: {task.title}")
    if sync.status is SyncStatus.READY:
        console.print(f"[dim]Project now has {sync.window.total} tasks[/dim]")


@app.command("edit")
@command_wrapper
async def edit_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="Low, Medium or High"),
    start: str | None = typer.Option(None, "--start", help="New start date"),
    due: str | None = typer.Option(None, "--due", help="New due date"),
    profile: str = ProfileOption,
) -> None:
    """Update fields of a task."""
    calendar = get_config_manager(profile).config.ui.calendar
    data = TaskUpdate(
        title=title,
        description=description,
        priority=priority,
        start_date=parse_date_option(start, calendar),
        due_date=parse_date_option(due, calendar),
    )
    if not data.to_payload():
        raise AppError("Nothing to update", exit_codes.ERROR_INVALID_ARGS)

    async with get_client(profile) as client:
        task = await _synchronizer(client, profile).update(task_id, data)
    format_success(f"Updated task {task.id}")


@app.command("complete")
@command_wrapper
async def complete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    profile: str = ProfileOption,
) -> None:
    """Toggle a task between done and not done."""
    async with get_client(profile) as client:
        task = await _synchronizer(client, profile).toggle_complete(task_id)
    state = "completed" if task.completed else "reopened"
    format_success(f"Task {task.id} {state}")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    profile: str = ProfileOption,
) -> None:
    """Delete a task."""
    if not yes and not typer.confirm(f"Delete task {task_id}?"):
        raise typer.Exit(exit_codes.SUCCESS)

    async with get_client(profile) as client:
        await _synchronizer(client, profile).delete(task_id)
    format_success(f"Deleted task {task_id}")
