"""Tasks API endpoints."""

from __future__ import annotations

from typing import Any

import httpx
import pydantic

from taskboard_cli.exceptions import NetworkOrServerError
from taskboard_cli.models import Task, TaskCreate, TaskPage, TaskUpdate
from taskboard_cli.services.api.client import APIClient


def _json(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise NetworkOrServerError(
            "Malformed server response: body is not JSON",
            status_code=response.status_code,
        ) from e


def _payload(data: TaskCreate | TaskUpdate | dict[str, Any]) -> dict[str, Any]:
    if isinstance(data, (TaskCreate, TaskUpdate)):
        return data.to_payload()
    return dict(data)


def decode_task(data: Any) -> Task:
    """Decode a task record, unwrapping a thin ``{"task": ...}`` envelope."""
    if isinstance(data, dict) and "id" not in data:
        for key in ("task", "data"):
            if isinstance(data.get(key), dict):
                data = data[key]
                break
    if not isinstance(data, dict):
        raise NetworkOrServerError("Malformed server response: expected a task object")
    try:
        return Task.model_validate(data)
    except pydantic.ValidationError as e:
        raise NetworkOrServerError(f"Malformed task record: {e}") from e


def decode_task_page(data: Any, page: int, page_size: int) -> TaskPage:
    """Decode a page listing, filling in fields the server left out."""
    if not isinstance(data, dict):
        raise NetworkOrServerError("Malformed server response: expected a page object")

    raw_tasks = data.get("tasks")
    if raw_tasks is None:
        raw_tasks = []
    elif not isinstance(raw_tasks, list):
        raise NetworkOrServerError("Malformed server response: 'tasks' is not a list")
    tasks = [decode_task(item) for item in raw_tasks]

    has_more = data.get("has_more")
    if has_more is None:
        has_more = False

    total = data.get("total")
    if total is None:
        total = len(tasks)

    try:
        return TaskPage(
            tasks=tasks,
            total=total,
            page=data.get("page") or page,
            page_size=data.get("page_size") or page_size,
            has_more=has_more,
        )
    except pydantic.ValidationError as e:
        raise NetworkOrServerError(f"Malformed page response: {e}") from e


class TasksAPI:
    """Tasks API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tasks_page(
        self, project_id: str, *, page: int = 1, page_size: int = 20
    ) -> TaskPage:
        """List one page of a project's tasks."""
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be > 0")

        response = await self.client.get(
            f"/projects/{project_id}/tasks",
            params={"page": page, "page_size": page_size},
        )
        return decode_task_page(_json(response), page, page_size)

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        response = await self.client.get(f"/tasks/{task_id}")
        return decode_task(_json(response))

    async def create_task(
        self, project_id: str, data: TaskCreate | dict[str, Any]
    ) -> Task:
        """Create a new task in a project."""
        response = await self.client.post(
            f"/projects/{project_id}/tasks", json=_payload(data)
        )
        return decode_task(_json(response))

    async def update_task(self, task_id: str, data: TaskUpdate | dict[str, Any]) -> Task:
        """Update a task."""
        response = await self.client.put(f"/tasks/{task_id}", json=_payload(data))
        return decode_task(_json(response))

    async def toggle_complete(self, task_id: str) -> Task:
        """Flip a task's completion flag."""
        response = await self.client.patch(f"/tasks/{task_id}/complete")
        return decode_task(_json(response))

    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        await self.client.delete(f"/tasks/{task_id}")
