"""HTTP adapters for the Taskboard API."""

from .client import APIClient, get_client
from .tasks import TasksAPI

__all__ = ["APIClient", "TasksAPI", "get_client"]
