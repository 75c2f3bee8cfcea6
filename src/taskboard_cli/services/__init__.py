"""Services module for Taskboard CLI - sync and remote access layer."""

from .task_sync import TaskCollectionSynchronizer

__all__ = [
    "TaskCollectionSynchronizer",
]
