"""Taskboard CLI domain models.

This package contains Pydantic models for task records, request payloads,
pagination and synchronizer state, and client-side filter criteria.
"""

from .core import (
    FilterCriteria,
    PageWindow,
    SyncState,
    SyncStatus,
    Task,
    TaskCreate,
    TaskPage,
    TaskUpdate,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    # Pagination / sync models
    "TaskPage",
    "PageWindow",
    "SyncState",
    "SyncStatus",
    # Filter models
    "FilterCriteria",
]
