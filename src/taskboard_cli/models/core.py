"""Core domain models for task collections, pages and filter criteria."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Priority = Literal["Low", "Medium", "High"]


class Task(BaseModel):
    """Task model representing a task record owned by the server.

    Attributes:
        id: Unique identifier for the task
        project_id: Project (collection) the task belongs to
        title: Short task title
        description: Detailed description
        priority: Priority level ("Low", "Medium", "High")
        completed: Completion status
        start_date: Optional start date
        due_date: Optional due date
        category: Optional free-form category
        estimated_hours: Optional effort estimate
        done_ratio: Progress percentage (0-100)
        assignee_id: Optional assigned user
        author_id: Optional author
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    project_id: str | None = None
    title: str
    description: str = ""
    priority: str = "Medium"
    completed: bool = False
    start_date: datetime | None = None
    due_date: datetime | None = None
    category: str | None = None
    estimated_hours: float | None = None
    done_ratio: int = 0
    assignee_id: str | None = None
    author_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v: Any) -> Any:
        return "" if v is None else v


class _TaskPayload(BaseModel):
    @model_validator(mode="after")
    def _check_dates(self):
        start, due = self.start_date, self.due_date
        if start and due and (start.tzinfo is None) == (due.tzinfo is None) and due < start:
            raise ValueError("due_date cannot be earlier than start_date")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-ready request body, dropping unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


class TaskCreate(_TaskPayload):
    """Model for creating a new task.

    Attributes:
        title: Task title (required, non-blank)
        description: Detailed description
        priority: Priority level
        start_date: Optional start date
        due_date: Optional due date, not before start_date
        category: Optional category
        estimated_hours: Optional effort estimate
        done_ratio: Progress percentage
    """

    title: str
    description: str = ""
    priority: Priority = "Medium"
    start_date: datetime | None = None
    due_date: datetime | None = None
    category: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    done_ratio: int = Field(default=0, ge=0, le=100)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()


class TaskUpdate(_TaskPayload):
    """Model for updating an existing task.

    All fields are optional - only provided fields are sent.
    """

    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    completed: bool | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None
    category: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    done_ratio: int | None = Field(default=None, ge=0, le=100)


class TaskPage(BaseModel):
    """One page of a paginated task listing."""

    tasks: list[Task] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    has_more: bool = False


class PageWindow(BaseModel):
    """Pagination bookkeeping for one open collection view."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    total: int = Field(default=0, ge=0)
    has_more: bool = False


class SyncStatus(str, Enum):
    """Lifecycle of a task collection synchronizer."""

    IDLE = "idle"
    INITIAL_LOADING = "initial_loading"
    READY = "ready"
    LOADING_MORE = "loading_more"
    ERROR = "error"


class SyncState(BaseModel):
    """Immutable snapshot of a synchronizer's cache and pagination state."""

    model_config = ConfigDict(frozen=True)

    status: SyncStatus = SyncStatus.IDLE
    collection_id: str | None = None
    window: PageWindow = Field(default_factory=PageWindow)
    tasks: tuple[Task, ...] = ()
    generation: int = 0
    error: str | None = None


class FilterCriteria(BaseModel):
    """Client-side search criteria.

    An absent value leaves that side unconstrained.
    """

    text: str | None = None
    start_date_from: datetime | date | None = None
    start_date_to: datetime | date | None = None
    due_date_from: datetime | date | None = None
    due_date_to: datetime | date | None = None
