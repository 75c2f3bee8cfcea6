"""Task collection synchronizer.

Keeps an in-memory, paginated copy of one project's tasks consistent with
the server across incremental page fetches and local mutations.

Every transition derives a new immutable ``SyncState`` from the current one
plus the server response. Page requests are tagged with the generation that
issued them; ``load()`` and ``reset()`` start a new generation, so a page
response arriving after either is discarded instead of overwriting newer
state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import tzinfo
from typing import Any, Protocol

from taskboard_cli.exceptions import NetworkOrServerError
from taskboard_cli.models import (
    FilterCriteria,
    PageWindow,
    SyncState,
    SyncStatus,
    Task,
    TaskCreate,
    TaskPage,
    TaskUpdate,
)
from taskboard_cli.utils.logger import get_logger
from taskboard_cli.utils.task_filters import filter_tasks

DEFAULT_PAGE_SIZE = 20

StateListener = Callable[[SyncState], None]


class TaskSource(Protocol):
    """Remote operations the synchronizer depends on (see ``TasksAPI``)."""

    async def list_tasks_page(
        self, project_id: str, *, page: int = 1, page_size: int = 20
    ) -> TaskPage: ...

    async def get_task(self, task_id: str) -> Task: ...

    async def create_task(
        self, project_id: str, data: TaskCreate | dict[str, Any]
    ) -> Task: ...

    async def update_task(
        self, task_id: str, data: TaskUpdate | dict[str, Any]
    ) -> Task: ...

    async def toggle_complete(self, task_id: str) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...


class TaskCollectionSynchronizer:
    """Owns the task cache and pagination window for one collection view.

    ``load()`` and ``load_more()`` never raise for server or network errors;
    they log them and expose the outcome through ``state``. Mutations
    propagate every failure to the caller.
    """

    def __init__(self, source: TaskSource, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be > 0")
        self.source = source
        self.page_size = page_size
        self._state = SyncState(window=PageWindow(page_size=page_size))
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    @property
    def collection_id(self) -> str | None:
        return self._state.collection_id

    @property
    def window(self) -> PageWindow:
        return self._state.window

    @property
    def tasks(self) -> list[Task]:
        return list(self._state.tasks)

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def is_loading(self) -> bool:
        return self._state.status in (SyncStatus.INITIAL_LOADING, SyncStatus.LOADING_MORE)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def filter(
        self,
        criteria: FilterCriteria | Mapping[str, Any] | None,
        tz: tzinfo | None = None,
    ) -> list[Task]:
        """Return the cached tasks matching *criteria*, in cache order.

        Aware task dates are compared on their calendar day in *tz*
        (the system zone when None).
        """
        return filter_tasks(self._state.tasks, criteria, tz)

    def _commit(self, state: SyncState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _is_current(self, generation: int) -> bool:
        return self._state.generation == generation

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    async def load(self, collection_id: str) -> None:
        """Fetch page 1 of *collection_id*, replacing the cache and window."""
        logger = get_logger("sync")
        previous = self._state
        generation = previous.generation + 1
        self._commit(
            SyncState(
                status=SyncStatus.INITIAL_LOADING,
                collection_id=collection_id,
                window=PageWindow(page_size=self.page_size),
                tasks=previous.tasks if previous.collection_id == collection_id else (),
                generation=generation,
            )
        )

        try:
            page = await self.source.list_tasks_page(
                collection_id, page=1, page_size=self.page_size
            )
        except NetworkOrServerError as e:
            if not self._is_current(generation):
                logger.debug("Discarding stale load failure for %s: %s", collection_id, e)
                return
            logger.error("Failed to load tasks for %s: %s", collection_id, e)
            self._commit(
                self._state.model_copy(
                    update={
                        "status": SyncStatus.ERROR,
                        "tasks": (),
                        "window": PageWindow(page_size=self.page_size),
                        "error": str(e),
                    }
                )
            )
            return

        if not self._is_current(generation):
            logger.debug("Discarding stale page 1 for %s", collection_id)
            return

        self._commit(
            self._state.model_copy(
                update={
                    "status": SyncStatus.READY,
                    "tasks": tuple(_unique(page.tasks)),
                    "window": PageWindow(
                        page=1,
                        page_size=self.page_size,
                        total=page.total,
                        has_more=page.has_more,
                    ),
                    "error": None,
                }
            )
        )
        logger.info(
            "Loaded %d/%d tasks for %s", len(page.tasks), page.total, collection_id
        )

    async def load_more(self) -> bool:
        """Fetch and append the next page.

        Returns:
            True if the window advanced, False if the call was a no-op,
            failed, or was superseded by a newer load/reset.
        """
        logger = get_logger("sync")
        state = self._state
        if (
            state.status is SyncStatus.LOADING_MORE
            or not state.window.has_more
            or state.collection_id is None
        ):
            return False

        collection_id = state.collection_id
        generation = state.generation
        next_page = state.window.page + 1
        self._commit(state.model_copy(update={"status": SyncStatus.LOADING_MORE}))

        try:
            page = await self.source.list_tasks_page(
                collection_id, page=next_page, page_size=self.page_size
            )
        except NetworkOrServerError as e:
            if not self._is_current(generation):
                logger.debug("Discarding stale page %d failure: %s", next_page, e)
                return False
            logger.error(
                "Failed to load page %d for %s: %s", next_page, collection_id, e
            )
            self._commit(
                self._state.model_copy(
                    update={"status": SyncStatus.READY, "error": str(e)}
                )
            )
            return False

        if not self._is_current(generation):
            logger.debug("Discarding stale page %d for %s", next_page, collection_id)
            return False

        current = self._state
        self._commit(
            current.model_copy(
                update={
                    "status": SyncStatus.READY,
                    "tasks": tuple(_unique(current.tasks, page.tasks)),
                    "window": current.window.model_copy(
                        update={
                            "page": next_page,
                            "total": page.total,
                            "has_more": page.has_more,
                        }
                    ),
                    "error": None,
                }
            )
        )
        logger.debug("Appended page %d (%d tasks) for %s", next_page, len(page.tasks), collection_id)
        return True

    def reset(self) -> None:
        """Forget the active collection and drop any in-flight page response."""
        self._commit(
            SyncState(
                window=PageWindow(page_size=self.page_size),
                generation=self._state.generation + 1,
            )
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(
        self, collection_id: str, data: TaskCreate | dict[str, Any]
    ) -> Task:
        """Create a task, then reload the collection from page 1.

        The new task's position under server ordering is unknown locally, so
        the cache is rebuilt rather than patched.
        """
        task = await self.source.create_task(collection_id, data)
        await self.load(collection_id)
        return task

    async def update(self, task_id: str, data: TaskUpdate | dict[str, Any]) -> Task:
        """Update a task and replace its cached copy in place."""
        task = await self.source.update_task(task_id, data)
        self._replace(task_id, task)
        return task

    async def toggle_complete(self, task_id: str) -> Task:
        """Flip a task's completion flag and replace its cached copy in place."""
        task = await self.source.toggle_complete(task_id)
        self._replace(task_id, task)
        return task

    async def delete(self, task_id: str) -> None:
        """Delete a task and drop it from the cache."""
        await self.source.delete_task(task_id)

        current = self._state
        remaining = tuple(t for t in current.tasks if t.id != task_id)
        if len(remaining) == len(current.tasks):
            return
        # Advisory until the next full load.
        total = max(0, current.window.total - 1)
        self._commit(
            current.model_copy(
                update={
                    "tasks": remaining,
                    "window": current.window.model_copy(update={"total": total}),
                }
            )
        )

    async def get_by_id(self, task_id: str) -> Task:
        """Fetch the server's copy of a task, refreshing the cache entry if present."""
        task = await self.source.get_task(task_id)
        self._replace(task_id, task)
        return task

    def _replace(self, task_id: str, task: Task) -> None:
        current = self._state
        if not any(t.id == task_id for t in current.tasks):
            return
        tasks = tuple(task if t.id == task_id else t for t in current.tasks)
        self._commit(current.model_copy(update={"tasks": tasks}))


def _unique(*groups) -> list[Task]:
    """Concatenate task sequences, keeping the first copy of each id."""
    seen: set[str] = set()
    result: list[Task] = []
    for group in groups:
        for task in group:
            if task.id in seen:
                continue
            seen.add(task.id)
            result.append(task)
    return result
