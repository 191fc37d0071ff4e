# src/todo_sync/tasks/task_reconciler.py

from __future__ import annotations

"""
Task reconciler.

The single entry point the presentation layer uses for task data:
- first-load population (local store first, remote import only when empty),
- "remote adds only" merge by id,
- CRUD with id allocation (max id + 1),
- title filtering over the last loaded snapshot.

One reconciler owns one store per process. Every observable change is
published on the event bus in call order.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from ..core.events import TaskEvent, TaskEventBus, TaskEventKind
from ..core.ports import RemoteTaskSource, TaskRepo
from .task_errors import RemoteFetchError, TaskNotFoundError, TaskValidationError
from .task_models import LoadState, SyncState, TaskRecord

logger = logging.getLogger(__name__)

DEFAULT_OWNER_ID = 1


def filter_tasks(query: str | None, tasks: Sequence[TaskRecord]) -> list[TaskRecord]:
    """Case-insensitive substring match on title. Empty query returns everything."""
    q = (query or "").casefold()
    if not q:
        return list(tasks)
    return [t for t in tasks if q in t.title.casefold()]


class TaskReconciler:
    def __init__(
        self,
        store: TaskRepo,
        remote: RemoteTaskSource,
        *,
        events: TaskEventBus | None = None,
        default_owner_id: int = DEFAULT_OWNER_ID,
        reimport_when_empty: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._remote = remote
        self._events = events
        self._default_owner_id = int(default_owner_id)
        self._reimport_when_empty = bool(reimport_when_empty)
        self._clock = clock

        self._state = LoadState.NOT_LOADED
        self._snapshot: list[TaskRecord] = []
        self._last_error: RemoteFetchError | None = None
        self._remote_total: int | None = None

    # ---- read-only views ----

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def snapshot(self) -> list[TaskRecord]:
        return list(self._snapshot)

    @property
    def last_error(self) -> RemoteFetchError | None:
        """Error from the most recent remote call, None if it succeeded."""
        return self._last_error

    @property
    def remote_total(self) -> int | None:
        return self._remote_total

    # ---- internals ----

    def _publish(self, event: TaskEvent) -> None:
        if self._events is not None:
            self._events.publish(event)

    def _finish_load(self, state: LoadState, tasks: list[TaskRecord]) -> list[TaskRecord]:
        self._snapshot = list(tasks)
        self._state = state
        logger.info("Tasks loaded state=%s count=%d", state.value, len(tasks))
        self._publish(TaskEvent(TaskEventKind.LOADED, tasks=list(tasks)))
        return tasks

    def _replace_in_snapshot(self, record: TaskRecord) -> None:
        self._snapshot = [record if t.id == record.id else t for t in self._snapshot]

    def _remember_remote_total(self, fetched: int) -> None:
        total = getattr(self._remote, "last_total", None)
        self._remote_total = int(total) if total is not None else fetched

    @staticmethod
    def _require_title(title: str | None) -> str:
        if title is None or not title.strip():
            raise TaskValidationError("Task title must not be empty.")
        return title

    # ---- loading ----

    async def load_initial_tasks(self) -> list[TaskRecord]:
        """
        Local store first; the remote is consulted only when the store is empty.

        On remote failure the (empty) local list is returned, the state becomes
        LOADED_EMPTY and the error is kept in last_error and published.
        """
        self._state = LoadState.LOADING
        self._last_error = None
        self._publish(TaskEvent(TaskEventKind.LOADING))

        local = self._store.fetch_all()
        if local:
            return self._finish_load(LoadState.LOADED_LOCAL, local)

        if not self._reimport_when_empty and self._store.get_sync_state() == SyncState.SYNCED:
            logger.info("Store is empty but already synced once; skipping remote import")
            return self._finish_load(LoadState.LOADED_LOCAL, local)

        try:
            remote_tasks = await self._remote.fetch()
        except RemoteFetchError as e:
            logger.warning("Remote fetch failed (%s); using local store", e)
            self._last_error = e
            tasks = self._store.fetch_all()
            self._snapshot = tasks
            self._state = LoadState.LOADED_EMPTY
            self._publish(TaskEvent(TaskEventKind.LOAD_FAILED, tasks=list(tasks), error=e))
            return tasks

        if self._store.replace_all(remote_tasks):
            self._store.set_sync_state(SyncState.SYNCED)
        self._remember_remote_total(len(remote_tasks))

        return self._finish_load(LoadState.LOADED_REMOTE, self._store.fetch_all())

    async def reload(self) -> list[TaskRecord]:
        """Same policy as the first load; a non-empty store is not re-synced."""
        return await self.load_initial_tasks()

    async def sync_with_remote(self) -> list[TaskRecord]:
        """
        Merge remote tasks into the store: only ids not present locally are added.

        Local edits are never overwritten. On failure the local list is returned
        unchanged and the error is published.
        """
        try:
            remote_tasks = await self._remote.fetch()
        except RemoteFetchError as e:
            logger.warning("Remote sync failed (%s); keeping local tasks", e)
            self._last_error = e
            tasks = self._store.fetch_all()
            self._snapshot = tasks
            self._publish(TaskEvent(TaskEventKind.LOAD_FAILED, tasks=list(tasks), error=e))
            return tasks

        self._last_error = None
        known = {t.id for t in self._store.fetch_all()}
        added = 0
        for task in remote_tasks:
            if task.id in known:
                continue
            if self._store.insert(task):
                added += 1
            known.add(task.id)

        self._store.set_sync_state(SyncState.SYNCED)
        self._remember_remote_total(len(remote_tasks))

        tasks = self._store.fetch_all()
        self._snapshot = tasks
        logger.info("Remote sync added %d new tasks (remote=%d)", added, len(remote_tasks))
        self._publish(TaskEvent(TaskEventKind.SYNCED, tasks=list(tasks)))
        return tasks

    # ---- CRUD ----

    def create_task(self, title: str, description: str = "") -> TaskRecord:
        self._require_title(title)
        record = TaskRecord(
            id=self._store.max_id() + 1,
            title=title,
            description=description or "",
            completed=False,
            owner_id=self._default_owner_id,
            created_at=self._clock(),
        )

        if not self._store.insert(record):
            logger.warning("Task id=%s was not persisted", record.id)
            self._snapshot = self._store.fetch_all()
            return record

        self._snapshot.insert(0, record)
        logger.info("Task created id=%s", record.id)
        self._publish(TaskEvent(TaskEventKind.CREATED, tasks=self.snapshot, record=record))
        return record

    def update_task(self, record: TaskRecord) -> TaskRecord:
        """
        Overwrite title/description/completed of an existing task.

        Identity fields come from the stored row, never from `record`.
        """
        title = self._require_title(record.title)
        current = self._store.get(record.id)
        if current is None:
            raise TaskNotFoundError(record.id)

        updated = replace(
            current,
            title=title,
            description=record.description or "",
            completed=record.completed,
        )
        if not self._store.update(updated):
            logger.warning("Task id=%s update was not persisted", updated.id)
            self._snapshot = self._store.fetch_all()
            return current
        self._replace_in_snapshot(updated)
        self._publish(TaskEvent(TaskEventKind.UPDATED, tasks=self.snapshot, record=updated))
        return updated

    def toggle_completion(self, task_id: int) -> TaskRecord:
        current = self._store.get(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        toggled = replace(current, completed=not current.completed)
        if not self._store.update(toggled):
            logger.warning("Task id=%s toggle was not persisted", toggled.id)
            self._snapshot = self._store.fetch_all()
            return current
        self._replace_in_snapshot(toggled)
        logger.debug("Task toggled id=%s completed=%s", toggled.id, toggled.completed)
        self._publish(TaskEvent(TaskEventKind.TOGGLED, tasks=self.snapshot, record=toggled))
        return toggled

    def delete_task(self, record: TaskRecord) -> bool:
        deleted = self._store.delete(record)
        self._snapshot = self._store.fetch_all()
        if deleted:
            logger.info("Task deleted id=%s", record.id)
        self._publish(TaskEvent(TaskEventKind.DELETED, tasks=self.snapshot, record=record))
        return deleted

    def filter_tasks(
        self, query: str | None, snapshot: Sequence[TaskRecord] | None = None
    ) -> list[TaskRecord]:
        return filter_tasks(query, self._snapshot if snapshot is None else snapshot)
