# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The reconciler depends on Protocols instead of concrete implementations.
This keeps the storage engine and the remote endpoint swappable and makes
testing easier.
"""

from typing import Iterable, Protocol

from ..tasks.task_models import SyncState, TaskRecord


class RemoteTaskSource(Protocol):
    """
    Read-only remote list of tasks.

    Either the full list comes back or the call raises RemoteFetchError.
    Records carry remote-assigned ids and owner ids.
    """

    async def fetch(self) -> list[TaskRecord]: ...


class TaskRepo(Protocol):
    # Bulk import
    def replace_all(self, records: Iterable[TaskRecord]) -> bool: ...

    # Queries
    def fetch_all(self) -> list[TaskRecord]: ...
    def get(self, task_id: int) -> TaskRecord | None: ...
    def max_id(self) -> int: ...
    def count_tasks(self) -> int: ...

    # Single-record writes
    def insert(self, record: TaskRecord) -> bool: ...
    def update(self, record: TaskRecord) -> bool: ...
    def delete(self, record: TaskRecord) -> bool: ...

    # Sync bookkeeping
    def get_sync_state(self) -> SyncState: ...
    def set_sync_state(self, state: SyncState) -> None: ...
