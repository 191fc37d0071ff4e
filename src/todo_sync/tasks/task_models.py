# src/todo_sync/tasks/task_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any


class SyncState(StrEnum):
    """
    Whether the store has ever adopted a remote snapshot.

    Persisted next to the tasks so the answer survives restarts.
    """

    NEVER_SYNCED = "never_synced"
    SYNCED = "synced"

    @classmethod
    def from_db(cls, raw: str | None) -> SyncState:
        if not raw:
            return cls.NEVER_SYNCED
        try:
            return cls(raw)
        except ValueError:
            return cls.NEVER_SYNCED


class LoadState(StrEnum):
    """Reconciler load lifecycle: NOT_LOADED -> LOADING -> LOADED_*."""

    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED_LOCAL = "loaded_local"
    LOADED_REMOTE = "loaded_remote"
    LOADED_EMPTY = "loaded_empty"  # remote failed, store empty

    @property
    def is_loaded(self) -> bool:
        return self in (LoadState.LOADED_LOCAL, LoadState.LOADED_REMOTE, LoadState.LOADED_EMPTY)


@dataclass(slots=True, frozen=True)
class TaskRecord:
    id: int
    title: str
    description: str
    completed: bool
    owner_id: int
    created_at: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class RemoteTaskPage:
    """One decoded remote response. skip/limit are carried but unused."""

    tasks: list[TaskRecord] = field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0
