# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_sync.core.events import TaskEventBus
from todo_sync.core.state import AppState
from todo_sync.tasks.task_reconciler import TaskReconciler
from todo_sync.tasks.task_store import TaskStore

from .fakes import FakeRemoteTaskSource


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="INFO",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        log_dir=tmp_path,
        # Remote
        remote_enabled=False,
        remote_url="https://example.invalid/todos",
        remote_connect_timeout_seconds=1.0,
        remote_read_timeout_seconds=1.0,
        # Policy
        default_owner_id=1,
        reimport_when_empty=True,
        console_enabled=True,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    # Real SQLite store: its correctness is part of what we want to test.
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def remote() -> FakeRemoteTaskSource:
    return FakeRemoteTaskSource()


@pytest.fixture()
def events() -> TaskEventBus:
    return TaskEventBus()


@pytest.fixture()
def reconciler(
    store: TaskStore, remote: FakeRemoteTaskSource, events: TaskEventBus
) -> TaskReconciler:
    return TaskReconciler(store, remote, events=events, clock=_Clock())


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    store: TaskStore,
    remote: FakeRemoteTaskSource,
    events: TaskEventBus,
    reconciler: TaskReconciler,
) -> AppState:
    return AppState(
        settings=settings,
        store=store,
        remote=remote,
        events=events,
        reconciler=reconciler,
    )


class _Clock:
    """Strictly increasing fake time so creation order is unambiguous."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now
