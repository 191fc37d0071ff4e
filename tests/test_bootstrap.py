# tests/test_bootstrap.py

from __future__ import annotations

import asyncio
from pathlib import Path

from todo_sync.cli.bootstrap import build_remote, create_initial_state
from todo_sync.config import Settings
from todo_sync.connectors.console_connector import describe_event, run_console_loop
from todo_sync.core.events import TaskEvent, TaskEventKind
from todo_sync.tasks.task_errors import RemoteErrorKind, RemoteFetchError
from todo_sync.tasks.task_models import LoadState
from todo_sync.tasks.task_remote import DisabledRemoteTaskSource, HttpRemoteTaskSource

from .fakes import FakeRemoteTaskSource, make_task


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODO_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TODO_REMOTE_ENABLED", "no")
    monkeypatch.setenv("TODO_DEFAULT_OWNER_ID", "not-a-number")
    monkeypatch.setenv("TODO_REIMPORT_WHEN_EMPTY", "false")
    monkeypatch.delenv("TODO_TASKS_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.remote_enabled is False
    assert s.default_owner_id == 1
    assert s.reimport_when_empty is False


def test_build_remote_respects_switch(settings) -> None:
    assert isinstance(build_remote(settings), DisabledRemoteTaskSource)

    settings.remote_enabled = True
    remote = build_remote(settings)
    assert isinstance(remote, HttpRemoteTaskSource)
    assert remote.url == settings.remote_url


def test_disabled_remote_loads_empty(settings) -> None:
    state = create_initial_state(settings=settings)

    tasks = asyncio.run(state.reconciler.load_initial_tasks())

    assert tasks == []
    assert state.reconciler.state == LoadState.LOADED_EMPTY
    assert settings.tasks_db_path.exists()


def test_injected_remote_is_wired(settings) -> None:
    remote = FakeRemoteTaskSource([make_task(4, "From remote")])
    state = create_initial_state(settings=settings, remote=remote)

    tasks = asyncio.run(state.reconciler.load_initial_tasks())

    assert [t.id for t in tasks] == [4]
    assert state.store.get(4) is not None


def test_describe_event() -> None:
    err = RemoteFetchError(RemoteErrorKind.EMPTY_PAYLOAD)
    failed = TaskEvent(TaskEventKind.LOAD_FAILED, error=err)
    assert describe_event(failed) == f"[SYNC] {err.user_message()}"
    assert describe_event(TaskEvent(TaskEventKind.LOADED, tasks=[make_task(1)])) == "[SYNC] 1 tasks loaded."
    assert describe_event(TaskEvent(TaskEventKind.CREATED)) is None


def test_console_loop_quick_add_and_exit(state, monkeypatch, capsys) -> None:
    lines = iter(["Buy milk", "/list", "/exit"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(lines))

    run_console_loop(state)

    out = capsys.readouterr().out
    assert "Added: [ ] #1 Buy milk" in out
    assert "1 tasks, 0 completed." in out
    assert state.subscription is None
