# src/todo_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the concrete store, remote source and event bus into one reconciler.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.events import TaskEventBus
from ..core.ports import RemoteTaskSource
from ..core.state import AppState
from ..tasks.task_reconciler import TaskReconciler
from ..tasks.task_remote import DisabledRemoteTaskSource, HttpRemoteTaskSource
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_remote(settings) -> RemoteTaskSource:
    if not getattr(settings, "remote_enabled", True):
        logger.info("Remote task source disabled by settings.")
        return DisabledRemoteTaskSource()
    return HttpRemoteTaskSource(
        settings.remote_url,
        connect_timeout_s=float(getattr(settings, "remote_connect_timeout_seconds", 5.0)),
        read_timeout_s=float(getattr(settings, "remote_read_timeout_seconds", 15.0)),
    )


def create_initial_state(*, settings=None, remote: RemoteTaskSource | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the remote) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(settings.tasks_db_path)
    if remote is None:
        remote = build_remote(settings)
    events = TaskEventBus()

    reconciler = TaskReconciler(
        store,
        remote,
        events=events,
        default_owner_id=int(getattr(settings, "default_owner_id", 1)),
        reimport_when_empty=bool(getattr(settings, "reimport_when_empty", True)),
    )

    return AppState(
        settings=settings,
        store=store,
        remote=remote,
        events=events,
        reconciler=reconciler,
    )
