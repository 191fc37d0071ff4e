# src/todo_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..core.events import TaskEventBus, TaskSubscription
from ..core.ports import RemoteTaskSource, TaskRepo
from ..tasks.task_reconciler import TaskReconciler


@dataclass
class AppState:
    # Settings object (real Settings or a test SimpleNamespace).
    settings: object

    store: TaskRepo
    remote: RemoteTaskSource
    events: TaskEventBus
    reconciler: TaskReconciler

    # The presentation layer's own ordered event stream (set by the connector).
    subscription: TaskSubscription | None = None
