# src/todo_sync/core/events.py

"""
Task change notifications.

Every consumer gets its own FIFO queue, so it observes events in exactly the
order the reconciler published them. Publishing never blocks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from ..tasks.task_errors import TaskError
from ..tasks.task_models import TaskRecord

logger = logging.getLogger(__name__)


class TaskEventKind(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    CREATED = "created"
    UPDATED = "updated"
    TOGGLED = "toggled"
    DELETED = "deleted"
    SYNCED = "synced"


@dataclass(slots=True, frozen=True)
class TaskEvent:
    kind: TaskEventKind
    tasks: list[TaskRecord] = field(default_factory=list)
    record: TaskRecord | None = None
    error: TaskError | None = None


class TaskSubscription:
    """One consumer's ordered view of the event stream."""

    def __init__(self, bus: TaskEventBus, name: str) -> None:
        self._bus = bus
        self.name = name
        self._queue: asyncio.Queue[TaskEvent] = asyncio.Queue()

    def _deliver(self, event: TaskEvent) -> None:
        self._queue.put_nowait(event)

    async def get(self) -> TaskEvent:
        return await self._queue.get()

    def drain(self) -> list[TaskEvent]:
        """Return everything queued so far without waiting."""
        out: list[TaskEvent] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return out

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._bus.unsubscribe(self)


class TaskEventBus:
    def __init__(self) -> None:
        self._subscribers: list[TaskSubscription] = []

    def subscribe(self, name: str = "consumer") -> TaskSubscription:
        sub = TaskSubscription(self, name)
        self._subscribers.append(sub)
        logger.debug("Event subscriber added name=%s total=%d", name, len(self._subscribers))
        return sub

    def unsubscribe(self, sub: TaskSubscription) -> None:
        if sub in self._subscribers:
            self._subscribers.remove(sub)
            logger.debug("Event subscriber removed name=%s", sub.name)

    def publish(self, event: TaskEvent) -> None:
        logger.debug("Publish %s to %d subscribers", event.kind.value, len(self._subscribers))
        for sub in list(self._subscribers):
            sub._deliver(event)
