# tests/fakes.py

from __future__ import annotations

from todo_sync.tasks.task_errors import RemoteFetchError
from todo_sync.tasks.task_models import TaskRecord


def make_task(
    task_id: int,
    title: str = "Task",
    *,
    description: str = "",
    completed: bool = False,
    owner_id: int = 1,
    created_at: float = 1_700_000_000.0,
) -> TaskRecord:
    return TaskRecord(
        id=task_id,
        title=title,
        description=description,
        completed=completed,
        owner_id=owner_id,
        created_at=created_at,
    )


class FakeRemoteTaskSource:
    """
    Deterministic RemoteTaskSource for unit tests.

    - Counts fetch() calls for "was the remote consulted?" assertions
    - Returns a copy of `tasks`, or raises `error` when set
    """

    def __init__(
        self,
        tasks: list[TaskRecord] | None = None,
        *,
        error: RemoteFetchError | None = None,
    ) -> None:
        self.tasks = list(tasks or [])
        self.error = error
        self.calls = 0
        self.last_total: int | None = None

    async def fetch(self) -> list[TaskRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        self.last_total = len(self.tasks)
        return list(self.tasks)
