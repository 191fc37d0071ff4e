# src/todo_sync/tasks/task_errors.py

from __future__ import annotations

from enum import StrEnum


class TaskError(Exception):
    """Base class for task subsystem errors."""


class StorageError(TaskError):
    """
    Underlying persistence failure.

    Raised inside TaskStore only; the store catches it, logs it and degrades
    to an empty result / no-op. Callers never see it.
    """


class RemoteErrorKind(StrEnum):
    NETWORK = "network"
    DECODING = "decoding"
    EMPTY_PAYLOAD = "empty_payload"


_USER_MESSAGES: dict[RemoteErrorKind, str] = {
    RemoteErrorKind.NETWORK: "Could not reach the task server. Showing local tasks.",
    RemoteErrorKind.DECODING: "The task server sent data we could not read. Showing local tasks.",
    RemoteErrorKind.EMPTY_PAYLOAD: "The task server returned no data. Showing local tasks.",
}


class RemoteFetchError(TaskError):
    """Remote list fetch failed. Never retried automatically."""

    def __init__(self, kind: RemoteErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    def user_message(self) -> str:
        return _USER_MESSAGES.get(self.kind, "Failed to load tasks from the server.")


class TaskValidationError(TaskError, ValueError):
    """Rejected input at the reconciler boundary (e.g. blank title)."""


class TaskNotFoundError(TaskError, LookupError):
    def __init__(self, task_id: int) -> None:
        self.task_id = int(task_id)
        super().__init__(f"task {self.task_id} not found")
