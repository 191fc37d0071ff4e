# src/todo_sync/tasks/task_remote.py

from __future__ import annotations

"""
Remote task source.

A single read-only "list tasks" call. The payload is the public DummyJSON
shape:

    {"todos": [{"id": 1, "todo": "...", "completed": false, "userId": 26}, ...],
     "total": 254, "skip": 0, "limit": 30}

`description` is optional per item and defaults to "". `title`/`ownerId`
are accepted as aliases for `todo`/`userId`.
"""

import logging
import time
from typing import Any

import httpx

from .task_errors import RemoteErrorKind, RemoteFetchError
from .task_models import RemoteTaskPage, TaskRecord

logger = logging.getLogger(__name__)


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"{field_name} is not an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"{field_name}={value!r}") from e


def decode_task(item: Any, *, imported_at: float) -> TaskRecord:
    """Decode one remote item. Raises RemoteFetchError(DECODING) on a bad shape."""
    if not isinstance(item, dict):
        raise RemoteFetchError(RemoteErrorKind.DECODING, "task item is not an object")

    if "id" not in item:
        raise RemoteFetchError(RemoteErrorKind.DECODING, "task item has no id")
    task_id = _as_int(item["id"], "id")

    title = item.get("todo", item.get("title"))
    if not isinstance(title, str):
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"task {task_id} has no title")

    description = item.get("description")
    if description is None:
        description = ""
    elif not isinstance(description, str):
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"task {task_id} description is not text")

    completed = item.get("completed", False)
    if not isinstance(completed, bool):
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"task {task_id} completed is not a bool")

    owner_raw = item.get("userId", item.get("ownerId"))
    if owner_raw is None:
        raise RemoteFetchError(RemoteErrorKind.DECODING, f"task {task_id} has no owner")

    return TaskRecord(
        id=task_id,
        title=title,
        description=description,
        completed=completed,
        owner_id=_as_int(owner_raw, "userId"),
        created_at=imported_at,
    )


def decode_page(payload: Any, *, imported_at: float | None = None) -> RemoteTaskPage:
    """
    Decode the whole response envelope.

    All-or-nothing: one bad item fails the page, there is no partial result.
    """
    if payload is None or payload == {}:
        raise RemoteFetchError(RemoteErrorKind.EMPTY_PAYLOAD)
    if not isinstance(payload, dict):
        raise RemoteFetchError(RemoteErrorKind.DECODING, "payload is not an object")

    raw_tasks = payload.get("todos")
    if not isinstance(raw_tasks, list):
        raise RemoteFetchError(RemoteErrorKind.DECODING, "payload has no todos list")

    ts = time.time() if imported_at is None else float(imported_at)
    tasks = [decode_task(item, imported_at=ts) for item in raw_tasks]

    return RemoteTaskPage(
        tasks=tasks,
        total=_as_int(payload.get("total", len(tasks)), "total"),
        skip=_as_int(payload.get("skip", 0), "skip"),
        limit=_as_int(payload.get("limit", len(tasks)), "limit"),
    )


class HttpRemoteTaskSource:
    """
    RemoteTaskSource over HTTP (httpx).

    A client can be injected (tests pass one built on httpx.MockTransport);
    otherwise a short-lived AsyncClient is opened per fetch.
    """

    def __init__(
        self,
        url: str,
        *,
        connect_timeout_s: float = 5.0,
        read_timeout_s: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url or not url.strip():
            raise ValueError("remote url is required")
        self._url = url.strip()
        self._timeout = _make_timeout(connect_timeout_s, read_timeout_s)
        self._client = client
        self.last_total: int | None = None

    @property
    def url(self) -> str:
        return self._url

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        try:
            resp = await client.get(self._url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(
                RemoteErrorKind.NETWORK, f"HTTP {e.response.status_code} from {self._url}"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(RemoteErrorKind.NETWORK, f"{type(e).__name__}: {e}") from e

    async def fetch_page(self) -> RemoteTaskPage:
        t0 = time.monotonic()
        if self._client is not None:
            resp = await self._get(self._client)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await self._get(client)

        if not resp.content or not resp.content.strip():
            raise RemoteFetchError(RemoteErrorKind.EMPTY_PAYLOAD)

        try:
            payload = resp.json()
        except ValueError as e:
            raise RemoteFetchError(RemoteErrorKind.DECODING, "response is not JSON") from e

        page = decode_page(payload)
        self.last_total = page.total
        logger.info(
            "Fetched %d remote tasks (total=%d) from %s in %.0fms",
            len(page.tasks),
            page.total,
            self._url,
            (time.monotonic() - t0) * 1000.0,
        )
        return page

    async def fetch(self) -> list[TaskRecord]:
        page = await self.fetch_page()
        return page.tasks


class DisabledRemoteTaskSource:
    """Used when the remote is switched off in settings: every fetch fails."""

    last_total: int | None = None

    async def fetch(self) -> list[TaskRecord]:
        raise RemoteFetchError(RemoteErrorKind.NETWORK, "remote task source is disabled")
