# tests/test_task_remote.py

from __future__ import annotations

import httpx
import pytest

from todo_sync.tasks.task_errors import RemoteErrorKind, RemoteFetchError
from todo_sync.tasks.task_remote import (
    DisabledRemoteTaskSource,
    HttpRemoteTaskSource,
    decode_page,
)

URL = "https://example.invalid/todos"

PAYLOAD = {
    "todos": [
        {"id": 1, "todo": "Do something nice for someone you care about", "completed": False, "userId": 152},
        {"id": 2, "todo": "Memorize a poem", "description": "any poem", "completed": True, "userId": 13},
    ],
    "total": 254,
    "skip": 0,
    "limit": 2,
}


def _source(handler) -> tuple[HttpRemoteTaskSource, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpRemoteTaskSource(URL, client=client), client


def test_decode_defaults_missing_description() -> None:
    page = decode_page(PAYLOAD, imported_at=10.0)

    first, second = page.tasks
    assert first.description == ""
    assert first.owner_id == 152
    assert first.created_at == 10.0
    assert second.description == "any poem"
    assert second.completed is True
    assert page.total == 254


def test_decode_accepts_title_and_owner_aliases() -> None:
    page = decode_page(
        {"todos": [{"id": 5, "title": "Alias", "completed": False, "ownerId": 3}]},
        imported_at=1.0,
    )
    [task] = page.tasks
    assert (task.id, task.title, task.owner_id) == (5, "Alias", 3)
    assert page.total == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"todos": [{"id": 1, "completed": False, "userId": 1}]},
        {"todos": [{"todo": "no id", "completed": False, "userId": 1}]},
        {"todos": [{"id": 1, "todo": "x", "completed": "yes", "userId": 1}]},
        {"todos": "not a list"},
        ["not", "an", "object"],
    ],
)
def test_decode_rejects_bad_shapes(payload) -> None:
    with pytest.raises(RemoteFetchError) as exc:
        decode_page(payload)
    assert exc.value.kind == RemoteErrorKind.DECODING


def test_decode_rejects_empty_payload() -> None:
    with pytest.raises(RemoteFetchError) as exc:
        decode_page(None)
    assert exc.value.kind == RemoteErrorKind.EMPTY_PAYLOAD


@pytest.mark.asyncio
async def test_fetch_returns_records_and_remembers_total() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=PAYLOAD)

    source, client = _source(handler)
    async with client:
        tasks = await source.fetch()

    assert [t.id for t in tasks] == [1, 2]
    assert source.last_total == 254
    assert str(seen[0].url) == URL


@pytest.mark.asyncio
async def test_http_error_status_is_network_error() -> None:
    source, client = _source(lambda request: httpx.Response(503, text="down"))
    async with client:
        with pytest.raises(RemoteFetchError) as exc:
            await source.fetch()
    assert exc.value.kind == RemoteErrorKind.NETWORK


@pytest.mark.asyncio
async def test_transport_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    source, client = _source(handler)
    async with client:
        with pytest.raises(RemoteFetchError) as exc:
            await source.fetch()
    assert exc.value.kind == RemoteErrorKind.NETWORK
    assert exc.value.user_message()


@pytest.mark.asyncio
async def test_invalid_json_is_decoding_error() -> None:
    source, client = _source(lambda request: httpx.Response(200, text="<html>oops</html>"))
    async with client:
        with pytest.raises(RemoteFetchError) as exc:
            await source.fetch()
    assert exc.value.kind == RemoteErrorKind.DECODING


@pytest.mark.asyncio
async def test_empty_body_is_empty_payload() -> None:
    source, client = _source(lambda request: httpx.Response(200, content=b""))
    async with client:
        with pytest.raises(RemoteFetchError) as exc:
            await source.fetch()
    assert exc.value.kind == RemoteErrorKind.EMPTY_PAYLOAD


@pytest.mark.asyncio
async def test_disabled_source_always_fails() -> None:
    with pytest.raises(RemoteFetchError) as exc:
        await DisabledRemoteTaskSource().fetch()
    assert exc.value.kind == RemoteErrorKind.NETWORK


def test_blank_url_is_rejected() -> None:
    with pytest.raises(ValueError):
        HttpRemoteTaskSource("  ")
