# tests/v1/test_feed_api.py
from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from fastapi import WebSocketDisconnect

from campus_mood.api.v1.endpoints.feed import CONNECTION_ERROR_MESSAGE, live_feed
from campus_mood.core.errors import StoreError
from campus_mood.core.security import create_access_token


class FakeWebSocket:
    """Just enough of a WebSocket to drive the live feed handler."""

    def __init__(self, services: Any, incoming: list[str] | None = None) -> None:
        self.app = SimpleNamespace(state=SimpleNamespace(services=services))
        self.accepted = False
        self.sent: list[Any] = []
        self.closed: tuple[int, str | None] | None = None
        self._incoming = list(incoming or [])

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: Any) -> None:
        self.sent.append(data)

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    async def receive_text(self) -> str:
        if self._incoming:
            return self._incoming.pop(0)
        raise WebSocketDisconnect(code=1000)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed = (code, reason)


@pytest.mark.asyncio
async def test_live_feed_sends_snapshot_and_answers_ping(services) -> None:
    await services.store.create_post(author_id="author", mood="crush_a_pathen", text="library")
    websocket = FakeWebSocket(services, incoming=["ping"])

    await live_feed(websocket, create_access_token("viewer", "viewer@campus.edu"))

    assert websocket.accepted
    snapshot = websocket.sent[0]
    assert snapshot["type"] == "posts"
    assert snapshot["committed_seq"] == 0
    assert [post["text"] for post in snapshot["posts"]] == ["library"]
    assert "author_id" not in snapshot["posts"][0]
    assert websocket.sent[1] == "pong"
    assert services.store.subscriber_count == 0


@pytest.mark.asyncio
async def test_live_feed_rejects_bad_token(services) -> None:
    websocket = FakeWebSocket(services)

    await live_feed(websocket, "nope")

    assert not websocket.accepted
    assert websocket.closed == (1008, "Invalid token")


@pytest.mark.asyncio
async def test_live_feed_reports_store_errors(services, mocker) -> None:
    mocker.patch.object(services.store, "_fetch", side_effect=StoreError())
    websocket = FakeWebSocket(services)

    await live_feed(websocket, create_access_token("viewer", "viewer@campus.edu"))

    assert websocket.sent == [{"type": "error", "detail": CONNECTION_ERROR_MESSAGE}]
    assert websocket.closed is not None
