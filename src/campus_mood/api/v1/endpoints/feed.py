# src/campus_mood/api/v1/endpoints/feed.py
"""Live feed over WebSocket."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from campus_mood.api.v1.dependencies import authenticate
from campus_mood.api.v1.endpoints.posts import to_post_response
from campus_mood.models import Post
from campus_mood.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["feed"])

CONNECTION_ERROR_MESSAGE = "Connection error. Please refresh."


@router.websocket("/live")
async def live_feed(websocket: WebSocket, token: str) -> None:
    """Push the newest posts to the client after every change.

    Clients connect via ``/api/v1/feed/live?token=<identity token>``. Each
    message carries the newest page plus ``committed_seq``, the highest
    reaction batch entry the snapshot is known to include. On a store error
    the server sends an error message and closes; the client reconnects
    manually.
    """
    services: ServiceContainer = websocket.app.state.services
    try:
        identity = authenticate(token, services)
    except HTTPException as err:
        reason = "Invalid token" if err.status_code == status.HTTP_401_UNAUTHORIZED else err.detail
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=reason)
        return

    await websocket.accept()

    async def send_posts(posts: list[Post], committed_seq: int) -> None:
        await websocket.send_json(
            {
                "type": "posts",
                "committed_seq": committed_seq,
                "posts": [
                    to_post_response(post, identity.user_id).model_dump(mode="json")
                    for post in posts
                ],
            }
        )

    async def send_error(exc: Exception) -> None:
        logger.warning("Live feed for %s failed: %s", identity.user_id, exc)
        await websocket.send_json({"type": "error", "detail": CONNECTION_ERROR_MESSAGE})
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)

    unsubscribe = await services.store.subscribe_recent(send_posts, on_error=send_error)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("Live feed disconnected for %s", identity.user_id)
    finally:
        unsubscribe()
