"""
Notifications WebSocket Router

Streams real-time events to admin dashboards.

Endpoints:
- WS /ws/notifications?token=<admin token>

Each message is a JSON object: {"type": "<EVENT>", "data": {...}}.
Delivery is at-most-once; a client that falls behind loses messages.
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from tutormatch.core import notifications
from tutormatch.core.auth import AuthenticatedUser, validate_token

logger = logging.getLogger(__name__)

router = APIRouter()


def _authenticate(token: str | None) -> AuthenticatedUser | None:
    """Return the admin behind the token, or None if it is missing or not an admin."""
    if not token:
        return None
    try:
        user = validate_token(token)
    except HTTPException:
        return None
    return user if user.is_admin else None


async def _forward(websocket: WebSocket, queue: asyncio.Queue[str]) -> None:
    while True:
        message = await queue.get()
        await websocket.send_text(message)


async def _drain(websocket: WebSocket) -> None:
    # Incoming messages are ignored; receiving surfaces the disconnect
    while True:
        await websocket.receive_text()


@router.websocket("/ws/notifications")
async def notifications_stream(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    admin = _authenticate(token)
    if admin is None:
        logger.warning("Rejected notifications connection: missing or non-admin token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    broker = notifications.get_broker()
    if broker is None:
        logger.error("Notifications connection refused: broker not running")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    await websocket.accept()
    queue = broker.subscribe()
    logger.info(f"Admin {admin.id} connected to notifications")

    tasks = [
        asyncio.create_task(_forward(websocket, queue)),
        asyncio.create_task(_drain(websocket)),
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.error(f"Notifications stream for admin {admin.id} failed: {error}")
    finally:
        for task in tasks:
            task.cancel()
            # Errors were logged above
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        broker.unsubscribe(queue)
        logger.info(f"Admin {admin.id} disconnected from notifications")
