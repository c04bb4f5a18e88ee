"""WebSocket endpoint for the live chat channel."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from adapters.rest.dependencies import get_factory
from domain.exceptions import AuthenticationError, DomainError

router = APIRouter()
logger = logging.getLogger(__name__)

_AUTH_FAILED = 4001


@router.websocket("/ws")
async def websocket_chat(ws: WebSocket):
    """
    Live chat channel.

    Protocol:
      - First frame (client -> server):
            {"type": "auth", "userId": "...", "token": "<JWT>"}
        A bad token, or a userId that differs from the token's, closes the
        socket with code 4001. On success the server answers
            {"type": "ready", "userId": "..."}
        once the connection is registered for pushes.
      - Then:  {"type": "chat", "receiverId": "...", "text": "..."}
        handled exactly like POST /chat (stored first, then relayed).
      - Server pushes {"type": "chat", "message": {...}} for every message
        this user sends or receives while connected to this process.
      - Domain errors come back as {"type": "error", "detail": "..."} and
        the socket stays open.

    The channel is best effort. Clients keep polling GET /chat for history.
    """
    factory = get_factory()
    await ws.accept()

    try:
        user_id = await _authenticate(ws, factory)
    except WebSocketDisconnect:
        return
    if user_id is None:
        await ws.close(code=_AUTH_FAILED, reason="Invalid or expired token")
        return

    chat_service = factory.create_chat_service()
    try:
        async with factory.registry.connected(user_id, ws):
            await ws.send_json({"type": "ready", "userId": user_id})
            while True:
                try:
                    frame = await ws.receive_json()
                except ValueError:
                    await ws.send_json({"type": "error", "detail": "Frames must be JSON."})
                    continue
                await _handle_frame(ws, chat_service, user_id, frame)
    except WebSocketDisconnect:
        logger.debug("WS user=%s disconnected", user_id)


async def _authenticate(ws: WebSocket, factory) -> str | None:
    """Read the auth frame. Returns the user id, or None when rejected."""
    try:
        frame = await ws.receive_json()
    except ValueError:
        return None
    if not isinstance(frame, dict) or frame.get("type") != "auth":
        return None

    try:
        payload = factory.create_authentication_service().verify_token(
            str(frame.get("token", "")),
        )
    except AuthenticationError as exc:
        logger.info("WS auth rejected: %s", exc)
        return None
    if payload["user_id"] != frame.get("userId"):
        logger.info("WS auth rejected: userId does not match token")
        return None
    return payload["user_id"]


async def _handle_frame(ws: WebSocket, chat_service, user_id: str, frame) -> None:
    if not isinstance(frame, dict) or frame.get("type") != "chat":
        kind = frame.get("type") if isinstance(frame, dict) else None
        await ws.send_json({"type": "error", "detail": f"Unsupported frame type: {kind!r}"})
        return
    try:
        # The sender's own copy arrives through the registry push.
        await chat_service.send(
            user_id, str(frame.get("receiverId", "")), str(frame.get("text", "")),
        )
    except DomainError as exc:
        logger.info("WS user=%s | %s: %s", user_id, type(exc).__name__, exc)
        await ws.send_json({"type": "error", "detail": str(exc)})
