"""
infrastructure.realtime.registry - Process-local live chat connections.

Maps a user id to its open WebSocket (or any object with an async
send_json()). Implements the LiveChannel port: push() relays a stored
message to whichever of its two participants is connected to THIS
process. The map is not shared between processes or hosts, so a message
is only pushed live when both parties happen to be on the same process.
Clients poll the history endpoint regardless.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Protocol

from domain.entities import ChatMessage

logger = logging.getLogger(__name__)


class ConnectionHandle(Protocol):
    async def send_json(self, data: Any) -> None: ...


def message_frame(message: ChatMessage) -> dict[str, Any]:
    """Wire frame for a pushed chat message."""
    return {
        "type": "chat",
        "message": {
            "id": message.id,
            "senderId": message.sender_id,
            "receiverId": message.receiver_id,
            "text": message.text,
            "timestamp": message.timestamp,
        },
    }


class ConnectionRegistry:
    """user_id -> open connection. One connection per user; the newest wins."""

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionHandle] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def register(self, user_id: str, handle: ConnectionHandle) -> None:
        if user_id in self._connections:
            logger.info("User %s reconnected, replacing previous connection", user_id)
        self._connections[user_id] = handle

    def lookup(self, user_id: str) -> Optional[ConnectionHandle]:
        return self._connections.get(user_id)

    def unregister(self, user_id: str, handle: Optional[ConnectionHandle] = None) -> None:
        """Drop the user's connection.

        With *handle*, only drop it if it is still the registered one, so a
        stale socket closing late cannot evict a newer connection.
        """
        current = self._connections.get(user_id)
        if current is None:
            return
        if handle is not None and current is not handle:
            return
        del self._connections[user_id]

    @asynccontextmanager
    async def connected(
        self, user_id: str, handle: ConnectionHandle,
    ) -> AsyncIterator[ConnectionHandle]:
        """Register for the duration of the block; always unregister on exit."""
        self.register(user_id, handle)
        logger.info("Live channel open for user %s (%d connected)", user_id, len(self))
        try:
            yield handle
        finally:
            self.unregister(user_id, handle)
            logger.info("Live channel closed for user %s (%d connected)", user_id, len(self))

    async def push(self, message: ChatMessage) -> None:
        """Send *message* to its receiver and its sender if connected here.

        Never raises. A connection that fails to send is dropped.
        """
        frame = message_frame(message)
        for user_id in dict.fromkeys((message.receiver_id, message.sender_id)):
            handle = self.lookup(user_id)
            if handle is None:
                continue
            try:
                await handle.send_json(frame)
            except Exception as exc:
                logger.warning(
                    "Live push of message %s to user %s failed (%s); dropping connection",
                    message.id, user_id, exc,
                )
                self.unregister(user_id, handle)
