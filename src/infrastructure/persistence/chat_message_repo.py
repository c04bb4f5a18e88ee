"""
infrastructure.persistence.chat_message_repo - SQLite chat message store.

Stores direct messages between two users. Messages are never updated or
deleted.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from domain.entities import ChatMessage
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.identity import new_id, now_iso

logger = logging.getLogger(__name__)


class SQLiteChatStore:
    """Async SQLite implementation of ChatStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, message: ChatMessage) -> ChatMessage:
        stored = replace(
            message,
            id=message.id or new_id(),
            timestamp=message.timestamp or now_iso(),
        )
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO chat_messages
                   (id, sender_id, receiver_id, text, timestamp)
                   VALUES (?, ?, ?, ?, ?)""",
                (stored.id, stored.sender_id, stored.receiver_id,
                 stored.text, stored.timestamp),
            )
        return stored

    async def get_between(self, user_id: str, other_id: str) -> list[ChatMessage]:
        """All messages of the pair, oldest first; ties keep insertion order."""
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM chat_messages
                   WHERE (sender_id = ? AND receiver_id = ?)
                      OR (sender_id = ? AND receiver_id = ?)
                   ORDER BY timestamp ASC, rowid ASC""",
                (user_id, other_id, other_id, user_id),
            )
            return [self._row_to_entity(r) for r in rows]

    @staticmethod
    def _row_to_entity(row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            text=row["text"] or "",
            timestamp=row["timestamp"],
        )
