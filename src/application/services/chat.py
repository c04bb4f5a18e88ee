"""
application.services.chat - Direct messages between connected pairs.

Every message is persisted through the ChatStore before anything else
happens; only then is it handed to the live channel, whose failures are
logged and otherwise ignored. History reads re-check the access guard on
every call.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import ChatMessage
from domain.exceptions import ValidationError
from domain.ports import ChatStore, LiveChannel
from application.services.access_guard import AccessGuard

logger = logging.getLogger(__name__)


class ChatService:
    """Send and read messages; relay new ones over the live channel."""

    def __init__(
        self,
        chat_store: ChatStore,
        guard: AccessGuard,
        live_channel: Optional[LiveChannel] = None,
    ):
        self._messages = chat_store
        self._guard = guard
        self._live = live_channel

    async def send(self, sender_id: str, receiver_id: str, text: str) -> ChatMessage:
        if text is None or not text.strip():
            raise ValidationError("Message text must not be empty.")
        await self._guard.require_connected(sender_id, receiver_id)

        message = await self._messages.save(ChatMessage(
            sender_id=sender_id,
            receiver_id=receiver_id,
            text=text,
        ))
        logger.debug("Stored message %s from %s to %s", message.id, sender_id, receiver_id)

        if self._live is not None:
            try:
                await self._live.push(message)
            except Exception:
                logger.exception("Live relay of message %s failed", message.id)
        return message

    async def fetch_history(self, user_id: str, other_id: str) -> list[ChatMessage]:
        """All messages of the pair in ascending timestamp order."""
        await self._guard.require_connected(user_id, other_id)
        messages = await self._messages.get_between(user_id, other_id)
        return sorted(messages, key=lambda m: m.timestamp)
