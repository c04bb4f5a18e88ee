"""
adapters.client.chat_sync - Keeping a chat view in sync with the server.

Two delivery paths feed the same ChatFeed:

  - polling: the full history of the pair is fetched every poll_interval
    seconds. This is the source of truth and always runs.
  - live channel: a WebSocket subscription that merges pushed messages
    as soon as they arrive. It is best effort; when it cannot connect or
    drops, polling still delivers everything.

Messages are deduplicated by id, so receiving the same message over both
paths (or twice from the same one) shows it once.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Callable, Iterable, Optional

import websockets
from websockets.exceptions import WebSocketException

from domain.entities import ChatMessage
from domain.exceptions import DomainError
from adapters.client.api_client import ApiClient, message_from_wire

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class ChatFeed:
    """Ordered, deduplicated messages of one user pair."""

    def __init__(self, user_id: str, other_id: str):
        self.user_id = user_id
        self.other_id = other_id
        self._messages: list[ChatMessage] = []
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def merge(self, messages: Iterable[ChatMessage]) -> list[ChatMessage]:
        """Add unseen messages of this pair. Returns the ones added."""
        added = []
        for message in messages:
            if message.id in self._seen:
                continue
            if not message.involves(self.user_id, self.other_id):
                continue
            self._seen.add(message.id)
            self._messages.append(message)
            added.append(message)
        if added:
            # sort is stable: equal timestamps keep arrival order
            self._messages.sort(key=lambda m: m.timestamp)
        return added


class ChatSession:
    """Async coordinator for one open conversation."""

    def __init__(
        self,
        api: ApiClient,
        user_id: str,
        other_id: str,
        ws_url: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_message: Optional[Callable[[ChatMessage], None]] = None,
    ):
        self._api = api
        self._ws_url = ws_url
        self._poll_interval = poll_interval
        self._on_message = on_message
        self.feed = ChatFeed(user_id, other_id)
        self.draft = ""

    async def refresh(self) -> list[ChatMessage]:
        """Fetch the full history once and merge it."""
        loop = asyncio.get_running_loop()
        history = await loop.run_in_executor(
            None, self._api.history, self.feed.user_id, self.feed.other_id,
        )
        return self._merge(history)

    async def poll_forever(self) -> None:
        """Refresh every poll_interval seconds until cancelled."""
        while True:
            try:
                await self.refresh()
            except DomainError as exc:
                logger.warning("Chat poll failed: %s", exc)
            await asyncio.sleep(self._poll_interval)

    async def subscribe(self) -> None:
        """Merge pushed messages until the live channel closes.

        Connection problems are logged and swallowed; polling covers them.
        """
        if not self._ws_url:
            return
        try:
            async with websockets.connect(self._ws_url) as ws:
                await ws.send(json.dumps({
                    "type": "auth",
                    "userId": self.feed.user_id,
                    "token": self._api.token,
                }))
                async for raw in ws:
                    self._handle_frame(raw)
        except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
            logger.warning("Live channel unavailable (%s); relying on polling", exc)

    async def send(self, text: str) -> ChatMessage:
        """Send over REST. On failure the text stays in ``draft``."""
        self.draft = text
        loop = asyncio.get_running_loop()
        message = await loop.run_in_executor(
            None, self._api.send, self.feed.user_id, self.feed.other_id, text,
        )
        self.draft = ""
        self._merge([message])
        return message

    def _handle_frame(self, raw) -> None:
        try:
            frame = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed live frame")
            return
        kind = frame.get("type") if isinstance(frame, dict) else None
        if kind == "chat":
            try:
                message = message_from_wire(frame["message"])
            except (KeyError, TypeError):
                logger.warning("Ignoring incomplete chat frame")
                return
            self._merge([message])
        elif kind == "ready":
            logger.info("Live channel ready for user %s", frame.get("userId"))
        elif kind == "error":
            logger.warning("Live channel error: %s", frame.get("detail"))

    def _merge(self, messages: Iterable[ChatMessage]) -> list[ChatMessage]:
        added = self.feed.merge(messages)
        if self._on_message is not None:
            for message in added:
                self._on_message(message)
        return added
