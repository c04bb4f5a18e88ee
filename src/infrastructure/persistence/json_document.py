"""
infrastructure.persistence.json_document - Single-file JSON document store.

The whole database is one JSON document:

    {"users": [], "clientProfiles": [], "trainingPlans": [],
     "dietPlans": [], "chatMessages": [], "hireRequests": []}

It is loaded once, kept in memory, and rewritten wholesale after every
mutation (write to a temp file, then os.replace). An asyncio.Lock
serialises all access, so every write() block is atomic with respect to
other requests in the process and on disk.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from domain.exceptions import DomainError, UpstreamFailure

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "users",
    "clientProfiles",
    "trainingPlans",
    "dietPlans",
    "chatMessages",
    "hireRequests",
)


def empty_document() -> dict[str, list[dict[str, Any]]]:
    return {name: [] for name in COLLECTIONS}


class JsonDocument:
    """In-memory JSON document persisted to a single file."""

    def __init__(self, path: str):
        self._path = Path(path)
        self._lock = asyncio.Lock()
        self._data: dict[str, list[dict[str, Any]]] | None = None

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> None:
        """Read the file into memory (an absent file is an empty document)."""
        async with self._lock:
            await self._ensure_loaded()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[dict[str, list[dict[str, Any]]]]:
        """Yield the document for reading. Callers must not mutate it."""
        async with self._lock:
            yield await self._ensure_loaded()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[dict[str, list[dict[str, Any]]]]:
        """Yield the document for mutation, then rewrite the file.

        If the block raises, or the file cannot be written, the in-memory
        document is restored to its previous state. The lock is held for the
        whole block, so checks made inside it still hold when it commits.
        """
        async with self._lock:
            data = await self._ensure_loaded()
            snapshot = copy.deepcopy(data)
            try:
                yield data
            except DomainError:
                self._data = snapshot
                raise
            except Exception:
                self._data = snapshot
                logger.exception("Document write failed, changes discarded.")
                raise
            try:
                await self._run(self._dump, data)
            except Exception:
                self._data = snapshot
                logger.exception("Document write failed, changes discarded.")
                raise

    async def _ensure_loaded(self) -> dict[str, list[dict[str, Any]]]:
        if self._data is None:
            self._data = await self._run(self._read_file)
        return self._data

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _read_file(self) -> dict[str, list[dict[str, Any]]]:
        if not self._path.exists():
            logger.info("No document at %s, starting empty", self._path)
            return empty_document()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise UpstreamFailure(f"Cannot read document {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise UpstreamFailure(f"Document {self._path} is not a JSON object")
        data = empty_document()
        for name in COLLECTIONS:
            data[name] = list(raw.get(name) or [])
        logger.info(
            "Loaded document %s (%d users, %d messages)",
            self._path, len(data["users"]), len(data["chatMessages"]),
        )
        return data

    def _dump(self, data: dict[str, list[dict[str, Any]]]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            if self._path.parent and not self._path.parent.exists():
                self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            raise UpstreamFailure(f"Cannot write document {self._path}: {exc}") from exc
