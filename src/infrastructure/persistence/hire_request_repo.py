"""
infrastructure.persistence.hire_request_repo - SQLite hire request store.

Implements the HireRequestStore port. save_transition() re-checks the
transition's precondition and writes the request and the client's
relationship fields inside one transaction, so neither a crash nor an
overlapping request can leave a resolved request next to a stale client.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from domain.entities import HireRequest, RequestStatus, Role, TrainerStatus, User
from domain.exceptions import InvalidStateTransition
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.identity import new_id, now_iso

logger = logging.getLogger(__name__)


class SQLiteHireRequestStore:
    """Async SQLite implementation of HireRequestStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, request_id: str) -> Optional[HireRequest]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM hire_requests WHERE id = ?", (request_id,),
            )
            return self._row_to_entity(rows[0]) if rows else None

    async def list_for_trainer(
        self, trainer_id: str, status: RequestStatus,
    ) -> list[HireRequest]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM hire_requests
                   WHERE trainer_id = ? AND status = ?
                   ORDER BY created_at ASC""",
                (trainer_id, RequestStatus(status).value),
            )
            return [self._row_to_entity(r) for r in rows]

    async def save_transition(
        self, request: HireRequest, client: Optional[User],
    ) -> HireRequest:
        """Insert or resolve *request* and move *client*'s trainer link with it.

        A request without an id is new: the client row is claimed first with
        a conditional UPDATE (still a client, still at 'none'), so two
        overlapping requests cannot both go through. A request with an id is
        being answered: its status only changes while it is still 'pending',
        and the client is only touched while it still waits on that trainer.
        Both checks run inside the same transaction as the writes.
        """
        now = now_iso()
        async with self._conn.acquire() as conn:
            if not request.id:
                stored = replace(request, id=new_id(), created_at=now, updated_at=now)
                claimed = await conn.execute(
                    """UPDATE users
                       SET trainer_id = ?, trainer_status = ?, updated_at = ?
                       WHERE id = ? AND role = ? AND trainer_status = ?""",
                    (stored.trainer_id, TrainerStatus.PENDING.value, now,
                     stored.client_id, Role.CLIENT.value, TrainerStatus.NONE.value),
                )
                if claimed.rowcount != 1:
                    raise InvalidStateTransition(
                        "You already have a trainer or a pending request."
                    )
                await conn.execute(
                    """INSERT INTO hire_requests
                       (id, client_id, trainer_id, status, created_at, updated_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (stored.id, stored.client_id, stored.trainer_id,
                     RequestStatus(stored.status).value, now, now),
                )
                return stored

            stored = replace(request, updated_at=now)
            resolved = await conn.execute(
                """UPDATE hire_requests SET status = ?, updated_at = ?
                   WHERE id = ? AND status = ?""",
                (RequestStatus(stored.status).value, now, stored.id,
                 RequestStatus.PENDING.value),
            )
            if resolved.rowcount != 1:
                raise InvalidStateTransition(
                    f"Request '{stored.id}' was already answered."
                )

            if client is not None:
                moved = await conn.execute(
                    """UPDATE users
                       SET trainer_id = ?, trainer_status = ?, updated_at = ?
                       WHERE id = ? AND trainer_id = ? AND trainer_status = ?""",
                    (client.trainer_id, TrainerStatus(client.trainer_status).value,
                     now, client.id, stored.trainer_id, TrainerStatus.PENDING.value),
                )
                if moved.rowcount == 0:
                    logger.warning(
                        "Client %s no longer waits on request %s, left unchanged",
                        client.id, stored.id,
                    )
        return stored

    @staticmethod
    def _row_to_entity(row) -> HireRequest:
        return HireRequest(
            id=row["id"],
            client_id=row["client_id"],
            trainer_id=row["trainer_id"],
            status=RequestStatus(row["status"]),
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
