"""
infrastructure.persistence.user_repo - SQLite user store.

Implements the UserStore port. specialties / certifications are stored as
JSON text columns.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Optional

from domain.entities import User, Role, TrainerStatus
from domain.exceptions import NotFound
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.identity import new_id, now_iso

logger = logging.getLogger(__name__)


class SQLiteUserStore:
    """Async SQLite implementation of UserStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, user_id: str) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE id = ?", (user_id,),
            )
            return row_to_user(rows[0]) if rows else None

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE email = ?", (email,),
            )
            return row_to_user(rows[0]) if rows else None

    async def list_by_role(self, role: Role) -> list[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE role = ? ORDER BY created_at ASC",
                (Role(role).value,),
            )
            return [row_to_user(r) for r in rows]

    async def list_clients_of(
        self, trainer_id: str, status: TrainerStatus,
    ) -> list[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM users
                   WHERE role = ? AND trainer_id = ? AND trainer_status = ?
                   ORDER BY updated_at ASC""",
                (Role.CLIENT.value, trainer_id, TrainerStatus(status).value),
            )
            return [row_to_user(r) for r in rows]

    async def list_all(self) -> list[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users ORDER BY created_at ASC",
            )
            return [row_to_user(r) for r in rows]

    async def save(self, user: User) -> User:
        now = now_iso()
        stored = replace(user, id=user.id or new_id(), created_at=now, updated_at=now)
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO users
                   (id, email, name, role, password_hash, image_url, trainer_id,
                    trainer_status, bio, specialties, certifications, location,
                    created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (stored.id, stored.email, stored.name, Role(stored.role).value,
                 stored.password_hash, stored.image_url, stored.trainer_id,
                 TrainerStatus(stored.trainer_status).value, stored.bio,
                 json.dumps(stored.specialties), json.dumps(stored.certifications),
                 stored.location, now, now),
            )
        logger.debug("Inserted user %s (%s)", stored.id, stored.role)
        return stored

    async def update(self, user: User) -> User:
        """Overwrite profile fields; trainer_id/trainer_status are left alone."""
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """UPDATE users
                   SET email = ?, name = ?, role = ?, password_hash = ?,
                       image_url = ?, bio = ?, specialties = ?,
                       certifications = ?, location = ?, updated_at = ?
                   WHERE id = ?""",
                (user.email, user.name, Role(user.role).value,
                 user.password_hash, user.image_url, user.bio,
                 json.dumps(user.specialties), json.dumps(user.certifications),
                 user.location, now_iso(), user.id),
            )
            if cursor.rowcount == 0:
                raise NotFound(f"User '{user.id}' not found.")
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE id = ?", (user.id,),
            )
            return row_to_user(rows[0])

    async def delete(self, user_id: str) -> bool:
        """Delete a user; clients linked to it are reset to status 'none'."""
        async with self._conn.acquire() as conn:
            cursor = await conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            if cursor.rowcount == 0:
                return False
            unlinked = await conn.execute(
                """UPDATE users
                   SET trainer_id = NULL, trainer_status = ?, updated_at = ?
                   WHERE trainer_id = ?""",
                (TrainerStatus.NONE.value, now_iso(), user_id),
            )
            unlinked_count = unlinked.rowcount
        if unlinked_count:
            logger.info(
                "Deleted user %s and unlinked %d client(s)", user_id, unlinked_count,
            )
        return True


def row_to_user(row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        name=row["name"] or "",
        role=Role(row["role"]),
        password_hash=row["password_hash"] or "",
        image_url=row["image_url"] or "",
        trainer_id=row["trainer_id"],
        trainer_status=TrainerStatus(row["trainer_status"] or TrainerStatus.NONE.value),
        bio=row["bio"] or "",
        specialties=json.loads(row["specialties"] or "[]"),
        certifications=json.loads(row["certifications"] or "[]"),
        location=row["location"] or "",
        created_at=row["created_at"] or "",
        updated_at=row["updated_at"] or "",
    )
