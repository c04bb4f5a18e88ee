"""
infrastructure.persistence.profile_repo - SQLite client profile store.

Implements the ProfileStore port. One row per client, replaced on upsert.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from domain.entities import ClientProfile
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.identity import now_iso

logger = logging.getLogger(__name__)


class SQLiteProfileStore:
    """Async SQLite implementation of ProfileStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_user(self, user_id: str) -> Optional[ClientProfile]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM client_profiles WHERE user_id = ?", (user_id,),
            )
            return self._row_to_profile(rows[0]) if rows else None

    async def upsert(self, profile: ClientProfile) -> ClientProfile:
        stored = replace(profile, updated_at=now_iso())
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO client_profiles
                   (user_id, weight, height, goal, activity_level,
                    medical_conditions, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id) DO UPDATE SET
                       weight = excluded.weight,
                       height = excluded.height,
                       goal = excluded.goal,
                       activity_level = excluded.activity_level,
                       medical_conditions = excluded.medical_conditions,
                       updated_at = excluded.updated_at""",
                (stored.user_id, stored.weight, stored.height, stored.goal,
                 stored.activity_level, stored.medical_conditions, stored.updated_at),
            )
        return stored

    @staticmethod
    def _row_to_profile(row) -> ClientProfile:
        return ClientProfile(
            user_id=row["user_id"],
            weight=row["weight"] or 0.0,
            height=row["height"] or 0.0,
            goal=row["goal"] or "",
            activity_level=row["activity_level"] or "",
            medical_conditions=row["medical_conditions"] or "",
            updated_at=row["updated_at"] or "",
        )
