"""
infrastructure.persistence.plan_repo - SQLite training/diet plan store.

Implements the PlanStore port. Exercise and meal lists are stored as JSON
text columns.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace

from domain.entities import TrainingPlan, DietPlan, Exercise, Meal
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.identity import new_id, now_iso

logger = logging.getLogger(__name__)


class SQLitePlanStore:
    """Async SQLite implementation of PlanStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save_training(self, plan: TrainingPlan) -> TrainingPlan:
        stored = replace(plan, id=plan.id or new_id(), created_at=now_iso())
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO training_plans
                   (id, client_id, trainer_id, exercises, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (stored.id, stored.client_id, stored.trainer_id,
                 json.dumps([asdict(e) for e in stored.exercises]),
                 stored.created_at),
            )
        return stored

    async def save_diet(self, plan: DietPlan) -> DietPlan:
        stored = replace(plan, id=plan.id or new_id(), created_at=now_iso())
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO diet_plans
                   (id, client_id, trainer_id, meals, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (stored.id, stored.client_id, stored.trainer_id,
                 json.dumps([asdict(m) for m in stored.meals]),
                 stored.created_at),
            )
        return stored

    async def get_training_for(self, client_id: str) -> list[TrainingPlan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM training_plans WHERE client_id = ?
                   ORDER BY created_at DESC""",
                (client_id,),
            )
            return [
                TrainingPlan(
                    id=r["id"],
                    client_id=r["client_id"],
                    trainer_id=r["trainer_id"],
                    exercises=[Exercise(**e) for e in json.loads(r["exercises"] or "[]")],
                    created_at=r["created_at"] or "",
                )
                for r in rows
            ]

    async def get_diet_for(self, client_id: str) -> list[DietPlan]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM diet_plans WHERE client_id = ?
                   ORDER BY created_at DESC""",
                (client_id,),
            )
            return [
                DietPlan(
                    id=r["id"],
                    client_id=r["client_id"],
                    trainer_id=r["trainer_id"],
                    meals=[Meal(**m) for m in json.loads(r["meals"] or "[]")],
                    created_at=r["created_at"] or "",
                )
                for r in rows
            ]
