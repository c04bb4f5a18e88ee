"""
application.services.plans - Training and diet plans.

Only a client's accepted trainer may write plans for that client.
"""

from __future__ import annotations

import logging

from domain.entities import TrainingPlan, DietPlan, Exercise, Meal
from domain.exceptions import Forbidden, ValidationError
from domain.ports import PlanStore
from application.dto import ClientPlans
from application.services.access_guard import AccessGuard

logger = logging.getLogger(__name__)


class PlanService:
    """Creates and lists plans for connected client/trainer pairs."""

    def __init__(self, plan_store: PlanStore, guard: AccessGuard):
        self._plans = plan_store
        self._guard = guard

    async def create_training_plan(
        self, trainer_id: str, client_id: str, exercises: list[Exercise],
    ) -> TrainingPlan:
        if not exercises:
            raise ValidationError("A training plan needs at least one exercise.")
        if any(not e.name.strip() for e in exercises):
            raise ValidationError("Every exercise needs a name.")
        await self._require_trainer_of(trainer_id, client_id)

        plan = await self._plans.save_training(TrainingPlan(
            client_id=client_id, trainer_id=trainer_id, exercises=list(exercises),
        ))
        logger.info(
            "Trainer %s created training plan %s for client %s (%d exercises)",
            trainer_id, plan.id, client_id, len(exercises),
        )
        return plan

    async def create_diet_plan(
        self, trainer_id: str, client_id: str, meals: list[Meal],
    ) -> DietPlan:
        if not meals:
            raise ValidationError("A diet plan needs at least one meal.")
        if any(not m.description.strip() for m in meals):
            raise ValidationError("Every meal needs a description.")
        await self._require_trainer_of(trainer_id, client_id)

        plan = await self._plans.save_diet(DietPlan(
            client_id=client_id, trainer_id=trainer_id, meals=list(meals),
        ))
        logger.info(
            "Trainer %s created diet plan %s for client %s (%d meals)",
            trainer_id, plan.id, client_id, len(meals),
        )
        return plan

    async def get_plans(self, client_id: str) -> ClientPlans:
        return ClientPlans(
            training=await self._plans.get_training_for(client_id),
            diet=await self._plans.get_diet_for(client_id),
        )

    async def _require_trainer_of(self, trainer_id: str, client_id: str) -> None:
        trainer, client = await self._guard.require_connected(trainer_id, client_id)
        if not trainer.is_trainer:
            raise Forbidden("Only the client's trainer can create plans.")
