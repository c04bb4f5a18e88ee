"""Training and diet plans written by a trainer for an accepted client."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from adapters.rest.dependencies import (
    get_factory, get_current_user, ensure_self, ensure_self_or_connected,
)
from adapters.rest.schemas import (
    TrainingPlanBody,
    TrainingPlanOut,
    DietPlanBody,
    DietPlanOut,
    PlansOut,
)

router = APIRouter(prefix="/plans", tags=["plans"])


@router.post("/training", response_model=TrainingPlanOut, status_code=201)
async def create_training_plan(
    body: TrainingPlanBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    ensure_self(user, body.trainer_id)
    plan = await factory.create_plan_service().create_training_plan(
        body.trainer_id, body.client_id, body.to_exercises(),
    )
    return TrainingPlanOut.from_entity(plan)


@router.post("/diet", response_model=DietPlanOut, status_code=201)
async def create_diet_plan(
    body: DietPlanBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    ensure_self(user, body.trainer_id)
    plan = await factory.create_plan_service().create_diet_plan(
        body.trainer_id, body.client_id, body.to_meals(),
    )
    return DietPlanOut.from_entity(plan)


@router.get("/{client_id}", response_model=PlansOut)
async def get_plans(
    client_id: str,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Newest plans first."""
    await ensure_self_or_connected(user, client_id, factory)
    plans = await factory.create_plan_service().get_plans(client_id)
    return PlansOut(
        training=[TrainingPlanOut.from_entity(p) for p in plans.training],
        diet=[DietPlanOut.from_entity(p) for p in plans.diet],
    )
