"""
Test client profiles and trainer-authored plans
"""
import asyncio

import pytest

from conftest import register, connect
from domain.entities import ClientProfile, Exercise, Meal
from domain.exceptions import Forbidden, NotFound, ValidationError


def test_client_profile_upsert(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        profiles = factory.create_profile_service()
        empty = await profiles.get_client_profile(client.id)
        await profiles.save_client_profile(ClientProfile(user_id=client.id, weight=80, goal="lose fat"))
        await profiles.save_client_profile(ClientProfile(user_id=client.id, weight=78, goal="lose fat"))
        return empty, await profiles.get_client_profile(client.id)

    empty, profile = asyncio.run(scenario())
    assert empty is None
    assert profile.weight == 78
    assert profile.goal == "lose fat"


def test_client_profile_rules(factory):
    async def scenario():
        trainer = await register(factory, "t@example.com", role="trainer")
        client = await register(factory, "c@example.com")
        profiles = factory.create_profile_service()
        with pytest.raises(NotFound):
            await profiles.save_client_profile(ClientProfile(user_id="missing"))
        with pytest.raises(ValidationError):
            await profiles.save_client_profile(ClientProfile(user_id=trainer.id))
        with pytest.raises(ValidationError):
            await profiles.save_client_profile(ClientProfile(user_id=client.id, weight=-1))

    asyncio.run(scenario())


def test_only_accepted_trainer_writes_plans(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        plans = factory.create_plan_service()
        squat = [Exercise(name="Squat", sets=3, reps="8-10")]

        with pytest.raises(Forbidden):
            await plans.create_training_plan(trainer.id, client.id, squat)
        await connect(factory, client.id, trainer.id)
        # the client cannot author a plan for itself
        with pytest.raises(Forbidden):
            await plans.create_training_plan(client.id, trainer.id, squat)
        with pytest.raises(ValidationError):
            await plans.create_training_plan(trainer.id, client.id, [])
        with pytest.raises(ValidationError):
            await plans.create_diet_plan(trainer.id, client.id, [Meal(description=" ")])

        await plans.create_training_plan(trainer.id, client.id, squat)
        await plans.create_diet_plan(trainer.id, client.id, [Meal(time="12:00", description="Salad", calories=450)])
        return await plans.get_plans(client.id)

    result = asyncio.run(scenario())
    assert [e.name for e in result.training[0].exercises] == ["Squat"]
    assert result.training[0].exercises[0].sets == 3
    assert result.diet[0].meals[0].calories == 450
