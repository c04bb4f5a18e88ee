"""
Test registration/login, profile and role rules, trainer search and
admin deletion. Runs on both storage backends.
"""
import asyncio

import pytest

from conftest import register, connect
from application.dto import LoginRequest, ProfileUpdate, RegisterRequest
from domain.entities import Role, TrainerStatus, User
from domain.exceptions import (
    AuthenticationError,
    DuplicateLoginError,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)
from domain.models import TrainerFilter


# --- AuthenticationService ---

def test_register_and_login(factory):
    auth = factory.create_authentication_service()

    async def scenario():
        registered = await auth.register(RegisterRequest(
            email="  Ann@Example.COM ", password="secret123", name="Ann", role="trainer",
        ))
        logged_in = await auth.login(LoginRequest(email="ann@example.com", password="secret123"))
        return registered, logged_in

    registered, logged_in = asyncio.run(scenario())

    assert registered.user.email == "ann@example.com"
    assert registered.user.role == Role.TRAINER
    assert registered.user.trainer_status == TrainerStatus.NONE
    assert registered.user.password_hash != "secret123"
    assert registered.user.image_url
    assert logged_in.user.id == registered.user.id
    assert auth.verify_token(logged_in.access_token)["user_id"] == registered.user.id


@pytest.mark.parametrize("email, password, role, error", [
    ("not-an-email", "secret123", "client", ValidationError),
    ("a@example.com", "short", "client", ValidationError),
    ("a@example.com", "secret123", "admin", ValidationError),
    ("a@example.com", "secret123", "wizard", ValidationError),
])
def test_register_rejects_bad_input(factory, email, password, role, error):
    auth = factory.create_authentication_service()
    with pytest.raises(error):
        asyncio.run(auth.register(RegisterRequest(email=email, password=password, role=role)))


def test_duplicate_and_bad_login(factory):
    auth = factory.create_authentication_service()

    async def scenario():
        await register(factory, "ann@example.com")
        with pytest.raises(DuplicateLoginError):
            await register(factory, "ANN@example.com")
        with pytest.raises(AuthenticationError):
            await auth.login(LoginRequest(email="ann@example.com", password="wrong-one"))
        with pytest.raises(AuthenticationError):
            await auth.login(LoginRequest(email="nobody@example.com", password="secret123"))

    asyncio.run(scenario())
    with pytest.raises(AuthenticationError):
        auth.verify_token("not.a.jwt")


def test_ensure_admin_is_idempotent(factory):
    auth = factory.create_authentication_service()

    async def scenario():
        first = await auth.ensure_admin("root@example.com", "rootpass")
        second = await auth.ensure_admin("root@example.com", "other")
        return first, second

    first, second = asyncio.run(scenario())
    assert first.role == Role.ADMIN
    assert first.id == second.id


# --- UserService ---

def test_update_profile_fields(factory):
    async def scenario():
        trainer = await register(factory, "t@example.com", role="trainer")
        return await factory.create_user_service().update_profile(trainer.id, ProfileUpdate(
            name=" Tess ", bio="Coach", specialties=["Yoga", " ", "HIIT "], location="Oslo",
        ))

    updated = asyncio.run(scenario())
    assert updated.name == "Tess"
    assert updated.specialties == ["Yoga", "HIIT"]
    assert updated.location == "Oslo"


def test_role_change_rules(factory):
    async def scenario():
        users = factory.create_user_service()
        free_client = await register(factory, "free@example.com")
        hired_client = await register(factory, "hired@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, hired_client.id, trainer.id)

        switched = await users.update_profile(free_client.id, ProfileUpdate(role="trainer"))
        with pytest.raises(InvalidStateTransition):
            await users.update_profile(hired_client.id, ProfileUpdate(role="trainer"))
        with pytest.raises(InvalidStateTransition):
            await users.update_profile(trainer.id, ProfileUpdate(role="client"))
        with pytest.raises(ValidationError):
            await users.update_profile(free_client.id, ProfileUpdate(role="admin"))
        with pytest.raises(ValidationError):
            await users.update_profile(free_client.id, ProfileUpdate(name="  "))
        return switched

    switched = asyncio.run(scenario())
    assert switched.role == Role.TRAINER
    assert switched.trainer_id is None


def test_deleting_trainer_unlinks_clients(factory):
    async def scenario():
        users = factory.create_user_service()
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, client.id, trainer.id)
        await factory.create_chat_service().send(client.id, trainer.id, "bye")

        await users.delete_user(trainer.id)
        with pytest.raises(NotFound):
            await users.delete_user(trainer.id)
        return (
            await users.get_user(client.id),
            await factory.create_chat_store().get_between(client.id, trainer.id),
        )

    client, messages = asyncio.run(scenario())
    assert client.trainer_status == TrainerStatus.NONE
    assert client.trainer_id is None
    # history is kept, it is just no longer reachable through the guard
    assert len(messages) == 1


def test_list_trainers_with_filter(factory):
    async def scenario():
        users = factory.create_user_service()
        a = await register(factory, "a@example.com", role="trainer", name="Alice")
        b = await register(factory, "b@example.com", role="trainer", name="Bruno")
        await register(factory, "c@example.com")
        await users.update_profile(a.id, ProfileUpdate(specialties=["Yoga"], location="Berlin"))
        await users.update_profile(b.id, ProfileUpdate(specialties=["Boxing"], location="Munich"))
        return (
            await users.list_trainers(),
            await users.list_trainers(TrainerFilter(specialty="YOGA")),
            await users.list_trainers(TrainerFilter(search="brun", location="mun")),
        )

    everyone, yoga, bruno = asyncio.run(scenario())
    assert {t.name for t in everyone} == {"Alice", "Bruno"}
    assert [t.name for t in yoga] == ["Alice"]
    assert [t.name for t in bruno] == ["Bruno"]


# --- TrainerFilter ---

def _trainer(**fields):
    return User(role=Role.TRAINER, **fields)


def test_trainer_filter_matching():
    coach = _trainer(name="Kim", bio="Marathon coach", specialties=["Running"], location="San Diego")

    assert TrainerFilter().is_empty
    assert TrainerFilter(search="marathon").matches(coach)
    assert TrainerFilter(search="RUN").matches(coach)
    assert TrainerFilter(specialty="running").matches(coach)
    assert not TrainerFilter(specialty="run").matches(coach)
    assert TrainerFilter(location="diego").matches(coach)
    assert not TrainerFilter(search="kim", location="Boston").matches(coach)
