"""
Shared fixtures.

Every service-level test runs against both storage backends (SQLite and
the JSON document) on a fresh temp directory.
"""
import sys
import os
import asyncio

import pytest

src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from infrastructure.config import Settings
from factory import ServiceFactory
from application.dto import RegisterRequest
from domain.entities import User


def make_settings(tmp_path, backend="sqlite", **overrides):
    return Settings(
        project_root=tmp_path,
        storage_backend=backend,
        db_path=str(tmp_path / "marketplace.db"),
        json_db_path=str(tmp_path / "db.json"),
        jwt_secret="test-secret",
        **overrides,
    )


@pytest.fixture(params=["sqlite", "json"])
def settings(request, tmp_path):
    return make_settings(tmp_path, request.param)


@pytest.fixture
def factory(settings):
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    return factory


async def register(factory, email, role="client", name="", password="secret123") -> User:
    """Create an account through the real registration path."""
    result = await factory.create_authentication_service().register(
        RegisterRequest(email=email, password=password, name=name or email.split("@")[0], role=role)
    )
    return result.user


async def connect(factory, client_id, trainer_id):
    """Drive a client/trainer pair to 'accepted'."""
    hiring = factory.create_hiring_service()
    outcome = await hiring.request_hire(client_id, trainer_id)
    await hiring.respond_to_request(outcome.request.id, "accepted", acting_user_id=trainer_id)
    return outcome.request
