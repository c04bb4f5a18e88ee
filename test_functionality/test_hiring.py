"""
Test the hire-request state machine

none -> pending -> accepted, pending -> rejected (client back to none).
Runs on both storage backends.
"""
import asyncio

import pytest

from conftest import register
from domain.entities import TrainerStatus, RequestStatus
from domain.exceptions import (
    Forbidden,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)


def test_request_hire_moves_client_to_pending(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        outcome = await factory.create_hiring_service().request_hire(client.id, trainer.id)

        stored = await factory.create_user_store().get_by_id(client.id)
        requests = await factory.create_hire_request_store().list_for_trainer(
            trainer.id, RequestStatus.PENDING,
        )
        return outcome, stored, requests, trainer

    outcome, stored, requests, trainer = asyncio.run(scenario())

    assert outcome.client.trainer_status == TrainerStatus.PENDING
    assert stored.trainer_status == TrainerStatus.PENDING
    assert stored.trainer_id == trainer.id
    assert len(requests) == 1
    assert requests[0].status == RequestStatus.PENDING
    assert requests[0].id == outcome.request.id


def test_second_request_before_resolution_fails(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        t1 = await register(factory, "t1@example.com", role="trainer")
        t2 = await register(factory, "t2@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        await hiring.request_hire(client.id, t1.id)

        with pytest.raises(InvalidStateTransition):
            await hiring.request_hire(client.id, t1.id)
        with pytest.raises(InvalidStateTransition):
            await hiring.request_hire(client.id, t2.id)

        store = factory.create_hire_request_store()
        return (
            await store.list_for_trainer(t1.id, RequestStatus.PENDING),
            await store.list_for_trainer(t2.id, RequestStatus.PENDING),
        )

    t1_requests, t2_requests = asyncio.run(scenario())
    assert len(t1_requests) == 1
    assert t2_requests == []


def test_accept_keeps_trainer_id(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        returned = await hiring.respond_to_request(
            outcome.request.id, "accepted", acting_user_id=trainer.id,
        )
        stored = await factory.create_user_store().get_by_id(client.id)
        request = await factory.create_hire_request_store().get_by_id(outcome.request.id)
        clients = await hiring.list_clients(trainer.id)
        return trainer, returned, stored, request, clients

    trainer, returned, stored, request, clients = asyncio.run(scenario())

    assert returned.trainer_status == TrainerStatus.ACCEPTED
    assert stored.trainer_status == TrainerStatus.ACCEPTED
    assert stored.trainer_id == trainer.id
    assert request.status == RequestStatus.ACCEPTED
    assert [c.id for c in clients] == [stored.id]


def test_reject_resets_client(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        await hiring.respond_to_request(outcome.request.id, "rejected", acting_user_id=trainer.id)

        stored = await factory.create_user_store().get_by_id(client.id)
        request = await factory.create_hire_request_store().get_by_id(outcome.request.id)
        # back at 'none', so a new attempt is allowed
        again = await hiring.request_hire(client.id, trainer.id)
        return stored, request, again

    stored, request, again = asyncio.run(scenario())

    assert stored.trainer_status == TrainerStatus.NONE
    assert stored.trainer_id is None
    assert request.status == RequestStatus.REJECTED
    assert again.client.trainer_status == TrainerStatus.PENDING
    assert again.request.id != request.id


@pytest.mark.parametrize("first, second", [
    ("accepted", "rejected"),
    ("accepted", "accepted"),
    ("rejected", "accepted"),
])
def test_request_can_only_be_answered_once(factory, first, second):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        await hiring.respond_to_request(outcome.request.id, first, acting_user_id=trainer.id)
        with pytest.raises(InvalidStateTransition):
            await hiring.respond_to_request(outcome.request.id, second, acting_user_id=trainer.id)
        return await factory.create_user_store().get_by_id(client.id)

    stored = asyncio.run(scenario())
    expected = TrainerStatus.ACCEPTED if first == "accepted" else TrainerStatus.NONE
    assert stored.trainer_status == expected


def test_only_the_requested_trainer_can_respond(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        other = await register(factory, "o@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        with pytest.raises(Forbidden):
            await hiring.respond_to_request(outcome.request.id, "accepted", acting_user_id=other.id)
        return await factory.create_user_store().get_by_id(client.id)

    assert asyncio.run(scenario()).trainer_status == TrainerStatus.PENDING


def test_request_preconditions(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        other_client = await register(factory, "c2@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()

        with pytest.raises(NotFound):
            await hiring.request_hire("missing", trainer.id)
        with pytest.raises(NotFound):
            await hiring.request_hire(client.id, "missing")
        with pytest.raises(ValidationError):
            await hiring.request_hire(client.id, other_client.id)
        with pytest.raises(InvalidStateTransition):
            await hiring.request_hire(trainer.id, trainer.id)
        with pytest.raises(ValidationError):
            await hiring.respond_to_request("whatever", "maybe")
        with pytest.raises(NotFound):
            await hiring.respond_to_request("missing", "accepted")

    asyncio.run(scenario())


def test_pending_requests_listing(factory):
    async def scenario():
        trainer = await register(factory, "t@example.com", role="trainer")
        c1 = await register(factory, "c1@example.com", name="Ann")
        c2 = await register(factory, "c2@example.com", name="Bob")
        hiring = factory.create_hiring_service()
        first = await hiring.request_hire(c1.id, trainer.id)
        await hiring.request_hire(c2.id, trainer.id)
        await hiring.respond_to_request(first.request.id, "accepted", acting_user_id=trainer.id)
        return await hiring.list_pending_requests(trainer.id)

    pending = asyncio.run(scenario())
    assert len(pending) == 1
    assert pending[0].client.name == "Bob"
    assert pending[0].request.status == RequestStatus.PENDING



def test_overlapping_requests_leave_one_pending(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        t1 = await register(factory, "t1@example.com", role="trainer")
        t2 = await register(factory, "t2@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        results = await asyncio.gather(
            hiring.request_hire(client.id, t1.id),
            hiring.request_hire(client.id, t2.id),
            return_exceptions=True,
        )
        store = factory.create_hire_request_store()
        pending = (
            await store.list_for_trainer(t1.id, RequestStatus.PENDING)
            + await store.list_for_trainer(t2.id, RequestStatus.PENDING)
        )
        return results, pending, await factory.create_user_store().get_by_id(client.id)

    results, pending, stored = asyncio.run(scenario())

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InvalidStateTransition)
    winner = next(r for r in results if not isinstance(r, Exception))
    assert [r.id for r in pending] == [winner.request.id]
    assert stored.trainer_status == TrainerStatus.PENDING
    assert stored.trainer_id == winner.request.trainer_id


def test_overlapping_answers_resolve_once(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        results = await asyncio.gather(
            hiring.respond_to_request(outcome.request.id, "accepted", acting_user_id=trainer.id),
            hiring.respond_to_request(outcome.request.id, "rejected", acting_user_id=trainer.id),
            return_exceptions=True,
        )
        request = await factory.create_hire_request_store().get_by_id(outcome.request.id)
        return results, request, await factory.create_user_store().get_by_id(client.id)

    results, request, stored = asyncio.run(scenario())

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InvalidStateTransition)
    # the client follows whichever answer won
    if request.status == RequestStatus.ACCEPTED:
        assert stored.trainer_status == TrainerStatus.ACCEPTED
    else:
        assert request.status == RequestStatus.REJECTED
        assert stored.trainer_status == TrainerStatus.NONE
        assert stored.trainer_id is None
