"""
Test chat between connected pairs

Covers the access guard, history ordering/symmetry and the hand-off of
stored messages to the live channel. Runs on both storage backends.
"""
import asyncio

import pytest

from conftest import register, connect
from application.services.access_guard import AccessGuard
from application.services.chat import ChatService
from domain.exceptions import Forbidden, NotFound, ValidationError


class RecordingChannel:
    def __init__(self, fail=False):
        self.pushed = []
        self.fail = fail

    async def push(self, message):
        if self.fail:
            raise ConnectionError("socket gone")
        self.pushed.append(message)


def test_guard_requires_accepted_status(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        guard = factory.create_access_guard()
        hiring = factory.create_hiring_service()

        states = [await guard.is_connected(client.id, trainer.id)]
        outcome = await hiring.request_hire(client.id, trainer.id)
        # trainer_id already matches, but the status is only pending
        states.append(await guard.is_connected(client.id, trainer.id))
        with pytest.raises(Forbidden):
            await factory.create_chat_service().fetch_history(client.id, trainer.id)

        await hiring.respond_to_request(outcome.request.id, "accepted", acting_user_id=trainer.id)
        states.append(await guard.is_connected(client.id, trainer.id))
        states.append(await guard.is_connected(trainer.id, client.id))
        states.append(await guard.is_connected(client.id, "missing"))
        return states

    assert asyncio.run(scenario()) == [False, False, True, True, False]


def test_rejected_pair_is_not_connected(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        hiring = factory.create_hiring_service()
        outcome = await hiring.request_hire(client.id, trainer.id)
        await hiring.respond_to_request(outcome.request.id, "rejected", acting_user_id=trainer.id)
        return await factory.create_access_guard().is_connected(trainer.id, client.id)

    assert asyncio.run(scenario()) is False


def test_hello_hi_scenario(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, client.id, trainer.id)
        chat = factory.create_chat_service()

        await chat.send(client.id, trainer.id, "Hello")
        seen_by_trainer = await chat.fetch_history(trainer.id, client.id)
        await chat.send(trainer.id, client.id, "Hi")
        seen_by_client = await chat.fetch_history(client.id, trainer.id)
        return client, trainer, seen_by_trainer, seen_by_client

    client, trainer, seen_by_trainer, seen_by_client = asyncio.run(scenario())

    assert [(m.sender_id, m.text) for m in seen_by_trainer] == [(client.id, "Hello")]
    assert [(m.sender_id, m.text) for m in seen_by_client] == [
        (client.id, "Hello"),
        (trainer.id, "Hi"),
    ]


def test_alternating_messages_history(factory):
    n = 12

    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, client.id, trainer.id)
        chat = factory.create_chat_service()
        for i in range(n):
            sender, receiver = (client, trainer) if i % 2 == 0 else (trainer, client)
            await chat.send(sender.id, receiver.id, f"message {i}")
        return (
            await chat.fetch_history(client.id, trainer.id),
            await chat.fetch_history(trainer.id, client.id),
        )

    forward, backward = asyncio.run(scenario())

    assert len(forward) == n
    timestamps = [m.timestamp for m in forward]
    assert timestamps == sorted(timestamps)
    assert [m.id for m in forward] == [m.id for m in backward]
    assert len({m.id for m in forward}) == n
    assert [m.text for m in forward] == [f"message {i}" for i in range(n)]


def test_history_excludes_other_conversations(factory):
    async def scenario():
        trainer = await register(factory, "t@example.com", role="trainer")
        c1 = await register(factory, "c1@example.com")
        c2 = await register(factory, "c2@example.com")
        await connect(factory, c1.id, trainer.id)
        await connect(factory, c2.id, trainer.id)
        chat = factory.create_chat_service()
        await chat.send(c1.id, trainer.id, "from c1")
        await chat.send(c2.id, trainer.id, "from c2")
        return await chat.fetch_history(trainer.id, c1.id)

    history = asyncio.run(scenario())
    assert [m.text for m in history] == ["from c1"]


def test_send_validation_and_guard(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        stranger = await register(factory, "s@example.com")
        await connect(factory, client.id, trainer.id)
        chat = factory.create_chat_service()

        with pytest.raises(ValidationError):
            await chat.send(client.id, trainer.id, "   ")
        with pytest.raises(Forbidden):
            await chat.send(stranger.id, trainer.id, "hi")
        with pytest.raises(NotFound):
            await chat.send(client.id, "missing", "hi")
        return await factory.create_chat_store().get_between(client.id, trainer.id)

    assert asyncio.run(scenario()) == []


def test_message_is_stored_before_live_push(factory):
    channel = RecordingChannel()

    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, client.id, trainer.id)
        chat = ChatService(
            factory.create_chat_store(),
            AccessGuard(factory.create_user_store()),
            live_channel=channel,
        )
        sent = await chat.send(client.id, trainer.id, "ping")
        stored = await factory.create_chat_store().get_between(client.id, trainer.id)
        return sent, stored

    sent, stored = asyncio.run(scenario())

    assert sent.id and sent.timestamp
    assert [m.id for m in stored] == [sent.id]
    assert [m.id for m in channel.pushed] == [sent.id]


def test_live_channel_failure_does_not_fail_send(factory):
    async def scenario():
        client = await register(factory, "c@example.com")
        trainer = await register(factory, "t@example.com", role="trainer")
        await connect(factory, client.id, trainer.id)
        chat = ChatService(
            factory.create_chat_store(),
            AccessGuard(factory.create_user_store()),
            live_channel=RecordingChannel(fail=True),
        )
        await chat.send(client.id, trainer.id, "still delivered")
        return await chat.fetch_history(trainer.id, client.id)

    history = asyncio.run(scenario())
    assert [m.text for m in history] == ["still delivered"]
