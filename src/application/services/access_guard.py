"""
application.services.access_guard - Who may chat with whom.

A pair of users is connected when one of them is a client whose accepted
trainer is the other. The check is re-evaluated against the store on
every call; nothing is cached.
"""

from __future__ import annotations

import logging

from domain.entities import User, TrainerStatus
from domain.exceptions import Forbidden, NotFound
from domain.ports import UserStore

logger = logging.getLogger(__name__)


def is_connected_pair(user: User, other: User) -> bool:
    """Symmetric connection predicate over two loaded users."""
    return _is_accepted_client_of(user, other) or _is_accepted_client_of(other, user)


def _is_accepted_client_of(client: User, trainer: User) -> bool:
    return (
        client.is_client
        and client.trainer_id == trainer.id
        and client.trainer_status == TrainerStatus.ACCEPTED
    )


class AccessGuard:
    """Authorization predicate gating chat and plans to connected pairs."""

    def __init__(self, user_store: UserStore):
        self._users = user_store

    async def is_connected(self, user_id: str, other_id: str) -> bool:
        """True iff both users exist and form a connected pair."""
        user = await self._users.get_by_id(user_id)
        other = await self._users.get_by_id(other_id)
        if user is None or other is None:
            return False
        return is_connected_pair(user, other)

    async def require_connected(self, user_id: str, other_id: str) -> tuple[User, User]:
        """Return both users, or raise NotFound / Forbidden."""
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFound(f"User '{user_id}' not found.")
        other = await self._users.get_by_id(other_id)
        if other is None:
            raise NotFound(f"User '{other_id}' not found.")
        if not is_connected_pair(user, other):
            logger.info("Access denied: %s and %s are not connected", user_id, other_id)
            raise Forbidden("You are not connected to this user.")
        return user, other
