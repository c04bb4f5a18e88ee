"""
application.services.users - Account profile, trainer discovery, admin.

Role and profile fields are changed here; a client's trainer_id and
trainer_status are never touched (they belong to the hiring service),
except that deleting a trainer unlinks its clients inside the store.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from domain.entities import User, Role, TrainerStatus
from domain.exceptions import InvalidStateTransition, NotFound, ValidationError
from domain.models import TrainerFilter
from domain.ports import UserStore
from application.dto import ProfileUpdate

logger = logging.getLogger(__name__)


def _clean_list(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


class UserService:
    """Profile updates, trainer listing and admin user management."""

    def __init__(self, user_store: UserStore):
        self._users = user_store

    async def get_user(self, user_id: str) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFound(f"User '{user_id}' not found.")
        return user

    async def update_profile(self, user_id: str, changes: ProfileUpdate) -> User:
        user = await self.get_user(user_id)
        updated = user

        if changes.role is not None:
            updated = self._change_role(updated, changes.role)
            if user.is_trainer and not updated.is_trainer and await self._has_clients(user.id):
                raise InvalidStateTransition(
                    "A trainer with clients or pending requests cannot change role."
                )
        if changes.name is not None:
            if not changes.name.strip():
                raise ValidationError("Name must not be empty.")
            updated = replace(updated, name=changes.name.strip())
        if changes.image_url is not None:
            updated = replace(updated, image_url=changes.image_url.strip())
        if changes.bio is not None:
            updated = replace(updated, bio=changes.bio.strip())
        if changes.location is not None:
            updated = replace(updated, location=changes.location.strip())
        if changes.specialties is not None:
            updated = replace(updated, specialties=_clean_list(changes.specialties))
        if changes.certifications is not None:
            updated = replace(updated, certifications=_clean_list(changes.certifications))

        if updated == user:
            return user
        stored = await self._users.update(updated)
        logger.info("Updated profile of user %s", user_id)
        return stored

    async def list_trainers(self, criteria: TrainerFilter | None = None) -> list[User]:
        trainers = await self._users.list_by_role(Role.TRAINER)
        if criteria is None:
            return trainers
        return criteria.apply(trainers)

    async def list_users(self) -> list[User]:
        return await self._users.list_all()

    async def delete_user(self, user_id: str) -> None:
        """Delete an account. Hire requests and chat history are kept."""
        if not await self._users.delete(user_id):
            raise NotFound(f"User '{user_id}' not found.")
        logger.info("Deleted user %s", user_id)

    async def _has_clients(self, trainer_id: str) -> bool:
        for status in (TrainerStatus.PENDING, TrainerStatus.ACCEPTED):
            if await self._users.list_clients_of(trainer_id, status):
                return True
        return False

    @staticmethod
    def _change_role(user: User, role_value: str) -> User:
        try:
            role = Role(role_value)
        except ValueError:
            raise ValidationError(f"Unknown role '{role_value}'.")
        if role == user.role:
            return user
        if role == Role.ADMIN:
            raise ValidationError("The admin role cannot be self-assigned.")
        if user.is_client and user.trainer_status != TrainerStatus.NONE:
            raise InvalidStateTransition(
                "A client with a trainer or a pending request cannot change role."
            )
        return replace(user, role=role)
