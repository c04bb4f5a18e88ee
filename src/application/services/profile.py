"""
application.services.profile - Client fitness profiles.

A client fills in one profile (weight, height, goal, ...) which its
trainer reads when preparing plans. Saving replaces the previous one.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.entities import ClientProfile
from domain.exceptions import NotFound, ValidationError
from domain.ports import ProfileStore, UserStore

logger = logging.getLogger(__name__)


class ProfileService:
    """Reads and upserts client profiles."""

    def __init__(self, profile_store: ProfileStore, user_store: UserStore):
        self._profiles = profile_store
        self._users = user_store

    async def save_client_profile(self, profile: ClientProfile) -> ClientProfile:
        user = await self._users.get_by_id(profile.user_id)
        if user is None:
            raise NotFound(f"User '{profile.user_id}' not found.")
        if not user.is_client:
            raise ValidationError("Only clients have a fitness profile.")
        if profile.weight < 0 or profile.height < 0:
            raise ValidationError("Weight and height must not be negative.")

        stored = await self._profiles.upsert(profile)
        logger.debug("Saved client profile for user %s", profile.user_id)
        return stored

    async def get_client_profile(self, user_id: str) -> Optional[ClientProfile]:
        """The client's profile, or None if it was never filled in."""
        return await self._profiles.get_by_user(user_id)
