"""Client fitness profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from adapters.rest.dependencies import (
    get_factory, get_current_user, ensure_self, ensure_self_or_connected,
)
from adapters.rest.schemas import ClientProfileBody, ClientProfileOut

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("/profile", response_model=ClientProfileOut)
async def save_profile(
    body: ClientProfileBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    ensure_self(user, body.user_id)
    profile = await factory.create_profile_service().save_client_profile(body.to_entity())
    return ClientProfileOut.from_entity(profile)


@router.get("/profile/{user_id}", response_model=Optional[ClientProfileOut])
async def get_profile(
    user_id: str,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """The client's profile, or null when it was never filled in.

    Readable by the client, their accepted trainer, and admins.
    """
    await ensure_self_or_connected(user, user_id, factory)
    profile = await factory.create_profile_service().get_client_profile(user_id)
    if profile is None:
        return None
    return ClientProfileOut.from_entity(profile)
