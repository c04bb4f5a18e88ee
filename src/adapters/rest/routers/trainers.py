"""Trainer discovery and the hire-request workflow."""

from fastapi import APIRouter, Depends, Query

from factory import ServiceFactory
from domain.entities import User
from domain.models import TrainerFilter
from adapters.rest.dependencies import get_factory, get_current_user, ensure_self
from adapters.rest.schemas import (
    UserOut,
    HireRequestBody,
    HireOut,
    HireRequestOut,
    PendingRequestOut,
    RespondRequestBody,
    RespondOut,
)

router = APIRouter(prefix="/trainers", tags=["trainers"])


@router.get("", response_model=list[UserOut])
async def list_trainers(
    search: str = Query(default=""),
    specialty: str = Query(default=""),
    location: str = Query(default=""),
    factory: ServiceFactory = Depends(get_factory),
):
    service = factory.create_user_service()
    trainers = await service.list_trainers(
        TrainerFilter(search=search, specialty=specialty, location=location),
    )
    return [UserOut.from_entity(t) for t in trainers]


@router.get("/clients/{trainer_id}", response_model=list[UserOut])
async def list_clients(
    trainer_id: str,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Clients whose hire request the trainer accepted."""
    ensure_self(user, trainer_id, allow_admin=True)
    clients = await factory.create_hiring_service().list_clients(trainer_id)
    return [UserOut.from_entity(c) for c in clients]


@router.post("/request-hire", response_model=HireOut)
async def request_hire(
    body: HireRequestBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    ensure_self(user, body.client_id)
    outcome = await factory.create_hiring_service().request_hire(
        body.client_id, body.trainer_id,
    )
    return HireOut(
        user=UserOut.from_entity(outcome.client),
        request=HireRequestOut.from_entity(outcome.request),
    )


@router.get("/requests/{trainer_id}", response_model=list[PendingRequestOut])
async def list_requests(
    trainer_id: str,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Pending hire requests, each with the requesting client's summary."""
    ensure_self(user, trainer_id, allow_admin=True)
    pending = await factory.create_hiring_service().list_pending_requests(trainer_id)
    return [
        PendingRequestOut(
            request_id=p.request.id,
            created_at=p.request.created_at,
            client=UserOut.from_entity(p.client) if p.client else None,
        )
        for p in pending
    ]


@router.post("/respond-request", response_model=RespondOut)
async def respond_request(
    body: RespondRequestBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    client = await factory.create_hiring_service().respond_to_request(
        body.request_id, body.status, acting_user_id=user.id,
    )
    return RespondOut(
        message=f"Request {body.status}",
        client=UserOut.from_entity(client) if client else None,
    )
