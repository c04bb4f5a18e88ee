"""Chat over plain HTTP: the durable send path and the polled history."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from adapters.rest.dependencies import get_factory, get_current_user, ensure_self
from adapters.rest.schemas import SendMessageBody, MessageOut

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/{user_id}/{other_id}", response_model=list[MessageOut])
async def get_history(
    user_id: str,
    other_id: str,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """All messages between the two users, oldest first. 403 unless connected."""
    ensure_self(user, user_id)
    messages = await factory.create_chat_service().fetch_history(user_id, other_id)
    return [MessageOut.from_entity(m) for m in messages]


@router.post("", response_model=MessageOut, status_code=201)
async def send_message(
    body: SendMessageBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Persist a message, then push it live to whoever is connected."""
    ensure_self(user, body.sender_id)
    message = await factory.create_chat_service().send(
        body.sender_id, body.receiver_id, body.text,
    )
    return MessageOut.from_entity(message)
