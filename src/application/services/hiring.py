"""
application.services.hiring - Hire-request state machine.

Per client the relationship status moves

    none --request_hire--> pending --accept--> accepted
                           pending --reject--> none   (request: rejected)

Nothing leaves 'accepted' through this service. Each transition writes
the HireRequest and the client's trainer fields together through
HireRequestStore.save_transition(), which re-checks the precondition in
the same write. The reads below only pick the error message; two
overlapping calls are settled by the store.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from domain.entities import (
    User,
    HireRequest,
    RequestStatus,
    TrainerStatus,
)
from domain.exceptions import (
    Forbidden,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)
from domain.ports import UserStore, HireRequestStore
from application.dto import HireOutcome, PendingRequest

logger = logging.getLogger(__name__)

_RESPONSES = {RequestStatus.ACCEPTED, RequestStatus.REJECTED}


class HiringService:
    """Client -> trainer relationship lifecycle."""

    def __init__(self, user_store: UserStore, request_store: HireRequestStore):
        self._users = user_store
        self._requests = request_store

    async def request_hire(self, client_id: str, trainer_id: str) -> HireOutcome:
        """none -> pending. Creates exactly one pending HireRequest."""
        client = await self._users.get_by_id(client_id)
        if client is None:
            raise NotFound(f"Client '{client_id}' not found.")
        trainer = await self._users.get_by_id(trainer_id)
        if trainer is None:
            raise NotFound(f"Trainer '{trainer_id}' not found.")

        if not client.is_client:
            raise InvalidStateTransition("Only clients can request a trainer.")
        if client.trainer_status != TrainerStatus.NONE:
            raise InvalidStateTransition(
                "You already have a trainer or a pending request."
            )
        if not trainer.is_trainer:
            raise ValidationError(f"User '{trainer_id}' is not a trainer.")

        updated_client = replace(
            client, trainer_id=trainer.id, trainer_status=TrainerStatus.PENDING,
        )
        request = await self._requests.save_transition(
            HireRequest(
                client_id=client.id,
                trainer_id=trainer.id,
                status=RequestStatus.PENDING,
            ),
            updated_client,
        )
        logger.info(
            "Hire request %s: client %s -> trainer %s (pending)",
            request.id, client.id, trainer.id,
        )
        return HireOutcome(client=updated_client, request=request)

    async def respond_to_request(
        self,
        request_id: str,
        status: str,
        acting_user_id: Optional[str] = None,
    ) -> Optional[User]:
        """pending -> accepted | rejected.

        Returns the client as it is after the transition, or None if the
        client account no longer exists (the request is still resolved).
        """
        try:
            decision = RequestStatus(status)
        except ValueError:
            decision = None
        if decision not in _RESPONSES:
            raise ValidationError("Status must be 'accepted' or 'rejected'.")

        request = await self._requests.get_by_id(request_id)
        if request is None:
            raise NotFound(f"Request '{request_id}' not found.")
        if acting_user_id is not None and acting_user_id != request.trainer_id:
            raise Forbidden("Only the requested trainer can respond to this request.")
        if request.status != RequestStatus.PENDING:
            raise InvalidStateTransition(
                f"Request '{request_id}' was already {request.status.value}."
            )

        client = await self._users.get_by_id(request.client_id)
        updated_client: Optional[User] = None
        if client is not None and self._is_waiting_on(client, request):
            if decision == RequestStatus.ACCEPTED:
                updated_client = replace(client, trainer_status=TrainerStatus.ACCEPTED)
            else:
                updated_client = replace(
                    client, trainer_id=None, trainer_status=TrainerStatus.NONE,
                )
        elif client is not None:
            logger.warning(
                "Client %s no longer waits on request %s (status=%s, trainer=%s)",
                client.id, request.id, client.trainer_status.value, client.trainer_id,
            )

        await self._requests.save_transition(
            replace(request, status=decision), updated_client,
        )
        logger.info(
            "Hire request %s %s by trainer %s",
            request.id, decision.value, request.trainer_id,
        )
        if client is None:
            return None
        return await self._users.get_by_id(client.id)

    async def list_pending_requests(self, trainer_id: str) -> list[PendingRequest]:
        """Pending requests for a trainer, each joined with its client."""
        requests = await self._requests.list_for_trainer(
            trainer_id, RequestStatus.PENDING,
        )
        pending = []
        for request in requests:
            client = await self._users.get_by_id(request.client_id)
            pending.append(PendingRequest(request=request, client=client))
        return pending

    async def list_clients(self, trainer_id: str) -> list[User]:
        """Clients whose relationship with the trainer is accepted."""
        return await self._users.list_clients_of(trainer_id, TrainerStatus.ACCEPTED)

    @staticmethod
    def _is_waiting_on(client: User, request: HireRequest) -> bool:
        return (
            client.trainer_id == request.trainer_id
            and client.trainer_status == TrainerStatus.PENDING
        )
