"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the system needs without specifying HOW. Infrastructure
modules provide concrete implementations (SQLite and JSON document stores,
the WebSocket connection registry). Application services depend only on
these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from domain.entities import (
    User,
    Role,
    TrainerStatus,
    HireRequest,
    RequestStatus,
    ChatMessage,
    ClientProfile,
    TrainingPlan,
    DietPlan,
)


# ---------------------------------------------------------------------------
# Storage Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class UserStore(Protocol):
    """CRUD operations for User entities.

    update() writes profile fields only and raises NotFound for an unknown
    id; trainer_id / trainer_status change through HireRequestStore.
    """

    async def get_by_id(self, user_id: str) -> Optional[User]: ...
    async def get_by_email(self, email: str) -> Optional[User]: ...
    async def list_by_role(self, role: Role) -> list[User]: ...
    async def list_clients_of(
        self, trainer_id: str, status: TrainerStatus,
    ) -> list[User]: ...
    async def list_all(self) -> list[User]: ...
    async def save(self, user: User) -> User: ...
    async def update(self, user: User) -> User: ...
    async def delete(self, user_id: str) -> bool: ...


@runtime_checkable
class HireRequestStore(Protocol):
    """Hire requests plus the atomic request/client transition write.

    save_transition() re-checks the precondition in the same write and
    raises InvalidStateTransition if it no longer holds: a new request
    needs the client at 'none', an answer needs the request 'pending'.
    """

    async def get_by_id(self, request_id: str) -> Optional[HireRequest]: ...
    async def list_for_trainer(
        self, trainer_id: str, status: RequestStatus,
    ) -> list[HireRequest]: ...
    async def save_transition(
        self, request: HireRequest, client: Optional[User],
    ) -> HireRequest: ...


@runtime_checkable
class ChatStore(Protocol):
    """Append-only chat message storage."""

    async def save(self, message: ChatMessage) -> ChatMessage: ...
    async def get_between(self, user_id: str, other_id: str) -> list[ChatMessage]: ...


@runtime_checkable
class ProfileStore(Protocol):
    """Client fitness profiles, one per client."""

    async def get_by_user(self, user_id: str) -> Optional[ClientProfile]: ...
    async def upsert(self, profile: ClientProfile) -> ClientProfile: ...


@runtime_checkable
class PlanStore(Protocol):
    """Training and diet plans authored by trainers."""

    async def save_training(self, plan: TrainingPlan) -> TrainingPlan: ...
    async def save_diet(self, plan: DietPlan) -> DietPlan: ...
    async def get_training_for(self, client_id: str) -> list[TrainingPlan]: ...
    async def get_diet_for(self, client_id: str) -> list[DietPlan]: ...


# ---------------------------------------------------------------------------
# Delivery Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class LiveChannel(Protocol):
    """Best-effort push of a stored message to connected participants.

    Implementations must never raise: the durable store is the system of
    record and clients poll it regardless.
    """

    async def push(self, message: ChatMessage) -> None: ...
