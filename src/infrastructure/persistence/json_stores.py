"""
infrastructure.persistence.json_stores - JSON document implementations of
the storage ports.

Records are kept in the document with camelCase keys, the same layout the
web client reads. Every mutating method does all of its work inside a
single JsonDocument.write() block, i.e. one whole-document rewrite.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from enum import Enum
from typing import Any, Optional

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
    Exercise,
    Meal,
)
from domain.exceptions import InvalidStateTransition, NotFound
from infrastructure.persistence.identity import new_id, now_iso
from infrastructure.persistence.json_document import JsonDocument

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _to_doc(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_camel(k): _to_doc(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_doc(v) for v in value]
    return value


def to_doc(entity) -> dict[str, Any]:
    return _to_doc(asdict(entity))


def user_from_doc(d: dict[str, Any]) -> User:
    return User(
        id=d["id"],
        email=d.get("email", ""),
        name=d.get("name", ""),
        role=Role(d.get("role", Role.CLIENT.value)),
        password_hash=d.get("passwordHash", ""),
        image_url=d.get("imageUrl", ""),
        trainer_id=d.get("trainerId"),
        trainer_status=TrainerStatus(d.get("trainerStatus") or TrainerStatus.NONE.value),
        bio=d.get("bio", ""),
        specialties=list(d.get("specialties") or []),
        certifications=list(d.get("certifications") or []),
        location=d.get("location", ""),
        created_at=d.get("createdAt", ""),
        updated_at=d.get("updatedAt", ""),
    )


def request_from_doc(d: dict[str, Any]) -> HireRequest:
    return HireRequest(
        id=d["id"],
        client_id=d["clientId"],
        trainer_id=d["trainerId"],
        status=RequestStatus(d["status"]),
        created_at=d.get("createdAt", ""),
        updated_at=d.get("updatedAt", ""),
    )


def message_from_doc(d: dict[str, Any]) -> ChatMessage:
    return ChatMessage(
        id=d["id"],
        sender_id=d["senderId"],
        receiver_id=d["receiverId"],
        text=d.get("text", ""),
        timestamp=d["timestamp"],
    )


def profile_from_doc(d: dict[str, Any]) -> ClientProfile:
    return ClientProfile(
        user_id=d["userId"],
        weight=float(d.get("weight") or 0.0),
        height=float(d.get("height") or 0.0),
        goal=d.get("goal", ""),
        activity_level=d.get("activityLevel", ""),
        medical_conditions=d.get("medicalConditions", ""),
        updated_at=d.get("updatedAt", ""),
    )


def training_from_doc(d: dict[str, Any]) -> TrainingPlan:
    return TrainingPlan(
        id=d["id"],
        client_id=d["clientId"],
        trainer_id=d["trainerId"],
        exercises=[
            Exercise(
                name=e.get("name", ""),
                sets=int(e.get("sets") or 0),
                reps=str(e.get("reps", "")),
                notes=e.get("notes", ""),
                link=e.get("link", ""),
                image_url=e.get("imageUrl", ""),
            )
            for e in d.get("exercises") or []
        ],
        created_at=d.get("createdAt", ""),
    )


def diet_from_doc(d: dict[str, Any]) -> DietPlan:
    return DietPlan(
        id=d["id"],
        client_id=d["clientId"],
        trainer_id=d["trainerId"],
        meals=[
            Meal(
                time=m.get("time", ""),
                description=m.get("description", ""),
                calories=int(m.get("calories") or 0),
                link=m.get("link", ""),
                image_url=m.get("imageUrl", ""),
            )
            for m in d.get("meals") or []
        ],
        created_at=d.get("createdAt", ""),
    )


def _index_of(records: list[dict[str, Any]], key: str, value: str) -> int:
    for i, record in enumerate(records):
        if record.get(key) == value:
            return i
    return -1


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class JsonUserStore:
    """JSON document implementation of UserStore."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    async def get_by_id(self, user_id: str) -> Optional[User]:
        async with self._doc.read() as data:
            i = _index_of(data["users"], "id", user_id)
            return user_from_doc(data["users"][i]) if i >= 0 else None

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._doc.read() as data:
            i = _index_of(data["users"], "email", email)
            return user_from_doc(data["users"][i]) if i >= 0 else None

    async def list_by_role(self, role: Role) -> list[User]:
        async with self._doc.read() as data:
            return [
                user_from_doc(u) for u in data["users"]
                if u.get("role") == Role(role).value
            ]

    async def list_clients_of(
        self, trainer_id: str, status: TrainerStatus,
    ) -> list[User]:
        async with self._doc.read() as data:
            return [
                user_from_doc(u) for u in data["users"]
                if u.get("role") == Role.CLIENT.value
                and u.get("trainerId") == trainer_id
                and u.get("trainerStatus") == TrainerStatus(status).value
            ]

    async def list_all(self) -> list[User]:
        async with self._doc.read() as data:
            return [user_from_doc(u) for u in data["users"]]

    async def save(self, user: User) -> User:
        now = now_iso()
        stored = replace(user, id=user.id or new_id(), created_at=now, updated_at=now)
        async with self._doc.write() as data:
            data["users"].append(to_doc(stored))
        return stored

    async def update(self, user: User) -> User:
        """Overwrite profile fields; trainerId/trainerStatus are left alone."""
        changes = to_doc(replace(user, updated_at=now_iso()))
        for key in ("trainerId", "trainerStatus", "createdAt"):
            changes.pop(key)
        async with self._doc.write() as data:
            i = _index_of(data["users"], "id", user.id)
            if i < 0:
                raise NotFound(f"User '{user.id}' not found.")
            data["users"][i].update(changes)
            return user_from_doc(data["users"][i])

    async def delete(self, user_id: str) -> bool:
        """Delete a user; clients linked to it are reset to status 'none'."""
        async with self._doc.write() as data:
            i = _index_of(data["users"], "id", user_id)
            if i < 0:
                return False
            del data["users"][i]
            data["clientProfiles"] = [
                p for p in data["clientProfiles"] if p.get("userId") != user_id
            ]
            now = now_iso()
            unlinked = 0
            for record in data["users"]:
                if record.get("trainerId") == user_id:
                    record["trainerId"] = None
                    record["trainerStatus"] = TrainerStatus.NONE.value
                    record["updatedAt"] = now
                    unlinked += 1
        if unlinked:
            logger.info("Deleted user %s and unlinked %d client(s)", user_id, unlinked)
        return True


class JsonHireRequestStore:
    """JSON document implementation of HireRequestStore."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    async def get_by_id(self, request_id: str) -> Optional[HireRequest]:
        async with self._doc.read() as data:
            i = _index_of(data["hireRequests"], "id", request_id)
            return request_from_doc(data["hireRequests"][i]) if i >= 0 else None

    async def list_for_trainer(
        self, trainer_id: str, status: RequestStatus,
    ) -> list[HireRequest]:
        async with self._doc.read() as data:
            return [
                request_from_doc(r) for r in data["hireRequests"]
                if r.get("trainerId") == trainer_id
                and r.get("status") == RequestStatus(status).value
            ]

    async def save_transition(
        self, request: HireRequest, client: Optional[User],
    ) -> HireRequest:
        """Persist *request* and *client*'s trainer link in one rewrite.

        The precondition is re-checked on the records inside the write
        block: a new request needs the client at 'none', an answer needs
        the request still 'pending'. The client is only moved while it
        still waits on the request's trainer.
        """
        now = now_iso()
        if request.id:
            stored = replace(request, updated_at=now)
        else:
            stored = replace(request, id=new_id(), created_at=now, updated_at=now)

        async with self._doc.write() as data:
            if not request.id:
                j = _index_of(data["users"], "id", stored.client_id)
                record = data["users"][j] if j >= 0 else None
                if (
                    record is None
                    or record.get("role") != Role.CLIENT.value
                    or (record.get("trainerStatus") or TrainerStatus.NONE.value)
                    != TrainerStatus.NONE.value
                ):
                    raise InvalidStateTransition(
                        "You already have a trainer or a pending request."
                    )
                data["hireRequests"].append(to_doc(stored))
                record["trainerId"] = stored.trainer_id
                record["trainerStatus"] = TrainerStatus.PENDING.value
                record["updatedAt"] = now
                return stored

            i = _index_of(data["hireRequests"], "id", stored.id)
            if i < 0:
                raise NotFound(f"Request '{stored.id}' not found.")
            current = data["hireRequests"][i]
            if current.get("status") != RequestStatus.PENDING.value:
                raise InvalidStateTransition(
                    f"Request '{stored.id}' was already answered."
                )
            current["status"] = RequestStatus(stored.status).value
            current["updatedAt"] = now

            if client is not None:
                j = _index_of(data["users"], "id", client.id)
                record = data["users"][j] if j >= 0 else None
                if (
                    record is not None
                    and record.get("trainerId") == stored.trainer_id
                    and record.get("trainerStatus") == TrainerStatus.PENDING.value
                ):
                    record["trainerId"] = client.trainer_id
                    record["trainerStatus"] = TrainerStatus(client.trainer_status).value
                    record["updatedAt"] = now
                else:
                    logger.warning(
                        "Client %s no longer waits on request %s, left unchanged",
                        client.id, stored.id,
                    )
        return stored


class JsonChatStore:
    """JSON document implementation of ChatStore."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    async def save(self, message: ChatMessage) -> ChatMessage:
        stored = replace(
            message,
            id=message.id or new_id(),
            timestamp=message.timestamp or now_iso(),
        )
        async with self._doc.write() as data:
            data["chatMessages"].append(to_doc(stored))
        return stored

    async def get_between(self, user_id: str, other_id: str) -> list[ChatMessage]:
        async with self._doc.read() as data:
            messages = [
                message_from_doc(m) for m in data["chatMessages"]
                if (m.get("senderId") == user_id and m.get("receiverId") == other_id)
                or (m.get("senderId") == other_id and m.get("receiverId") == user_id)
            ]
        # sorted() is stable: equal timestamps keep arrival order
        return sorted(messages, key=lambda m: m.timestamp)


class JsonProfileStore:
    """JSON document implementation of ProfileStore."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    async def get_by_user(self, user_id: str) -> Optional[ClientProfile]:
        async with self._doc.read() as data:
            i = _index_of(data["clientProfiles"], "userId", user_id)
            return profile_from_doc(data["clientProfiles"][i]) if i >= 0 else None

    async def upsert(self, profile: ClientProfile) -> ClientProfile:
        stored = replace(profile, updated_at=now_iso())
        async with self._doc.write() as data:
            i = _index_of(data["clientProfiles"], "userId", stored.user_id)
            if i >= 0:
                data["clientProfiles"][i] = to_doc(stored)
            else:
                data["clientProfiles"].append(to_doc(stored))
        return stored


class JsonPlanStore:
    """JSON document implementation of PlanStore."""

    def __init__(self, document: JsonDocument):
        self._doc = document

    async def save_training(self, plan: TrainingPlan) -> TrainingPlan:
        stored = replace(plan, id=plan.id or new_id(), created_at=now_iso())
        async with self._doc.write() as data:
            data["trainingPlans"].append(to_doc(stored))
        return stored

    async def save_diet(self, plan: DietPlan) -> DietPlan:
        stored = replace(plan, id=plan.id or new_id(), created_at=now_iso())
        async with self._doc.write() as data:
            data["dietPlans"].append(to_doc(stored))
        return stored

    async def get_training_for(self, client_id: str) -> list[TrainingPlan]:
        async with self._doc.read() as data:
            plans = [
                training_from_doc(p) for p in data["trainingPlans"]
                if p.get("clientId") == client_id
            ]
        return sorted(plans, key=lambda p: p.created_at, reverse=True)

    async def get_diet_for(self, client_id: str) -> list[DietPlan]:
        async with self._doc.read() as data:
            plans = [
                diet_from_doc(p) for p in data["dietPlans"]
                if p.get("clientId") == client_id
            ]
        return sorted(plans, key=lambda p: p.created_at, reverse=True)
