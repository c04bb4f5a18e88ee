"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Plain dataclasses, decoupled from any persistence strategy: no SQL
concerns, no JSON document concerns, no DB imports.

Ids are opaque hex strings and timestamps are ISO-8601 strings. Both are
assigned by the services/repositories, never by the entities themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Role(str, Enum):
    CLIENT = "client"
    TRAINER = "trainer"
    ADMIN = "admin"


class TrainerStatus(str, Enum):
    """Relationship state of a client towards its trainer."""
    NONE = "none"
    PENDING = "pending"
    ACCEPTED = "accepted"


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class User:
    """Account record for clients, trainers and admins.

    trainer_id / trainer_status are only meaningful for clients:
    status NONE <=> trainer_id is None.
    """
    id: str = ""
    email: str = ""
    name: str = ""
    role: Role = Role.CLIENT
    password_hash: str = ""
    image_url: str = ""
    trainer_id: Optional[str] = None
    trainer_status: TrainerStatus = TrainerStatus.NONE
    bio: str = ""
    specialties: list[str] = field(default_factory=list)
    certifications: list[str] = field(default_factory=list)
    location: str = ""
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_client(self) -> bool:
        return self.role == Role.CLIENT

    @property
    def is_trainer(self) -> bool:
        return self.role == Role.TRAINER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class HireRequest:
    """A client's proposal to engage a trainer. Never deleted."""
    id: str = ""
    client_id: str = ""
    trainer_id: str = ""
    status: RequestStatus = RequestStatus.PENDING
    created_at: str = ""
    updated_at: str = ""


@dataclass
class ChatMessage:
    """A single message between two users. Append-only."""
    id: str = ""
    sender_id: str = ""
    receiver_id: str = ""
    text: str = ""
    timestamp: str = ""

    def involves(self, user_id: str, other_id: str) -> bool:
        """True if the message was exchanged between the two given users."""
        return (
            (self.sender_id == user_id and self.receiver_id == other_id)
            or (self.sender_id == other_id and self.receiver_id == user_id)
        )


@dataclass
class ClientProfile:
    """Fitness questionnaire filled in by a client."""
    user_id: str = ""
    weight: float = 0.0
    height: float = 0.0
    goal: str = ""
    activity_level: str = ""
    medical_conditions: str = ""
    updated_at: str = ""


@dataclass
class Exercise:
    name: str = ""
    sets: int = 0
    reps: str = ""
    notes: str = ""
    link: str = ""
    image_url: str = ""


@dataclass
class Meal:
    time: str = ""
    description: str = ""
    calories: int = 0
    link: str = ""
    image_url: str = ""


@dataclass
class TrainingPlan:
    id: str = ""
    client_id: str = ""
    trainer_id: str = ""
    exercises: list[Exercise] = field(default_factory=list)
    created_at: str = ""


@dataclass
class DietPlan:
    id: str = ""
    client_id: str = ""
    trainer_id: str = ""
    meals: list[Meal] = field(default_factory=list)
    created_at: str = ""
