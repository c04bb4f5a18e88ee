"""Pydantic models for REST API request/response validation.

Field names are snake_case in Python and camelCase on the wire
(clientId, trainerStatus, ...); requests accept either spelling.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.entities import (
    User,
    HireRequest,
    ChatMessage,
    ClientProfile,
    TrainingPlan,
    DietPlan,
    Exercise,
    Meal,
)


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth ---

class RegisterBody(_Wire):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6)
    name: str = ""
    role: Literal["client", "trainer"] = "client"


class LoginBody(_Wire):
    email: str
    password: str


# --- Users ---

class UserOut(_Wire):
    id: str
    email: str
    name: str
    role: str
    image_url: str = ""
    trainer_id: Optional[str] = None
    trainer_status: str = "none"
    bio: str = ""
    specialties: list[str] = []
    certifications: list[str] = []
    location: str = ""
    created_at: str = ""

    @classmethod
    def from_entity(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role.value,
            image_url=user.image_url,
            trainer_id=user.trainer_id,
            trainer_status=user.trainer_status.value,
            bio=user.bio,
            specialties=list(user.specialties),
            certifications=list(user.certifications),
            location=user.location,
            created_at=user.created_at,
        )


class AuthOut(_Wire):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdateBody(_Wire):
    name: Optional[str] = None
    image_url: Optional[str] = None
    bio: Optional[str] = None
    specialties: Optional[list[str]] = None
    certifications: Optional[list[str]] = None
    location: Optional[str] = None
    role: Optional[Literal["client", "trainer", "admin"]] = None


# --- Hiring ---

class HireRequestBody(_Wire):
    client_id: str
    trainer_id: str


class RespondRequestBody(_Wire):
    request_id: str
    status: Literal["accepted", "rejected"]


class HireRequestOut(_Wire):
    id: str
    client_id: str
    trainer_id: str
    status: str
    created_at: str

    @classmethod
    def from_entity(cls, request: HireRequest) -> HireRequestOut:
        return cls(
            id=request.id,
            client_id=request.client_id,
            trainer_id=request.trainer_id,
            status=request.status.value,
            created_at=request.created_at,
        )


class HireOut(_Wire):
    user: UserOut
    request: HireRequestOut


class PendingRequestOut(_Wire):
    request_id: str
    created_at: str
    client: Optional[UserOut] = None


class RespondOut(_Wire):
    message: str
    client: Optional[UserOut] = None


# --- Chat ---

class SendMessageBody(_Wire):
    sender_id: str
    receiver_id: str
    text: str = Field(..., max_length=4000)


class MessageOut(_Wire):
    id: str
    sender_id: str
    receiver_id: str
    text: str
    timestamp: str

    @classmethod
    def from_entity(cls, message: ChatMessage) -> MessageOut:
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            text=message.text,
            timestamp=message.timestamp,
        )


# --- Client profile ---

class ClientProfileBody(_Wire):
    user_id: str
    weight: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)
    goal: str = ""
    activity_level: str = ""
    medical_conditions: str = ""

    def to_entity(self) -> ClientProfile:
        return ClientProfile(
            user_id=self.user_id,
            weight=self.weight,
            height=self.height,
            goal=self.goal,
            activity_level=self.activity_level,
            medical_conditions=self.medical_conditions,
        )


class ClientProfileOut(_Wire):
    user_id: str
    weight: float
    height: float
    goal: str
    activity_level: str
    medical_conditions: str
    updated_at: str = ""

    @classmethod
    def from_entity(cls, profile: ClientProfile) -> ClientProfileOut:
        return cls(
            user_id=profile.user_id,
            weight=profile.weight,
            height=profile.height,
            goal=profile.goal,
            activity_level=profile.activity_level,
            medical_conditions=profile.medical_conditions,
            updated_at=profile.updated_at,
        )


# --- Plans ---

class ExerciseIn(_Wire):
    name: str
    sets: int = Field(0, ge=0)
    reps: str = ""
    notes: str = ""
    link: str = ""
    image_url: str = ""


class MealIn(_Wire):
    time: str = ""
    description: str
    calories: int = Field(0, ge=0)
    link: str = ""
    image_url: str = ""


class TrainingPlanBody(_Wire):
    client_id: str
    trainer_id: str
    exercises: list[ExerciseIn]

    def to_exercises(self) -> list[Exercise]:
        return [Exercise(**e.model_dump()) for e in self.exercises]


class DietPlanBody(_Wire):
    client_id: str
    trainer_id: str
    meals: list[MealIn]

    def to_meals(self) -> list[Meal]:
        return [Meal(**m.model_dump()) for m in self.meals]


class TrainingPlanOut(_Wire):
    id: str
    client_id: str
    trainer_id: str
    exercises: list[ExerciseIn]
    created_at: str

    @classmethod
    def from_entity(cls, plan: TrainingPlan) -> TrainingPlanOut:
        return cls(
            id=plan.id,
            client_id=plan.client_id,
            trainer_id=plan.trainer_id,
            exercises=[ExerciseIn(**vars(e)) for e in plan.exercises],
            created_at=plan.created_at,
        )


class DietPlanOut(_Wire):
    id: str
    client_id: str
    trainer_id: str
    meals: list[MealIn]
    created_at: str

    @classmethod
    def from_entity(cls, plan: DietPlan) -> DietPlanOut:
        return cls(
            id=plan.id,
            client_id=plan.client_id,
            trainer_id=plan.trainer_id,
            meals=[MealIn(**vars(m)) for m in plan.meals],
            created_at=plan.created_at,
        )


class PlansOut(_Wire):
    training: list[TrainingPlanOut]
    diet: list[DietPlanOut]
