"""
application.dto - Data Transfer Objects for service input/output.

These are the structured values that services accept and return to
callers (REST routers, the WebSocket handler, the CLI).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from domain.entities import User, HireRequest, TrainingPlan, DietPlan


@dataclass(frozen=True)
class RegisterRequest:
    """Input for account registration."""
    email: str
    password: str
    name: str = ""
    role: str = "client"


@dataclass(frozen=True)
class LoginRequest:
    """Input for user login."""
    email: str
    password: str


@dataclass(frozen=True)
class AuthResult:
    """The authenticated user plus a JWT for subsequent calls."""
    user: User
    access_token: str
    token_type: str = "bearer"


@dataclass(frozen=True)
class ProfileUpdate:
    """Partial profile update; None means 'leave unchanged'."""
    name: Optional[str] = None
    image_url: Optional[str] = None
    bio: Optional[str] = None
    specialties: Optional[list[str]] = None
    certifications: Optional[list[str]] = None
    location: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True)
class HireOutcome:
    """Result of a successful hire request."""
    client: User
    request: HireRequest


@dataclass(frozen=True)
class PendingRequest:
    """A pending hire request joined with the requesting client."""
    request: HireRequest
    client: Optional[User]


@dataclass(frozen=True)
class ClientPlans:
    training: list[TrainingPlan]
    diet: list[DietPlan]
