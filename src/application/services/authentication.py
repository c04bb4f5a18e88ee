"""
application.services.authentication - Account registration and login.

Handles password hashing (bcrypt), JWT creation/verification and seeding
of the configured admin account.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt as _bcrypt
from jose import jwt, JWTError

from domain.entities import User, Role, TrainerStatus
from domain.ports import UserStore
from domain.exceptions import AuthenticationError, DuplicateLoginError, ValidationError
from application.dto import RegisterRequest, LoginRequest, AuthResult

logger = logging.getLogger(__name__)

_SELF_SERVICE_ROLES = {Role.CLIENT, Role.TRAINER}


def default_avatar(email: str) -> str:
    return f"https://picsum.photos/seed/{email}/200"


class AuthenticationService:
    """Handles registration, login, and JWT management."""

    def __init__(
        self,
        user_store: UserStore,
        jwt_secret: str,
        jwt_expiry_hours: int = 24,
        jwt_algorithm: str = "HS256",
    ):
        self._users = user_store
        self._jwt_secret = jwt_secret
        self._jwt_expiry_hours = jwt_expiry_hours
        self._jwt_algorithm = jwt_algorithm

    async def register(self, request: RegisterRequest) -> AuthResult:
        """Create a client or trainer account and return it with a JWT."""
        email = request.email.strip().lower()
        if not email or "@" not in email:
            raise ValidationError("A valid e-mail address is required.")
        if len(request.password) < 6:
            raise ValidationError("Password must be at least 6 characters.")
        try:
            role = Role(request.role)
        except ValueError:
            raise ValidationError(f"Unknown role '{request.role}'.")
        if role not in _SELF_SERVICE_ROLES:
            raise ValidationError("Only client and trainer accounts can be registered.")

        if await self._users.get_by_email(email) is not None:
            raise DuplicateLoginError(f"E-mail '{email}' is already registered.")

        user = await self._users.save(User(
            email=email,
            name=request.name.strip() or email.split("@")[0],
            role=role,
            password_hash=self._hash(request.password),
            image_url=default_avatar(email),
            trainer_status=TrainerStatus.NONE,
        ))
        logger.info("Registered %s %s with e-mail '%s'", role.value, user.id, email)
        return self._result(user)

    async def login(self, request: LoginRequest) -> AuthResult:
        """Verify credentials and return the user with a JWT."""
        user = await self._users.get_by_email(request.email.strip().lower())
        if user is None or not user.password_hash:
            raise AuthenticationError("Invalid e-mail or password.")

        if not _bcrypt.checkpw(
            request.password.encode(), user.password_hash.encode(),
        ):
            raise AuthenticationError("Invalid e-mail or password.")

        logger.info("User %s logged in", user.id)
        return self._result(user)

    async def ensure_admin(self, email: str, password: str, name: str = "Administrator") -> User:
        """Create the admin account if no user owns *email* yet."""
        email = email.strip().lower()
        existing = await self._users.get_by_email(email)
        if existing is not None:
            if not existing.is_admin:
                logger.warning("Admin e-mail '%s' belongs to a %s account", email, existing.role.value)
            return existing
        admin = await self._users.save(User(
            email=email,
            name=name,
            role=Role.ADMIN,
            password_hash=self._hash(password),
            image_url=default_avatar(email),
        ))
        logger.info("Seeded admin account %s ('%s')", admin.id, email)
        return admin

    def verify_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT. Returns the payload dict."""
        try:
            payload = jwt.decode(
                token, self._jwt_secret, algorithms=[self._jwt_algorithm],
            )
        except JWTError as exc:
            raise AuthenticationError(f"Token verification failed: {exc}")
        if not payload.get("user_id"):
            raise AuthenticationError("Invalid token payload.")
        return payload

    def create_token(self, user_id: str, role: str) -> str:
        expire = datetime.now(timezone.utc) + timedelta(hours=self._jwt_expiry_hours)
        payload = {
            "user_id": user_id,
            "role": role,
            "exp": expire,
        }
        return jwt.encode(payload, self._jwt_secret, algorithm=self._jwt_algorithm)

    def _result(self, user: User) -> AuthResult:
        return AuthResult(
            user=user,
            access_token=self.create_token(user.id, user.role.value),
        )

    @staticmethod
    def _hash(password: str) -> str:
        return _bcrypt.hashpw(password.encode(), _bcrypt.gensalt()).decode()
