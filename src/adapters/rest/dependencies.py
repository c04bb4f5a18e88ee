"""
Shared FastAPI dependencies.

- get_factory(): returns the initialized ServiceFactory (set at startup).
- get_current_user(): JWT bearer token extraction and validation.
- ensure_self(): the acting user must be the user named in the request.
- ensure_self_or_connected(): ... or that user's connected partner.
- domain_error_response(): maps domain exceptions to HTTP responses.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from factory import ServiceFactory
from domain.entities import User
from domain.exceptions import (
    DomainError,
    ValidationError,
    InvalidStateTransition,
    NotFound,
    Forbidden,
    UpstreamFailure,
    AuthenticationError,
    DuplicateLoginError,
)

# Module-level reference set by app lifespan
_factory: ServiceFactory | None = None


def set_factory(factory: ServiceFactory | None) -> None:
    global _factory
    _factory = factory


def get_factory() -> ServiceFactory:
    if _factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return _factory


# --- Error mapping ---

_STATUS_BY_ERROR: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidStateTransition: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Forbidden: status.HTTP_403_FORBIDDEN,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    DuplicateLoginError: status.HTTP_409_CONFLICT,
    UpstreamFailure: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: DomainError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_response(request: Request, exc: DomainError) -> JSONResponse:
    """Exception handler: {"detail": ..., "code": "<ErrorClass>"}."""
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": str(exc), "code": type(exc).__name__},
    )


# --- JWT Bearer ---

_bearer_scheme = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    factory: ServiceFactory = Depends(get_factory),
) -> User:
    """Validate JWT and load the user it names. Raises 401 on failure."""
    auth_service = factory.create_authentication_service()
    try:
        payload = auth_service.verify_token(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await factory.create_user_store().get_by_id(payload["user_id"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise Forbidden("Admin access required.")
    return user


def ensure_self(user: User, user_id: str, *, allow_admin: bool = False) -> None:
    """Raise Forbidden unless *user* is acting on their own behalf."""
    if user.id == user_id:
        return
    if allow_admin and user.is_admin:
        return
    raise Forbidden("You can only act on your own behalf.")


async def ensure_self_or_connected(
    user: User, user_id: str, factory: ServiceFactory,
) -> None:
    """Allow the user named in the path, their connected partner, or an admin."""
    if user.id == user_id or user.is_admin:
        return
    if not await factory.create_access_guard().is_connected(user.id, user_id):
        raise Forbidden("You are not connected to this user.")
