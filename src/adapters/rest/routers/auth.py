"""Auth endpoints: register, login and the current user."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from application.dto import RegisterRequest, LoginRequest
from adapters.rest.dependencies import get_factory, get_current_user
from adapters.rest.schemas import RegisterBody, LoginBody, AuthOut, UserOut

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
async def register(
    body: RegisterBody,
    factory: ServiceFactory = Depends(get_factory),
):
    auth_service = factory.create_authentication_service()
    result = await auth_service.register(RegisterRequest(
        email=body.email,
        password=body.password,
        name=body.name,
        role=body.role,
    ))
    return AuthOut(
        access_token=result.access_token,
        token_type=result.token_type,
        user=UserOut.from_entity(result.user),
    )


@router.post("/login", response_model=AuthOut)
async def login(
    body: LoginBody,
    factory: ServiceFactory = Depends(get_factory),
):
    auth_service = factory.create_authentication_service()
    result = await auth_service.login(LoginRequest(
        email=body.email,
        password=body.password,
    ))
    return AuthOut(
        access_token=result.access_token,
        token_type=result.token_type,
        user=UserOut.from_entity(result.user),
    )


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    """Fresh copy of the caller's own record (clients cache it locally)."""
    return UserOut.from_entity(user)
