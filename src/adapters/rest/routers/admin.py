"""Admin-only user management."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from domain.exceptions import ValidationError
from adapters.rest.dependencies import get_factory, require_admin
from adapters.rest.schemas import UserOut

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserOut])
async def list_users(
    admin: User = Depends(require_admin),
    factory: ServiceFactory = Depends(get_factory),
):
    users = await factory.create_user_service().list_users()
    return [UserOut.from_entity(u) for u in users]


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    factory: ServiceFactory = Depends(get_factory),
):
    """Delete an account. A deleted trainer's clients go back to 'none'."""
    if user_id == admin.id:
        raise ValidationError("Admins cannot delete their own account.")
    await factory.create_user_service().delete_user(user_id)
    return {"success": True}
