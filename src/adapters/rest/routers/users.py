"""Protected profile update endpoint."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from domain.entities import User
from application.dto import ProfileUpdate
from adapters.rest.dependencies import get_factory, get_current_user
from adapters.rest.schemas import ProfileUpdateBody, UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/profile", response_model=UserOut)
async def update_profile(
    body: ProfileUpdateBody,
    user: User = Depends(get_current_user),
    factory: ServiceFactory = Depends(get_factory),
):
    """Update the caller's own name, picture, bio, specialties, ..."""
    service = factory.create_user_service()
    updated = await service.update_profile(user.id, ProfileUpdate(
        name=body.name,
        image_url=body.image_url,
        bio=body.bio,
        specialties=body.specialties,
        certifications=body.certifications,
        location=body.location,
        role=body.role,
    ))
    return UserOut.from_entity(updated)
