# healthcomm/modules/profile/profile_controller.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import profile_service as service
from .schemas import ProfileResponse, UpdateProfileRequest, UpdateProfileResponse


router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """The caller's account and role profile. ``has_profile`` is false until the first update."""
    return await service.get_profile(db, current_user)


@router.put("", response_model=UpdateProfileResponse)
async def update_profile(
    data: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """
    Create or update the caller's profile.

    Patients set chronic conditions and the auto-escalation opt-in, doctors
    their specialization and practice years, caretakers their certification
    and experience. Fields belonging to another role are rejected.
    """
    return await service.upsert_profile(db, current_user, data)
