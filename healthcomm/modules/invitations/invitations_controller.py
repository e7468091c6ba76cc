# healthcomm/modules/invitations/invitations_controller.py

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import invitations_service as service
from .schemas import (
    InvitationsListResponse,
    RespondInvitationRequest, RespondInvitationResponse,
    SendInvitationRequest, SendInvitationResponse,
)


router = APIRouter(prefix="/invitations", tags=["Invitations"])


@router.post("", response_model=SendInvitationResponse)
async def send_invitation(
    data: SendInvitationRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """Invite someone by email to join your care team. Expires after the configured TTL."""
    return await service.send_invitation(db, current_user, data)


@router.post("/{invitation_id}/respond", response_model=RespondInvitationResponse)
async def respond_to_invitation(
    invitation_id: UUID,
    data: RespondInvitationRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    return await service.respond_to_invitation(db, current_user, invitation_id, data.action)


@router.get("", response_model=InvitationsListResponse)
async def get_invitations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    return await service.get_user_invitations(db, current_user)
