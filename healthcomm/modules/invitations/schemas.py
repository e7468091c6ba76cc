# healthcomm/modules/invitations/schemas.py

import enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from healthcomm.models.models import CareTeamRole, InvitationStatus


class InvitationAction(str, enum.Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


class SendInvitationRequest(BaseModel):
    recipient_email: EmailStr
    type: CareTeamRole
    message: Optional[str] = Field("", max_length=1000)


class SendInvitationResponse(BaseModel):
    success: bool = True
    invitation_id: str
    expires_at: datetime


class RespondInvitationRequest(BaseModel):
    action: InvitationAction


class RespondInvitationResponse(BaseModel):
    success: bool = True
    status: InvitationStatus


class InvitationResponse(BaseModel):
    id: str
    sender_id: str
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    recipient_email: str
    type: CareTeamRole
    status: InvitationStatus
    message: str
    created_at: datetime
    expires_at: datetime
    responded_at: Optional[datetime] = None


class InvitationsListResponse(BaseModel):
    sent: List[InvitationResponse]
    received: List[InvitationResponse]
