# healthcomm/modules/invitations/invitations_service.py
"""
Care-team invitations.

A patient invites someone by email to join as doctor or caretaker. The
recipient accepts or declines within the TTL; accepting writes them onto
the sender's care team directly, bypassing the scorer.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.common.errors import FailedPrecondition, NotFound, PermissionDenied, internal_errors
from healthcomm.common.utils.global_functions import as_utc, full_name, utcnow
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.models.models import (
    CareTeamRole, Invitation, InvitationStatus, Patient, User, UserRole,
)
from healthcomm.modules.audit.audit_service import record_audit
from .schemas import (
    InvitationAction, InvitationResponse, InvitationsListResponse,
    RespondInvitationResponse, SendInvitationRequest, SendInvitationResponse,
)

logger = logging.getLogger(__name__)

# The account role that may accept an invitation of each type.
RECIPIENT_ROLES = {
    CareTeamRole.DOCTOR: UserRole.MEDICAL,
    CareTeamRole.CARETAKER: UserRole.CARETAKER,
}


async def send_invitation(db: AsyncSession, caller: User, data: SendInvitationRequest) -> SendInvitationResponse:
    logger.info("Sending %s invitation from %s", data.type.value, caller.id)

    with internal_errors(GlobalMessages.SEND_INVITATION_FAILED):
        now = utcnow()
        invitation = Invitation(
            sender_id=caller.id,
            sender_name=full_name(caller.first_name, caller.last_name),
            sender_email=caller.email,
            recipient_email=str(data.recipient_email).lower(),
            type=data.type,
            status=InvitationStatus.PENDING,
            message=data.message or "",
            created_at=now,
            expires_at=now + timedelta(days=settings.INVITATION_TTL_DAYS),
        )
        db.add(invitation)
        await db.flush()

        record_audit(db, "invitation_sent", caller.id, {
            "invitation_id": invitation.id,
            "recipient_email": invitation.recipient_email,
            "type": data.type,
        })
        await db.commit()

    logger.info("Invitation %s (%s) sent by %s", invitation.id, data.type.value, caller.id)
    return SendInvitationResponse(
        success=True,
        invitation_id=str(invitation.id),
        expires_at=invitation.expires_at,
    )


async def respond_to_invitation(
    db: AsyncSession,
    caller: User,
    invitation_id: UUID,
    action: InvitationAction,
    now: Optional[datetime] = None
) -> RespondInvitationResponse:
    """
    Accept or decline an invitation addressed to the caller.

    Emails are compared case-insensitively. Accepting requires the caller's
    account role to match the invitation type, then places the caller on the
    sender's care team in the same transaction.
    """
    logger.info("Invitation %s: %s requested by %s", invitation_id, action.value, caller.id)
    now = now or utcnow()

    with internal_errors(GlobalMessages.RESPOND_INVITATION_FAILED):
        invitation = await db.get(Invitation, invitation_id, with_for_update=True)
        if not invitation:
            raise NotFound(GlobalMessages.INVITATION_NOT_FOUND)

        if caller.email.lower() != invitation.recipient_email.lower():
            raise PermissionDenied(GlobalMessages.NOT_INVITATION_RECIPIENT)
        if invitation.status != InvitationStatus.PENDING:
            raise FailedPrecondition(GlobalMessages.INVITATION_ALREADY_RESPONDED)
        if as_utc(invitation.expires_at) < now:
            raise FailedPrecondition(GlobalMessages.INVITATION_EXPIRED)

        accepted = action == InvitationAction.ACCEPT
        if accepted and caller.role != RECIPIENT_ROLES[invitation.type]:
            raise PermissionDenied(GlobalMessages.INVITATION_ROLE_MISMATCH)

        invitation.status = InvitationStatus.ACCEPTED if accepted else InvitationStatus.DECLINED
        invitation.responded_at = now
        invitation.responded_by = caller.id

        if accepted:
            result = await db.execute(
                select(Patient).where(Patient.user_id == invitation.sender_id).with_for_update()
            )
            patient = result.scalar_one_or_none()
            if patient:
                if invitation.type == CareTeamRole.DOCTOR:
                    patient.assigned_doctor_id = caller.id
                else:
                    patient.assigned_caretaker_id = caller.id
            else:
                logger.warning("Invitation %s accepted but sender %s has no patient profile", invitation.id, invitation.sender_id)

        record_audit(db, f"invitation_{invitation.status.value}", caller.id, {
            "invitation_id": invitation.id,
            "sender_id": invitation.sender_id,
            "type": invitation.type,
        })
        await db.commit()

    logger.info("Invitation %s %s by %s", invitation_id, invitation.status.value, caller.id)
    return RespondInvitationResponse(success=True, status=invitation.status)


def _to_response(invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=str(invitation.id),
        sender_id=str(invitation.sender_id),
        sender_name=invitation.sender_name,
        sender_email=invitation.sender_email,
        recipient_email=invitation.recipient_email,
        type=invitation.type,
        status=invitation.status,
        message=invitation.message or "",
        created_at=as_utc(invitation.created_at),
        expires_at=as_utc(invitation.expires_at),
        responded_at=as_utc(invitation.responded_at),
    )


async def get_user_invitations(db: AsyncSession, user: User) -> InvitationsListResponse:
    """Invitations the user sent, and those addressed to their email. Newest first."""
    sent = await db.execute(
        select(Invitation)
        .where(Invitation.sender_id == user.id)
        .order_by(desc(Invitation.created_at))
    )
    received = await db.execute(
        select(Invitation)
        .where(func.lower(Invitation.recipient_email) == user.email.lower())
        .order_by(desc(Invitation.created_at))
    )
    return InvitationsListResponse(
        sent=[_to_response(i) for i in sent.scalars().all()],
        received=[_to_response(i) for i in received.scalars().all()],
    )


async def cleanup_expired_invitations(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Delete every pending invitation past its expiry. Returns how many were removed."""
    now = now or utcnow()
    result = await db.execute(
        delete(Invitation)
        .where(
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at < now,
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
