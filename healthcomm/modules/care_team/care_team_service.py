# healthcomm/modules/care_team/care_team_service.py
"""Care team service: assignment, care team view, availability and credentials."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.errors import NotFound, PermissionDenied, internal_errors
from healthcomm.common.utils.global_functions import as_utc, full_name, utcnow
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.common.utils.patient_access import (
    is_patient_or_caretaker, load_patient, require_patient_access,
)
from healthcomm.models.models import (
    Availability, CareProvider, CareTeamRole, CredentialVerification,
    NotificationType, AlertSeverity, User, UserRole, VerificationStatus,
)
from healthcomm.modules.audit.audit_service import record_audit
from healthcomm.modules.notifications.notifications_service import create_notification
from .candidates import current_weights, load_candidates
from .scoring import PatientProfile, ScoredCandidate, ScoringMode, ScoringWeights, select_best
from .escalation import care_tier
from .schemas import (
    AssignCareTeamRequest, AssignCareTeamResponse, AssignmentReason,
    CareTeamMember, CareTeamResponse,
    UpdateAvailabilityResponse, VerifyCredentialsRequest, VerifyCredentialsResponse,
)

logger = logging.getLogger(__name__)


def build_assignment_reason(selected: ScoredCandidate, role: CareTeamRole, now: datetime) -> AssignmentReason:
    return AssignmentReason(
        score=round(selected.score, 2),
        role=role,
        factors=selected.factors(role),
        assigned_by="system",
        timestamp=now,
    )


# =============================================================================
# ASSIGNMENT
# =============================================================================

async def assign_care_team_member(
    db: AsyncSession,
    caller: User,
    data: AssignCareTeamRequest,
    weights: Optional[ScoringWeights] = None
) -> AssignCareTeamResponse:
    """
    Pick the best doctor or caretaker for a patient and record the assignment.

    Only the patient or their current caretaker may request an assignment.
    The patient row is locked for the duration, so two concurrent requests
    for the same patient serialise and the last one wins.
    """
    role = data.care_team_role
    logger.info("Assigning %s for patient %s (requested by %s)", role.value, data.patient_id, caller.id)

    with internal_errors(f"Failed to assign {role.value}."):
        patient_user, patient = await load_patient(db, data.patient_id, for_update=True)
        if not is_patient_or_caretaker(patient, caller.id):
            raise PermissionDenied(GlobalMessages.ASSIGN_PERMISSION_DENIED)

        candidates = await load_candidates(db, role, exclude_patient_id=patient.user_id)
        profile = PatientProfile(
            chronic_conditions=tuple(patient.chronic_conditions or ()),
            preferred_specialization=data.preferred_specialization,
            urgency=data.urgency,
        )
        selected = select_best(role, candidates, profile, ScoringMode.FULL, weights or current_weights())
        chosen = selected.candidate

        now = utcnow()
        reason = build_assignment_reason(selected, role, now)

        if role == CareTeamRole.DOCTOR:
            patient.assigned_doctor_id = chosen.provider_id
        else:
            patient.assigned_caretaker_id = chosen.provider_id
            if data.auto_escalate:
                patient.auto_escalate_to_doctor = True
        patient.assignment_reason = reason.model_dump(mode="json")
        patient.assigned_at = now

        patient_name = full_name(patient_user.first_name, patient_user.last_name)
        create_notification(
            db,
            user_id=chosen.provider_id,
            title="New Patient Assigned",
            message=f"{patient_name} has been assigned to your care.",
            notification_type=NotificationType.SYSTEM,
            severity=AlertSeverity.LOW,
            patient_id=patient.user_id,
            patient_name=patient_name,
        )
        create_notification(
            db,
            user_id=patient.user_id,
            title=f"{role.value.capitalize()} Assigned",
            message=f"{chosen.name} has been assigned as your {role.value}.",
            notification_type=NotificationType.SYSTEM,
            severity=AlertSeverity.LOW,
        )

        record_audit(db, f"{role.value}_assigned", caller.id, {
            "patient_id": patient.user_id,
            "assigned_id": chosen.provider_id,
            "score": reason.score,
            "factors": reason.factors,
        })

        await db.commit()

    logger.info("Assigned %s %s to patient %s (score %.2f)", role.value, chosen.provider_id, patient.user_id, reason.score)

    return AssignCareTeamResponse(
        success=True,
        assigned_id=str(chosen.provider_id),
        assigned_name=chosen.name,
        role=role,
        reason=reason,
        message=f"Successfully assigned {chosen.name} as {role.value}.",
    )


# =============================================================================
# CARE TEAM VIEW
# =============================================================================

async def _member(db: AsyncSession, user_id: Optional[UUID], role: CareTeamRole) -> Optional[CareTeamMember]:
    if user_id is None:
        return None
    result = await db.execute(
        select(User, CareProvider)
        .outerjoin(CareProvider, CareProvider.user_id == User.id)
        .where(User.id == user_id)
    )
    row = result.first()
    if row is None:
        return None
    user, provider = row
    return CareTeamMember(
        id=str(user.id),
        name=full_name(user.first_name, user.last_name),
        role=role,
        availability=provider.availability if provider else None,
        specialization=provider.specialization if provider else None,
        certified=provider.certified if provider else None,
    )


async def get_care_team(db: AsyncSession, caller: User, patient_id: UUID) -> CareTeamResponse:
    """The patient's current doctor, caretaker and escalation state."""
    _, patient = await load_patient(db, patient_id)
    require_patient_access(patient, caller)

    return CareTeamResponse(
        patient_id=str(patient.user_id),
        tier=care_tier(patient).value,
        status=patient.status.value,
        doctor=await _member(db, patient.assigned_doctor_id, CareTeamRole.DOCTOR),
        caretaker=await _member(db, patient.assigned_caretaker_id, CareTeamRole.CARETAKER),
        assignment_reason=patient.assignment_reason,
        auto_escalate_to_doctor=bool(patient.auto_escalate_to_doctor),
        escalated_at=as_utc(patient.escalated_at),
        escalated_from=str(patient.escalated_from) if patient.escalated_from else None,
        escalation_reason=patient.escalation_reason,
        chronic_conditions=list(patient.chronic_conditions or []),
    )


# =============================================================================
# PROVIDER SELF-SERVICE
# =============================================================================

async def _get_provider(db: AsyncSession, user: User) -> CareProvider:
    result = await db.execute(select(CareProvider).where(CareProvider.user_id == user.id))
    provider = result.scalar_one_or_none()
    if not provider:
        raise NotFound(GlobalMessages.PROVIDER_PROFILE_NOT_FOUND)
    return provider


async def update_availability(db: AsyncSession, caller: User, availability: Availability) -> UpdateAvailabilityResponse:
    """Set the caller's availability. Only doctors and caretakers have one."""
    logger.info("Availability update to %s requested by %s", availability.value, caller.id)
    if caller.role not in (UserRole.MEDICAL, UserRole.CARETAKER):
        raise PermissionDenied(GlobalMessages.AVAILABILITY_PERMISSION_DENIED)

    with internal_errors(GlobalMessages.AVAILABILITY_FAILED):
        provider = await _get_provider(db, caller)
        previous = provider.availability
        provider.availability = availability
        provider.availability_updated_at = utcnow()

        record_audit(db, "availability_updated", caller.id, {
            "previous": previous,
            "availability": availability,
        })
        await db.commit()

    logger.info("Provider %s availability %s -> %s", caller.id, previous.value, availability.value)
    return UpdateAvailabilityResponse(success=True, availability=availability)


async def verify_medical_credentials(
    db: AsyncSession,
    caller: User,
    data: VerifyCredentialsRequest
) -> VerifyCredentialsResponse:
    """
    Queue a doctor's license for verification.

    The request is stored as pending and the license id is copied onto the
    provider profile. Review itself happens out of band.
    """
    logger.info("Credential submission from %s", caller.id)
    if caller.role != UserRole.MEDICAL:
        raise PermissionDenied(GlobalMessages.CREDENTIALS_PERMISSION_DENIED)

    with internal_errors(GlobalMessages.CREDENTIALS_FAILED):
        provider = await _get_provider(db, caller)
        provider.license_id = data.license_id
        if data.specialization:
            provider.specialization = data.specialization

        db.add(CredentialVerification(
            user_id=caller.id,
            license_id=data.license_id,
            specialization=data.specialization,
            status=VerificationStatus.PENDING,
        ))
        record_audit(db, "credentials_submitted", caller.id, {
            "license_id": data.license_id,
            "specialization": data.specialization,
        })
        await db.commit()

    logger.info("Credential verification queued for %s", caller.id)
    return VerifyCredentialsResponse(
        success=True,
        status=VerificationStatus.PENDING,
        message=GlobalMessages.CREDENTIALS_SUBMITTED,
    )
