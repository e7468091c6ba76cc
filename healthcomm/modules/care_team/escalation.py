# healthcomm/modules/care_team/escalation.py
"""
Escalation from caretaker-only care to doctor supervision.

Manual escalation is requested by someone on the patient's care team and
uses the fast scoring heuristic. Automatic escalation runs as part of alert
processing once a patient who opted in has accumulated enough high-severity
alerts inside the window, and takes the first available doctor.
"""

import enum
import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.common.errors import NoAvailableDoctor, internal_errors
from healthcomm.common.utils.global_functions import full_name, utcnow
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.common.utils.patient_access import load_patient, require_patient_access
from healthcomm.models.models import (
    Alert, AlertSeverity, CareTeamRole, NotificationType, Patient, User,
)
from healthcomm.modules.audit.audit_service import record_audit
from healthcomm.modules.notifications.notifications_service import create_notification
from .candidates import current_weights, load_candidates
from .scoring import Candidate, PatientProfile, ScoringMode, rank_candidates
from .schemas import EscalateRequest, EscalateResponse

logger = logging.getLogger(__name__)


class CareTier(str, enum.Enum):
    NONE = "none"
    CARETAKER_ONLY = "caretaker_only"
    DOCTOR_SUPERVISED = "doctor_supervised"


def care_tier(patient: Patient) -> CareTier:
    if patient.assigned_doctor_id:
        return CareTier.DOCTOR_SUPERVISED
    if patient.assigned_caretaker_id:
        return CareTier.CARETAKER_ONLY
    return CareTier.NONE


def should_auto_escalate(patient: Patient, severity: AlertSeverity) -> bool:
    """Only a high alert for an opted-in, caretaker-only patient can trigger automatic escalation."""
    return (
        severity == AlertSeverity.HIGH
        and bool(patient.auto_escalate_to_doctor)
        and care_tier(patient) == CareTier.CARETAKER_ONLY
    )


async def count_recent_high_alerts(
    db: AsyncSession,
    patient_id: UUID,
    since: datetime,
    include_alert_id: Optional[UUID] = None
) -> int:
    """High alerts at or after ``since``. ``include_alert_id`` is counted whatever its timestamp."""
    in_window = Alert.timestamp >= since
    if include_alert_id is not None:
        in_window = or_(in_window, Alert.id == include_alert_id)
    result = await db.execute(
        select(func.count(Alert.id)).where(
            Alert.patient_id == patient_id,
            Alert.severity == AlertSeverity.HIGH,
            in_window,
        )
    )
    return result.scalar() or 0


def _apply_escalation(patient: Patient, doctor: Candidate, reason: str, now: datetime) -> Optional[UUID]:
    """Point the patient at the doctor and stamp the escalation. Returns the previous caretaker."""
    previous_caretaker = patient.assigned_caretaker_id
    patient.assigned_doctor_id = doctor.provider_id
    patient.escalated_at = now
    patient.escalated_from = previous_caretaker
    patient.escalation_reason = reason
    return previous_caretaker


# =============================================================================
# AUTOMATIC ESCALATION
# =============================================================================

async def check_auto_escalation(
    db: AsyncSession,
    patient_user: User,
    patient: Patient,
    alert: Alert,
    now: Optional[datetime] = None
) -> Optional[UUID]:
    """
    Escalate the patient if ``alert`` pushes them over the high-alert threshold.

    Runs inside the alert's transaction and does not commit. The triggering
    alert must already be in the session; it is counted even when its
    timestamp is older than the window. Returns the doctor
    the patient was escalated to, or None.
    """
    if not should_auto_escalate(patient, alert.severity):
        return None

    now = now or utcnow()
    since = now - timedelta(hours=settings.ESCALATION_WINDOW_HOURS)
    high_count = await count_recent_high_alerts(db, patient.user_id, since, include_alert_id=alert.id)
    if high_count < settings.ESCALATION_HIGH_ALERT_COUNT:
        return None

    candidates = await load_candidates(db, CareTeamRole.DOCTOR)
    ranked = rank_candidates(CareTeamRole.DOCTOR, candidates, PatientProfile(), ScoringMode.FIRST_AVAILABLE, current_weights())
    if not ranked:
        logger.warning(
            "Patient %s qualifies for automatic escalation (%d high alerts) but no doctor is available",
            patient.user_id, high_count,
        )
        return None

    doctor = ranked[0].candidate
    reason = f"Multiple high-severity alerts ({high_count} in {settings.ESCALATION_WINDOW_HOURS} hours)"
    previous_caretaker = _apply_escalation(patient, doctor, reason, now)

    patient_name = full_name(patient_user.first_name, patient_user.last_name)
    create_notification(
        db,
        user_id=doctor.provider_id,
        title="URGENT: Patient Auto-Escalated",
        message=f"{patient_name} has been automatically escalated to your care. {reason}.",
        notification_type=NotificationType.ALERT,
        severity=AlertSeverity.HIGH,
        patient_id=patient.user_id,
        patient_name=patient_name,
        reference_id=alert.id,
    )
    if previous_caretaker:
        create_notification(
            db,
            user_id=previous_caretaker,
            title="Patient Escalated to Doctor",
            message=f"{patient_name} was automatically escalated to Dr. {doctor.last_name} after repeated high-severity alerts.",
            notification_type=NotificationType.SYSTEM,
            severity=AlertSeverity.LOW,
            patient_id=patient.user_id,
            patient_name=patient_name,
        )
    create_notification(
        db,
        user_id=patient.user_id,
        title="Doctor Assigned",
        message=f"Dr. {doctor.name} is now supervising your care.",
        notification_type=NotificationType.SYSTEM,
        severity=AlertSeverity.LOW,
    )

    record_audit(db, "patient_auto_escalated", None, {
        "patient_id": patient.user_id,
        "doctor_id": doctor.provider_id,
        "previous_caretaker_id": previous_caretaker,
        "high_alert_count": high_count,
        "reason": reason,
    })

    logger.info("Patient %s auto-escalated to doctor %s", patient.user_id, doctor.provider_id)
    return doctor.provider_id


# =============================================================================
# MANUAL ESCALATION
# =============================================================================

async def escalate_to_doctor(db: AsyncSession, caller: User, data: EscalateRequest) -> EscalateResponse:
    """
    Escalate a patient to a doctor on request.

    A patient who already has a doctor is left untouched and the response
    says so. Offline doctors are never chosen.
    """
    logger.info("Manual escalation for patient %s requested by %s", data.patient_id, caller.id)

    with internal_errors(GlobalMessages.ESCALATION_FAILED):
        patient_user, patient = await load_patient(db, data.patient_id, for_update=True)
        require_patient_access(patient, caller, GlobalMessages.ESCALATE_PERMISSION_DENIED)

        if patient.assigned_doctor_id:
            doctor_user = await db.get(User, patient.assigned_doctor_id)
            return EscalateResponse(
                success=True,
                already_escalated=True,
                doctor_id=str(patient.assigned_doctor_id),
                doctor_name=full_name(doctor_user.first_name, doctor_user.last_name) if doctor_user else None,
                message=GlobalMessages.ALREADY_HAS_DOCTOR,
            )

        candidates = await load_candidates(db, CareTeamRole.DOCTOR)
        profile = PatientProfile(chronic_conditions=tuple(patient.chronic_conditions or ()))
        ranked = rank_candidates(CareTeamRole.DOCTOR, candidates, profile, ScoringMode.FAST, current_weights())
        if not ranked:
            raise NoAvailableDoctor(GlobalMessages.NO_DOCTOR_FOR_ESCALATION)

        doctor = ranked[0].candidate
        reason = data.reason or "Manual escalation requested"
        now = utcnow()
        previous_caretaker = _apply_escalation(patient, doctor, reason, now)

        patient_name = full_name(patient_user.first_name, patient_user.last_name)
        create_notification(
            db,
            user_id=doctor.provider_id,
            title="Patient Escalated to You",
            message=f"{patient_name} has been escalated to your care. Reason: {reason}",
            notification_type=NotificationType.ALERT,
            severity=AlertSeverity.MEDIUM,
            patient_id=patient.user_id,
            patient_name=patient_name,
        )
        if previous_caretaker:
            create_notification(
                db,
                user_id=previous_caretaker,
                title="Patient Escalated",
                message=f"{patient_name} has been escalated to Dr. {doctor.last_name}.",
                notification_type=NotificationType.SYSTEM,
                severity=AlertSeverity.MEDIUM,
                patient_id=patient.user_id,
                patient_name=patient_name,
            )
        create_notification(
            db,
            user_id=patient.user_id,
            title="Doctor Assigned",
            message=f"Dr. {doctor.name} has been assigned to supervise your care.",
            notification_type=NotificationType.SYSTEM,
            severity=AlertSeverity.LOW,
        )

        record_audit(db, "patient_escalated", caller.id, {
            "patient_id": patient.user_id,
            "doctor_id": doctor.provider_id,
            "previous_caretaker_id": previous_caretaker,
            "reason": reason,
            "score": ranked[0].score,
        })

        await db.commit()

    logger.info("Patient %s escalated to doctor %s", patient.user_id, doctor.provider_id)

    return EscalateResponse(
        success=True,
        doctor_id=str(doctor.provider_id),
        doctor_name=doctor.name,
        message=f"Successfully escalated to Dr. {doctor.name}.",
    )
