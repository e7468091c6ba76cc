# healthcomm/modules/alerts/alerts_service.py
"""
Alert fan-out.

Every new alert, whether classified from a vitals reading or pushed by a
device, goes through ``process_new_alert``: it notifies the patient and
their care team, bumps the alert counter, writes the audit entry, updates
the patient status and finally checks for automatic escalation. Nothing
here commits; the caller owns the transaction.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.errors import internal_errors
from healthcomm.common.utils.global_functions import as_utc, full_name, utcnow
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.common.utils.patient_access import load_patient, require_patient_access
from healthcomm.models.models import (
    Alert, AlertSeverity, AlertSource, NotificationType, Patient, User,
)
from healthcomm.modules.audit.audit_service import record_audit
from healthcomm.modules.care_team.escalation import check_auto_escalation
from healthcomm.modules.notifications.notifications_service import create_notification
from .status_resolver import resolve_status
from .schemas import AlertCreate, AlertIngestResponse, AlertResponse

logger = logging.getLogger(__name__)


def alert_recipients(patient: Patient) -> List[UUID]:
    """The patient, then caretaker, then doctor. Duplicates dropped."""
    recipients = []
    for user_id in (patient.user_id, patient.assigned_caretaker_id, patient.assigned_doctor_id):
        if user_id and user_id not in recipients:
            recipients.append(user_id)
    return recipients


async def process_new_alert(
    db: AsyncSession,
    patient_user: User,
    patient: Patient,
    alert: Alert
) -> Optional[UUID]:
    """
    Run the new-alert side effects for one alert already added to the session.

    Returns the doctor id if the alert caused an automatic escalation.
    """
    patient_name = full_name(patient_user.first_name, patient_user.last_name)

    # Recipients are fixed before escalation; a newly escalated doctor gets the escalation notice instead.
    for user_id in alert_recipients(patient):
        create_notification(
            db,
            user_id=user_id,
            title=alert.title,
            message=alert.message,
            notification_type=NotificationType.ALERT,
            severity=alert.severity,
            patient_id=patient.user_id,
            patient_name=patient_name,
            reference_id=alert.id,
        )

    patient.alerts_count = (patient.alerts_count or 0) + 1
    record_audit(db, "alert_created", patient.user_id, {
        "alert_id": alert.id,
        "severity": alert.severity,
        "source": alert.source,
        "title": alert.title,
    })

    previous_status = patient.status
    patient.status = resolve_status(previous_status, [alert.severity])
    if patient.status != previous_status:
        logger.info("Patient %s status %s -> %s", patient.user_id, previous_status.value, patient.status.value)

    return await check_auto_escalation(db, patient_user, patient, alert)


def alert_to_response(alert: Alert) -> AlertResponse:
    return AlertResponse(
        id=str(alert.id),
        patient_id=str(alert.patient_id),
        vitals_reading_id=str(alert.vitals_reading_id) if alert.vitals_reading_id else None,
        title=alert.title,
        message=alert.message,
        severity=alert.severity,
        source=alert.source,
        timestamp=as_utc(alert.timestamp),
    )


async def record_device_alert(
    db: AsyncSession,
    caller: User,
    patient_id: UUID,
    data: AlertCreate
) -> AlertIngestResponse:
    """Store a device-raised alert and run the alert pipeline on it."""
    logger.info("Device alert (%s) for patient %s submitted by %s", data.severity.value, patient_id, caller.id)

    with internal_errors(GlobalMessages.ALERT_FAILED):
        patient_user, patient = await load_patient(db, patient_id, for_update=True)
        require_patient_access(patient, caller)

        alert = Alert(
            id=uuid.uuid4(),
            patient_id=patient.user_id,
            title=data.title,
            message=data.message,
            severity=data.severity,
            source=AlertSource.DEVICE,
            timestamp=as_utc(data.timestamp) or utcnow(),
        )
        db.add(alert)
        await db.flush()

        escalated_to = await process_new_alert(db, patient_user, patient, alert)
        response = AlertIngestResponse(
            success=True,
            alert=alert_to_response(alert),
            patient_status=patient.status.value,
            escalated_to=str(escalated_to) if escalated_to else None,
        )
        await db.commit()

    logger.info("Device alert %s (%s) recorded for patient %s", alert.id, alert.severity.value, patient.user_id)
    return response


async def get_patient_alerts(
    db: AsyncSession,
    caller: User,
    patient_id: UUID,
    limit: int = 50,
    severity: Optional[AlertSeverity] = None
) -> List[AlertResponse]:
    """Newest first."""
    _, patient = await load_patient(db, patient_id)
    require_patient_access(patient, caller)

    query = select(Alert).where(Alert.patient_id == patient.user_id)
    if severity:
        query = query.where(Alert.severity == severity)
    query = query.order_by(desc(Alert.timestamp)).limit(limit)

    result = await db.execute(query)
    return [alert_to_response(a) for a in result.scalars().all()]
