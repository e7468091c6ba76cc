# healthcomm/modules/vitals/vitals_service.py
"""Vitals ingestion, the new-reading pipeline and data export."""

import csv
import io
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.common.errors import internal_errors
from healthcomm.common.utils.global_functions import as_utc, full_name, utcnow
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.common.utils.patient_access import load_patient, require_patient_access
from healthcomm.models.models import Alert, AlertSource, Patient, PatientStatus, User, VitalsReading
from healthcomm.modules.alerts.alerts_service import alert_to_response, process_new_alert
from healthcomm.modules.audit.audit_service import record_audit
from .anomaly import DEFAULT_THRESHOLDS, VitalThresholds, classify_reading
from .schemas import (
    ExportFormat, ExportVitalsRequest, ExportVitalsResponse,
    VitalsIngestResponse, VitalsReadingCreate, VitalsReadingResponse,
)

logger = logging.getLogger(__name__)

VITAL_FIELDS = (
    "heart_rate",
    "blood_pressure_systolic",
    "blood_pressure_diastolic",
    "oxygen_level",
    "temperature",
    "glucose",
    "respiration",
)

EXPORT_COLUMNS = ("timestamp", "device_id") + VITAL_FIELDS


@dataclass
class ReadingOutcome:
    alerts: List[Alert] = field(default_factory=list)
    status: PatientStatus = PatientStatus.STABLE
    escalated_to: Optional[UUID] = None


async def process_new_vitals(
    db: AsyncSession,
    patient_user: User,
    patient: Patient,
    reading: VitalsReading,
    thresholds: VitalThresholds = DEFAULT_THRESHOLDS
) -> ReadingOutcome:
    """
    New-reading side effects: counters, audit, classification and alerts.

    All alerts of the reading are flushed before any of them is processed,
    so the escalation window sees the whole batch. Does not commit.
    """
    patient.vitals_count = (patient.vitals_count or 0) + 1
    patient.last_vitals_at = reading.timestamp
    record_audit(db, "vitals_created", patient.user_id, {
        "reading_id": reading.id,
        "device_id": reading.device_id,
        "vitals": [name for name in VITAL_FIELDS if getattr(reading, name) is not None],
    })

    now = utcnow()
    alerts = [
        Alert(
            id=uuid.uuid4(),
            patient_id=patient.user_id,
            vitals_reading_id=reading.id,
            title=candidate.title,
            message=candidate.message,
            severity=candidate.severity,
            source=AlertSource.ANOMALY,
            timestamp=now,
        )
        for candidate in classify_reading(reading, thresholds)
    ]
    db.add_all(alerts)
    await db.flush()

    outcome = ReadingOutcome(alerts=alerts)
    for alert in alerts:
        escalated_to = await process_new_alert(db, patient_user, patient, alert)
        outcome.escalated_to = outcome.escalated_to or escalated_to
    outcome.status = patient.status

    if alerts:
        logger.info(
            "Reading %s for patient %s raised %d alert(s); status %s",
            reading.id, patient.user_id, len(alerts), patient.status.value,
        )
    return outcome


def _reading_response(reading: VitalsReading) -> VitalsReadingResponse:
    return VitalsReadingResponse(
        id=str(reading.id),
        patient_id=str(reading.patient_id),
        device_id=reading.device_id,
        timestamp=as_utc(reading.timestamp),
        **{name: getattr(reading, name) for name in VITAL_FIELDS},
    )


async def record_vitals(
    db: AsyncSession,
    caller: User,
    patient_id: UUID,
    data: VitalsReadingCreate
) -> VitalsIngestResponse:
    """Store a reading for the patient and run the new-reading pipeline in the same transaction."""
    logger.info("Vitals reading from device %s for patient %s (submitted by %s)", data.device_id, patient_id, caller.id)

    with internal_errors(GlobalMessages.VITALS_FAILED):
        patient_user, patient = await load_patient(db, patient_id, for_update=True)
        require_patient_access(patient, caller)

        reading = VitalsReading(
            id=uuid.uuid4(),
            patient_id=patient.user_id,
            device_id=data.device_id,
            timestamp=as_utc(data.timestamp) or utcnow(),
            **{name: getattr(data, name) for name in VITAL_FIELDS},
        )
        db.add(reading)

        outcome = await process_new_vitals(db, patient_user, patient, reading)
        response = VitalsIngestResponse(
            success=True,
            reading=_reading_response(reading),
            alerts=[alert_to_response(a) for a in outcome.alerts],
            patient_status=outcome.status.value,
            escalated_to=str(outcome.escalated_to) if outcome.escalated_to else None,
        )
        await db.commit()

    logger.info("Reading %s stored for patient %s; status %s", reading.id, patient.user_id, outcome.status.value)
    return response


# =============================================================================
# EXPORT
# =============================================================================

def _export_row(reading: VitalsReading) -> dict:
    row = {"timestamp": as_utc(reading.timestamp).isoformat(), "device_id": reading.device_id}
    row.update({name: getattr(reading, name) for name in VITAL_FIELDS})
    return row


def _to_csv(rows: List[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return buffer.getvalue()


async def export_vitals_data(
    db: AsyncSession,
    caller: User,
    patient_id: UUID,
    data: ExportVitalsRequest
) -> ExportVitalsResponse:
    """
    Export the patient's readings, newest first, as JSON rows or CSV text.

    Capped at ``EXPORT_MAX_RECORDS``. The export itself is audited.
    """
    logger.info("Vitals export (%s) for patient %s requested by %s", data.format.value, patient_id, caller.id)

    with internal_errors(GlobalMessages.EXPORT_FAILED):
        patient_user, patient = await load_patient(db, patient_id)
        require_patient_access(patient, caller)

        query = select(VitalsReading).where(VitalsReading.patient_id == patient.user_id)
        if data.start_date:
            query = query.where(VitalsReading.timestamp >= as_utc(data.start_date))
        if data.end_date:
            query = query.where(VitalsReading.timestamp <= as_utc(data.end_date))
        query = query.order_by(desc(VitalsReading.timestamp)).limit(settings.EXPORT_MAX_RECORDS)

        result = await db.execute(query)
        rows = [_export_row(r) for r in result.scalars().all()]

        record_audit(db, "data_exported", caller.id, {
            "patient_id": patient.user_id,
            "format": data.format,
            "record_count": len(rows),
            "start_date": data.start_date.isoformat() if data.start_date else None,
            "end_date": data.end_date.isoformat() if data.end_date else None,
        })
        await db.commit()

    logger.info("Exported %d readings for patient %s as %s", len(rows), patient.user_id, data.format.value)

    return ExportVitalsResponse(
        success=True,
        format=data.format,
        count=len(rows),
        patient_name=full_name(patient_user.first_name, patient_user.last_name),
        data=_to_csv(rows) if data.format == ExportFormat.CSV else rows,
    )
