# healthcomm/modules/reports/reports_service.py
"""Per-patient daily summaries of the previous local day."""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import select, func, case, desc
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.common.utils.global_functions import as_utc, full_name, utcnow
from healthcomm.common.utils.patient_access import load_patient, require_patient_access
from healthcomm.models.models import (
    Alert, AlertSeverity, DailyReport, Patient, User, VitalsReading,
)
from .schemas import DailyReportResponse

logger = logging.getLogger(__name__)


def previous_day_window(now: datetime, tz_name: str) -> Tuple[date, datetime, datetime]:
    """
    The calendar day before ``now`` in ``tz_name``, as (date, start_utc, end_utc).

    Bounds are computed from local midnights so days that cross a DST change
    are 23 or 25 hours long.
    """
    tz = ZoneInfo(tz_name)
    today = as_utc(now).astimezone(tz).date()
    day = today - timedelta(days=1)
    start = datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)
    end = datetime.combine(today, time.min, tzinfo=tz).astimezone(timezone.utc)
    return day, start, end


async def generate_daily_reports(
    db: AsyncSession,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None
) -> int:
    """
    Write one report per patient covering the previous local day. Returns the number written.

    Patients that already have a report for that day are skipped, so a rerun
    after a crash or a manual trigger writes only the missing ones.
    """
    report_date, start, end = previous_day_window(now or utcnow(), tz_name or settings.SCHEDULER_TIMEZONE)

    existing = await db.execute(
        select(DailyReport.patient_id).where(DailyReport.report_date == report_date)
    )
    already_reported = set(existing.scalars().all())

    vitals_rows = await db.execute(
        select(VitalsReading.patient_id, func.count(VitalsReading.id))
        .where(VitalsReading.timestamp >= start, VitalsReading.timestamp < end)
        .group_by(VitalsReading.patient_id)
    )
    vitals_counts = {patient_id: count for patient_id, count in vitals_rows.all()}

    alert_rows = await db.execute(
        select(
            Alert.patient_id,
            func.count(Alert.id),
            func.sum(case((Alert.severity == AlertSeverity.HIGH, 1), else_=0)),
        )
        .where(Alert.timestamp >= start, Alert.timestamp < end)
        .group_by(Alert.patient_id)
    )
    alert_counts = {patient_id: (int(total), int(high or 0)) for patient_id, total, high in alert_rows.all()}

    patients = await db.execute(
        select(Patient, User).join(User, Patient.user_id == User.id)
    )

    written = 0
    for patient, user in patients.all():
        if patient.user_id in already_reported:
            continue
        alerts_total, high_total = alert_counts.get(patient.user_id, (0, 0))
        db.add(DailyReport(
            patient_id=patient.user_id,
            patient_name=full_name(user.first_name, user.last_name),
            report_date=report_date,
            vitals_count=vitals_counts.get(patient.user_id, 0),
            alerts_count=alerts_total,
            high_severity_alerts=high_total,
            status=patient.status,
        ))
        written += 1

    await db.commit()
    logger.info("Generated %d daily reports for %s", written, report_date.isoformat())
    return written


async def get_patient_reports(
    db: AsyncSession,
    caller: User,
    patient_id: UUID,
    limit: int = 30
) -> List[DailyReportResponse]:
    _, patient = await load_patient(db, patient_id)
    require_patient_access(patient, caller)

    result = await db.execute(
        select(DailyReport)
        .where(DailyReport.patient_id == patient.user_id)
        .order_by(desc(DailyReport.report_date))
        .limit(limit)
    )
    return [
        DailyReportResponse(
            id=str(r.id),
            patient_id=str(r.patient_id),
            patient_name=r.patient_name or "",
            report_date=r.report_date,
            vitals_count=r.vitals_count,
            alerts_count=r.alerts_count,
            high_severity_alerts=r.high_severity_alerts,
            status=r.status.value,
            created_at=as_utc(r.created_at),
        )
        for r in result.scalars().all()
    ]
