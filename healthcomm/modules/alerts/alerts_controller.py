# healthcomm/modules/alerts/alerts_controller.py

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import AlertSeverity, User

from . import alerts_service as service
from .schemas import AlertCreate, AlertIngestResponse, AlertsListResponse


router = APIRouter(prefix="/patients/{patient_id}/alerts", tags=["Alerts"])


@router.post("", response_model=AlertIngestResponse)
async def create_alert(
    patient_id: UUID,
    data: AlertCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """Ingest a device-raised alert. Notifies the care team and may trigger automatic escalation."""
    return await service.record_device_alert(db, current_user, patient_id, data)


@router.get("", response_model=AlertsListResponse)
async def get_alerts(
    patient_id: UUID,
    limit: int = Query(50, ge=1, le=500),
    severity: Optional[AlertSeverity] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    alerts = await service.get_patient_alerts(db, current_user, patient_id, limit, severity)
    return AlertsListResponse(alerts=alerts, total=len(alerts))
