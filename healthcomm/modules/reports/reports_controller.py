# healthcomm/modules/reports/reports_controller.py

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import reports_service as service
from .schemas import DailyReportsListResponse


router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/{patient_id}", response_model=DailyReportsListResponse)
async def get_daily_reports(
    patient_id: UUID,
    limit: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """Daily summaries for a patient, most recent day first."""
    reports = await service.get_patient_reports(db, current_user, patient_id, limit)
    return DailyReportsListResponse(reports=reports)
