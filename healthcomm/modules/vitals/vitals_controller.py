# healthcomm/modules/vitals/vitals_controller.py

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import vitals_service as service
from .schemas import ExportVitalsRequest, ExportVitalsResponse, VitalsIngestResponse, VitalsReadingCreate


router = APIRouter(prefix="/patients/{patient_id}/vitals", tags=["Vitals"])


@router.post("", response_model=VitalsIngestResponse)
async def create_vitals_reading(
    patient_id: UUID,
    data: VitalsReadingCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """
    Record a vitals reading.

    The reading is classified immediately; any alerts, status change and
    automatic escalation are returned with it.
    """
    return await service.record_vitals(db, current_user, patient_id, data)


@router.post("/export", response_model=ExportVitalsResponse)
async def export_vitals(
    patient_id: UUID,
    data: ExportVitalsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    return await service.export_vitals_data(db, current_user, patient_id, data)
