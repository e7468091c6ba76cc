# healthcomm/modules/care_team/care_team_controller.py
"""Care team controller: assignment, escalation and provider self-service."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import care_team_service as service
from . import escalation
from .schemas import (
    AssignCareTeamRequest, AssignCareTeamResponse,
    EscalateRequest, EscalateResponse,
    CareTeamResponse,
    UpdateAvailabilityRequest, UpdateAvailabilityResponse,
    VerifyCredentialsRequest, VerifyCredentialsResponse,
)


router = APIRouter(prefix="/care-team", tags=["Care Team"])


@router.post("/assign", response_model=AssignCareTeamResponse)
async def assign_care_team_member(
    data: AssignCareTeamRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """
    Assign the best-scoring doctor or caretaker to a patient.

    Callable by the patient or their current caretaker. The response carries
    the per-factor breakdown that was stored as the assignment reason.
    """
    return await service.assign_care_team_member(db, current_user, data)


@router.post("/escalate", response_model=EscalateResponse)
async def escalate_to_doctor(
    data: EscalateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """Escalate a patient from caretaker-only care to a doctor."""
    return await escalation.escalate_to_doctor(db, current_user, data)


@router.put("/availability", response_model=UpdateAvailabilityResponse)
async def update_availability(
    data: UpdateAvailabilityRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    return await service.update_availability(db, current_user, data.availability)


@router.post("/credentials", response_model=VerifyCredentialsResponse)
async def verify_medical_credentials(
    data: VerifyCredentialsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    """Submit a license for verification (doctors only)."""
    return await service.verify_medical_credentials(db, current_user, data)


@router.get("/{patient_id}", response_model=CareTeamResponse)
async def get_care_team(
    patient_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session)
):
    return await service.get_care_team(db, current_user, patient_id)
