# healthcomm/modules/care_team/candidates.py
"""Loads the scorer's view of the provider pool."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.models.models import CareProvider, CareTeamRole, Patient, User, UserRole
from .scoring import Candidate, ScoringWeights

# The user role a provider account must hold to be considered for a care-team role.
PROVIDER_USER_ROLES = {
    CareTeamRole.DOCTOR: UserRole.MEDICAL,
    CareTeamRole.CARETAKER: UserRole.CARETAKER,
}


def current_weights() -> ScoringWeights:
    """Scoring weights with the deployment's default capacity."""
    return ScoringWeights(default_max_patients=settings.DEFAULT_MAX_PATIENTS)


def _assigned_column(role: CareTeamRole):
    return Patient.assigned_doctor_id if role == CareTeamRole.DOCTOR else Patient.assigned_caretaker_id


async def load_candidates(
    db: AsyncSession,
    role: CareTeamRole,
    exclude_patient_id: Optional[UUID] = None
) -> List[Candidate]:
    """
    Load every active provider of ``role`` with their current workload.

    Workload is the number of patients currently pointing at the provider,
    counted in one grouped query. ``exclude_patient_id`` leaves the patient
    being (re)assigned out of the count so rescoring them is stable.
    """
    assigned = _assigned_column(role)
    workload_query = (
        select(assigned.label("provider_id"), func.count(Patient.id).label("patient_count"))
        .where(assigned.is_not(None))
        .group_by(assigned)
    )
    if exclude_patient_id is not None:
        workload_query = workload_query.where(Patient.user_id != exclude_patient_id)
    workload = workload_query.subquery()

    result = await db.execute(
        select(CareProvider, User, func.coalesce(workload.c.patient_count, 0))
        .join(User, CareProvider.user_id == User.id)
        .outerjoin(workload, workload.c.provider_id == CareProvider.user_id)
        .where(
            CareProvider.provider_type == role,
            User.role == PROVIDER_USER_ROLES[role],
            User.is_active.is_(True),
        )
    )

    return [
        Candidate(
            provider_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            availability=provider.availability,
            specialization=provider.specialization,
            years_in_practice=provider.years_in_practice or 0,
            certified=bool(provider.certified),
            experience_years=provider.experience_years or 0,
            max_patients=provider.max_patients,
            current_patient_count=int(count or 0),
        )
        for provider, user, count in result.all()
    ]
