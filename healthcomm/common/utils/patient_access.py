# common/utils/patient_access.py
"""Loading a patient by user id and checking the caller's relationship to them."""

from typing import Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.errors import NotFound, PermissionDenied
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.models.models import Patient, User


async def load_patient(db: AsyncSession, patient_id: UUID, for_update: bool = False) -> Tuple[User, Patient]:
    """
    Return the patient's user row and profile.

    With ``for_update`` the profile row is locked until the transaction ends,
    which serialises concurrent assignment and escalation on PostgreSQL.
    """
    query = (
        select(Patient, User)
        .join(User, Patient.user_id == User.id)
        .where(Patient.user_id == patient_id)
    )
    if for_update:
        query = query.with_for_update(of=Patient)

    result = await db.execute(query)
    row = result.first()
    if row is None:
        raise NotFound(GlobalMessages.PATIENT_NOT_FOUND)
    patient, user = row
    return user, patient


def is_patient_or_caretaker(patient: Patient, user_id: UUID) -> bool:
    return user_id == patient.user_id or user_id == patient.assigned_caretaker_id


def is_care_team_member(patient: Patient, user_id: UUID) -> bool:
    """The patient themself, their caretaker or their doctor."""
    return is_patient_or_caretaker(patient, user_id) or user_id == patient.assigned_doctor_id


def require_patient_access(patient: Patient, caller: User, message: str = GlobalMessages.PATIENT_ACCESS_DENIED) -> None:
    if not is_care_team_member(patient, caller.id):
        raise PermissionDenied(message)
