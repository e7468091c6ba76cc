# healthcomm/modules/profile/profile_service.py
"""
Self-service profiles. A user's role decides which record backs the profile:
patients get a Patient row, doctors and caretakers a CareProvider row. The
first write creates it, later writes update it in place.
"""

import logging
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.errors import InvalidArgument, internal_errors
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.models.models import (
    Availability, CareProvider, CareTeamRole, Patient, PatientStatus, User, UserRole,
)
from healthcomm.modules.audit.audit_service import record_audit
from .schemas import ProfileResponse, UpdateProfileRequest, UpdateProfileResponse

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name")

ROLE_FIELDS = {
    UserRole.PATIENT: ("chronic_conditions", "auto_escalate_to_doctor"),
    UserRole.MEDICAL: ("specialization", "years_in_practice", "max_patients"),
    UserRole.CARETAKER: ("certified", "experience_years", "max_patients"),
}

# Fields that may be cleared by sending null
NULLABLE_FIELDS = {"specialization", "max_patients"}

PROVIDER_TYPES = {
    UserRole.MEDICAL: CareTeamRole.DOCTOR,
    UserRole.CARETAKER: CareTeamRole.CARETAKER,
}


async def _load(db: AsyncSession, user_id) -> Tuple[User, Optional[Patient], Optional[CareProvider]]:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()

    patient = provider = None
    if user.role == UserRole.PATIENT:
        result = await db.execute(select(Patient).where(Patient.user_id == user.id))
        patient = result.scalar_one_or_none()
    else:
        result = await db.execute(select(CareProvider).where(CareProvider.user_id == user.id))
        provider = result.scalar_one_or_none()
    return user, patient, provider


def profile_to_response(
    user: User,
    patient: Optional[Patient],
    provider: Optional[CareProvider]
) -> ProfileResponse:
    response = ProfileResponse(
        user_id=str(user.id),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        has_profile=patient is not None or provider is not None,
    )
    if patient is not None:
        response.status = patient.status.value
        response.chronic_conditions = list(patient.chronic_conditions or [])
        response.auto_escalate_to_doctor = bool(patient.auto_escalate_to_doctor)
        response.vitals_count = patient.vitals_count
        response.alerts_count = patient.alerts_count
    if provider is not None:
        response.availability = provider.availability
        response.max_patients = provider.max_patients
        if provider.provider_type == CareTeamRole.DOCTOR:
            response.specialization = provider.specialization
            response.years_in_practice = provider.years_in_practice
        else:
            response.certified = provider.certified
            response.experience_years = provider.experience_years
    return response


def validate_changes(role: UserRole, changes: Dict[str, Any]) -> None:
    """Reject fields that belong to another role, and nulls for required columns."""
    rejected = sorted(set(changes) - set(USER_FIELDS) - set(ROLE_FIELDS[role]))
    if rejected:
        raise InvalidArgument(GlobalMessages.PROFILE_FIELDS_NOT_APPLICABLE.format(
            role=role.value, fields=", ".join(rejected),
        ))
    for field, value in changes.items():
        if value is None and field not in NULLABLE_FIELDS:
            raise InvalidArgument(GlobalMessages.PROFILE_FIELD_REQUIRED.format(field=field))


def _new_profile(user: User) -> Union[Patient, CareProvider]:
    if user.role == UserRole.PATIENT:
        return Patient(
            user_id=user.id,
            status=PatientStatus.STABLE,
            chronic_conditions=[],
            auto_escalate_to_doctor=False,
            vitals_count=0,
            alerts_count=0,
        )
    return CareProvider(
        user_id=user.id,
        provider_type=PROVIDER_TYPES[user.role],
        availability=Availability.AVAILABLE,
        years_in_practice=0,
        certified=False,
        experience_years=0,
    )


async def get_profile(db: AsyncSession, caller: User) -> ProfileResponse:
    user, patient, provider = await _load(db, caller.id)
    return profile_to_response(user, patient, provider)


async def upsert_profile(db: AsyncSession, caller: User, data: UpdateProfileRequest) -> UpdateProfileResponse:
    """
    Create or update the caller's profile.

    Only the fields present in the request are written. The first write for a
    user creates the role record with zeroed counters and is audited as
    ``user_created``; later writes are audited as ``user_updated`` with the
    before and after values of each changed field.
    """
    changes = data.model_dump(exclude_unset=True)
    logger.info("Profile update from %s (%s): %s", caller.id, caller.role.value, sorted(changes))
    validate_changes(caller.role, changes)

    with internal_errors(GlobalMessages.PROFILE_FAILED):
        user, patient, provider = await _load(db, caller.id)
        profile = patient if user.role == UserRole.PATIENT else provider
        created = profile is None
        if created:
            profile = _new_profile(user)
            db.add(profile)

        before: Dict[str, Any] = {}
        after: Dict[str, Any] = {}
        for field, value in changes.items():
            target = user if field in USER_FIELDS else profile
            previous = getattr(target, field)
            if previous == value and not created:
                continue
            before[field] = previous
            after[field] = value
            setattr(target, field, value)

        if created:
            record_audit(db, "user_created", user.id, {
                "role": user.role,
                "email": user.email,
                "fields": after,
            })
        elif after:
            record_audit(db, "user_updated", user.id, {"before": before, "after": after})

        await db.commit()

    if user.role == UserRole.PATIENT:
        patient = profile
    else:
        provider = profile

    logger.info("Profile %s for %s", "created" if created else "updated", user.id)
    return UpdateProfileResponse(
        success=True,
        created=created,
        message=GlobalMessages.PROFILE_CREATED if created else GlobalMessages.PROFILE_UPDATED,
        profile=profile_to_response(user, patient, provider),
    )
