"""Tests for the care-team assignment engine against a real session."""

import uuid

import pytest
from sqlalchemy import select

from healthcomm.common.errors import NoSuitableCandidate, NotFound, PermissionDenied
from healthcomm.models.models import (
    AlertSeverity, AuditLog, Availability, CareTeamRole, Notification, NotificationType, Patient,
)
from healthcomm.modules.care_team.candidates import load_candidates
from healthcomm.modules.care_team.care_team_service import assign_care_team_member
from healthcomm.modules.care_team.schemas import AssignCareTeamRequest
from healthcomm.modules.care_team.scoring import Urgency


def request(patient_user, role=CareTeamRole.DOCTOR, **kwargs) -> AssignCareTeamRequest:
    return AssignCareTeamRequest(patient_id=patient_user.id, care_team_role=role, **kwargs)


async def fresh_patient(session_factory, patient_id):
    async with session_factory() as s:
        return (await s.execute(select(Patient).where(Patient.id == patient_id))).scalar_one()


async def test_assigns_best_matching_doctor(db, make, session_factory):
    patient_user, patient = await make.patient(conditions=["Hypertension"])
    cardiologist = await make.doctor("Ada", "Heart", specialization="Cardiology", years_in_practice=8)
    await make.doctor("Ned", "Brain", specialization="Neurology", years_in_practice=20)

    response = await assign_care_team_member(db, patient_user, request(patient_user))

    assert response.assigned_id == str(cardiologist.id)
    assert response.assigned_name == "Ada Heart"
    assert response.role == CareTeamRole.DOCTOR
    assert response.reason.score == 210
    assert response.reason.factors["matched_conditions"] == ["Hypertension"]

    stored = await fresh_patient(session_factory, patient.id)
    assert stored.assigned_doctor_id == cardiologist.id
    assert stored.assigned_at is not None
    assert stored.assignment_reason["assigned_by"] == "system"
    assert stored.assignment_reason["role"] == "doctor"
    assert stored.assignment_reason["factors"]["specialization_match"] is True


async def test_assignment_notifies_and_audits(db, make):
    patient_user, _ = await make.patient("Rita", "Moss")
    caretaker = await make.caretaker("Cal", "Lee", certified=True)

    await assign_care_team_member(db, patient_user, request(patient_user, CareTeamRole.CARETAKER))

    notes = (await db.execute(select(Notification))).scalars().all()
    by_user = {n.user_id: n for n in notes}
    assert set(by_user) == {caretaker.id, patient_user.id}
    assert by_user[caretaker.id].title == "New Patient Assigned"
    assert by_user[caretaker.id].patient_name == "Rita Moss"
    assert by_user[caretaker.id].severity == AlertSeverity.LOW
    assert by_user[caretaker.id].type == NotificationType.SYSTEM
    assert by_user[patient_user.id].title == "Caretaker Assigned"

    [entry] = (await db.execute(select(AuditLog))).scalars().all()
    assert entry.action == "caretaker_assigned"
    assert entry.user_id == patient_user.id
    assert entry.details["assigned_id"] == str(caretaker.id)


async def test_caretaker_assignment_can_opt_into_auto_escalation(db, make, session_factory):
    patient_user, patient = await make.patient()
    await make.caretaker()

    await assign_care_team_member(db, patient_user, request(patient_user, CareTeamRole.CARETAKER, auto_escalate=True))

    stored = await fresh_patient(session_factory, patient.id)
    assert stored.auto_escalate_to_doctor is True
    assert stored.assigned_caretaker_id is not None


async def test_current_caretaker_may_assign_a_doctor(db, make):
    caretaker = await make.caretaker()
    patient_user, _ = await make.patient(assigned_caretaker_id=caretaker.id)
    doctor = await make.doctor()

    response = await assign_care_team_member(db, caretaker, request(patient_user))
    assert response.assigned_id == str(doctor.id)


async def test_unrelated_caller_is_denied(db, make, session_factory):
    patient_user, patient = await make.patient()
    other_user, _ = await make.patient("Other", "Person")
    stranger_doctor = await make.doctor()

    for caller in (other_user, stranger_doctor):
        with pytest.raises(PermissionDenied):
            await assign_care_team_member(db, caller, request(patient_user))

    stored = await fresh_patient(session_factory, patient.id)
    assert stored.assigned_doctor_id is None


async def test_unknown_patient(db, make):
    caller, _ = await make.patient()
    await make.doctor()
    with pytest.raises(NotFound):
        await assign_care_team_member(
            db, caller, AssignCareTeamRequest(patient_id=uuid.uuid4(), care_team_role=CareTeamRole.DOCTOR)
        )


async def test_empty_pool_fails_without_changes(db, make, session_factory):
    patient_user, patient = await make.patient()
    await make.caretaker()  # wrong role for a doctor request

    with pytest.raises(NoSuitableCandidate):
        await assign_care_team_member(db, patient_user, request(patient_user))

    stored = await fresh_patient(session_factory, patient.id)
    assert stored.assigned_doctor_id is None
    assert (await db.execute(select(AuditLog))).scalars().all() == []


async def test_inactive_providers_are_not_candidates(db, make):
    patient_user, _ = await make.patient(conditions=["Hypertension"])
    await make.doctor(specialization="Cardiology", is_active=False)
    active = await make.doctor(specialization="Dermatology")

    response = await assign_care_team_member(db, patient_user, request(patient_user))
    assert response.assigned_id == str(active.id)


async def test_workload_prefers_less_loaded_caretaker(db, make):
    loaded = await make.caretaker("Busy", "Bee", max_patients=2, user_id=uuid.UUID(int=1))
    free = await make.caretaker("Free", "Bird", max_patients=2, user_id=uuid.UUID(int=2))
    await make.patient("Existing", "One", assigned_caretaker_id=loaded.id)
    patient_user, _ = await make.patient()

    response = await assign_care_team_member(db, patient_user, request(patient_user, CareTeamRole.CARETAKER))
    assert response.assigned_id == str(free.id)


async def test_reassignment_is_stable(db, make):
    patient_user, _ = await make.patient(conditions=["Asthma"])
    await make.doctor(specialization="Pulmonology", max_patients=4)
    await make.doctor(specialization="Pulmonology", max_patients=4)

    first = await assign_care_team_member(db, patient_user, request(patient_user))
    second = await assign_care_team_member(db, patient_user, request(patient_user))

    assert first.assigned_id == second.assigned_id
    assert first.reason.score == second.reason.score


async def test_urgent_request_can_pick_busy_doctor(db, make):
    patient_user, _ = await make.patient(conditions=["Diabetes"])
    await make.doctor(specialization="Endocrinology", availability=Availability.BUSY, user_id=uuid.UUID(int=1))
    await make.doctor(specialization="Dermatology", user_id=uuid.UUID(int=2))

    urgent = await assign_care_team_member(db, patient_user, request(patient_user, urgency=Urgency.URGENT))
    assert urgent.assigned_id == str(uuid.UUID(int=1))
    assert urgent.reason.factors["availability_bonus"] == 25


async def test_load_candidates_counts_workload(db, make):
    doctor = await make.doctor()
    await make.patient("A", "One", assigned_doctor_id=doctor.id)
    _, excluded = await make.patient("B", "Two", assigned_doctor_id=doctor.id)

    [candidate] = await load_candidates(db, CareTeamRole.DOCTOR)
    assert candidate.current_patient_count == 2

    [candidate] = await load_candidates(db, CareTeamRole.DOCTOR, exclude_patient_id=excluded.user_id)
    assert candidate.current_patient_count == 1
