"""HTTP contract tests: status codes, error codes and response shapes."""

import uuid

import pytest
from sqlalchemy import select

from healthcomm.models.models import Availability, CareProvider, Patient

pytestmark = pytest.mark.unit


async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "HealthComm API"


class TestAuthentication:
    async def test_missing_token(self, client, make):
        patient_user, _ = await make.patient()
        response = await client.get(f"/care-team/{patient_user.id}")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_garbage_token(self, client, make):
        patient_user, _ = await make.patient()
        response = await client.get(
            f"/care-team/{patient_user.id}", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    async def test_token_for_unknown_user(self, client, make, auth):
        patient_user, _ = await make.patient()
        ghost = type("Ghost", (), {"id": uuid.uuid4()})()
        response = await client.get(f"/care-team/{patient_user.id}", headers=auth(ghost))
        assert response.status_code == 401


class TestCareTeamEndpoints:
    async def test_assign_and_view(self, client, make, auth):
        patient_user, _ = await make.patient(conditions=["Asthma"])
        doctor = await make.doctor("Lung", "Expert", specialization="Pulmonology")

        response = await client.post(
            "/care-team/assign",
            json={"patient_id": str(patient_user.id), "care_team_role": "doctor"},
            headers=auth(patient_user),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["assigned_id"] == str(doctor.id)
        assert body["role"] == "doctor"
        assert body["reason"]["factors"]["matched_conditions"] == ["Asthma"]

        view = await client.get(f"/care-team/{patient_user.id}", headers=auth(patient_user))
        assert view.status_code == 200
        team = view.json()
        assert team["tier"] == "doctor_supervised"
        assert team["doctor"]["name"] == "Lung Expert"
        assert team["doctor"]["specialization"] == "Pulmonology"
        assert team["caretaker"] is None

    async def test_assign_errors_carry_codes(self, client, make, auth):
        patient_user, _ = await make.patient()
        stranger, _ = await make.patient("Other", "One")

        denied = await client.post(
            "/care-team/assign",
            json={"patient_id": str(patient_user.id), "care_team_role": "caretaker"},
            headers=auth(stranger),
        )
        assert denied.status_code == 403
        assert denied.json()["code"] == "permission-denied"

        empty = await client.post(
            "/care-team/assign",
            json={"patient_id": str(patient_user.id), "care_team_role": "caretaker"},
            headers=auth(patient_user),
        )
        assert empty.status_code == 503
        assert empty.json() == {"code": "unavailable", "detail": "No suitable caretakers available at this time."}

        missing = await client.post(
            "/care-team/assign",
            json={"patient_id": str(uuid.uuid4()), "care_team_role": "caretaker"},
            headers=auth(patient_user),
        )
        assert missing.status_code == 404
        assert missing.json()["code"] == "not-found"

    async def test_bad_payload_is_invalid_argument(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.post(
            "/care-team/assign",
            json={"patient_id": str(patient_user.id), "care_team_role": "surgeon"},
            headers=auth(patient_user),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "invalid-argument"
        assert body["errors"][0]["loc"][-1] == "care_team_role"

    async def test_escalate(self, client, make, auth):
        caretaker = await make.caretaker()
        patient_user, _ = await make.patient(assigned_caretaker_id=caretaker.id)
        doctor = await make.doctor()

        response = await client.post(
            "/care-team/escalate",
            json={"patient_id": str(patient_user.id), "reason": "Night-time breathing issues"},
            headers=auth(caretaker),
        )
        assert response.status_code == 200
        assert response.json()["doctor_id"] == str(doctor.id)

        again = await client.post(
            "/care-team/escalate", json={"patient_id": str(patient_user.id)}, headers=auth(caretaker),
        )
        assert again.json()["already_escalated"] is True

    async def test_update_availability(self, client, make, auth, session_factory):
        doctor = await make.doctor()
        response = await client.put(
            "/care-team/availability", json={"availability": "busy"}, headers=auth(doctor),
        )
        assert response.status_code == 200
        assert response.json()["availability"] == "busy"

        async with session_factory() as s:
            provider = (await s.execute(select(CareProvider).where(CareProvider.user_id == doctor.id))).scalar_one()
        assert provider.availability == Availability.BUSY
        assert provider.availability_updated_at is not None

    async def test_patients_have_no_availability(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.put(
            "/care-team/availability", json={"availability": "busy"}, headers=auth(patient_user),
        )
        assert response.status_code == 403

    async def test_credentials(self, client, make, auth):
        doctor = await make.doctor()
        caretaker = await make.caretaker()

        response = await client.post(
            "/care-team/credentials", json={"license_id": "MD-12345"}, headers=auth(doctor),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "pending"

        denied = await client.post(
            "/care-team/credentials", json={"license_id": "X"}, headers=auth(caretaker),
        )
        assert denied.status_code == 403


class TestVitalsEndpoints:
    async def test_post_vitals_returns_alerts(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.post(
            f"/patients/{patient_user.id}/vitals",
            json={"device_id": "cuff-7", "blood_pressure_systolic": 170, "blood_pressure_diastolic": 100},
            headers=auth(patient_user),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["patient_status"] == "critical"
        [alert] = body["alerts"]
        assert alert["title"] == "High Blood Pressure"
        assert alert["severity"] == "high"
        assert alert["source"] == "anomaly"

        alerts = await client.get(f"/patients/{patient_user.id}/alerts", headers=auth(patient_user))
        assert alerts.json()["total"] == 1

        notes = await client.get("/notifications", headers=auth(patient_user))
        assert notes.json()["unread_count"] == 1
        assert notes.json()["notifications"][0]["type"] == "alert"

    async def test_out_of_range_oxygen_is_rejected(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.post(
            f"/patients/{patient_user.id}/vitals",
            json={"device_id": "ring", "oxygen_level": 140},
            headers=auth(patient_user),
        )
        assert response.status_code == 400

    async def test_export_csv(self, client, make, auth):
        patient_user, _ = await make.patient()
        await client.post(
            f"/patients/{patient_user.id}/vitals",
            json={"device_id": "watch", "heart_rate": 70},
            headers=auth(patient_user),
        )
        response = await client.post(
            f"/patients/{patient_user.id}/vitals/export",
            json={"format": "csv"},
            headers=auth(patient_user),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"].startswith("timestamp,device_id,heart_rate")

        audit = await client.get("/audit-logs", headers=auth(patient_user))
        actions = [e["action"] for e in audit.json()["entries"]]
        assert "data_exported" in actions
        assert "vitals_created" in actions

    async def test_device_alert(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.post(
            f"/patients/{patient_user.id}/alerts",
            json={"title": "Irregular rhythm", "message": "Device detected AFib pattern", "severity": "medium"},
            headers=auth(patient_user),
        )
        assert response.status_code == 200
        assert response.json()["alert"]["source"] == "device"
        assert response.json()["patient_status"] == "warning"


class TestInvitationEndpoints:
    async def test_invite_and_accept(self, client, make, auth, session_factory):
        patient_user, patient = await make.patient()
        caretaker = await make.caretaker(email="nurse.kim@example.com")

        sent = await client.post(
            "/invitations",
            json={"recipient_email": "Nurse.Kim@example.com", "type": "caretaker"},
            headers=auth(patient_user),
        )
        assert sent.status_code == 200
        invitation_id = sent.json()["invitation_id"]

        listed = await client.get("/invitations", headers=auth(caretaker))
        assert [i["id"] for i in listed.json()["received"]] == [invitation_id]

        accepted = await client.post(
            f"/invitations/{invitation_id}/respond", json={"action": "accept"}, headers=auth(caretaker),
        )
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"

        again = await client.post(
            f"/invitations/{invitation_id}/respond", json={"action": "decline"}, headers=auth(caretaker),
        )
        assert again.status_code == 409
        assert again.json()["code"] == "failed-precondition"

        async with session_factory() as s:
            stored = (await s.execute(select(Patient).where(Patient.id == patient.id))).scalar_one()
        assert stored.assigned_caretaker_id == caretaker.id

    async def test_invalid_email(self, client, make, auth):
        patient_user, _ = await make.patient()
        response = await client.post(
            "/invitations", json={"recipient_email": "not-an-email", "type": "doctor"},
            headers=auth(patient_user),
        )
        assert response.status_code == 400


async def test_reports_endpoint(client, make, auth):
    patient_user, _ = await make.patient()
    response = await client.get(f"/reports/{patient_user.id}", headers=auth(patient_user))
    assert response.status_code == 200
    assert response.json() == {"reports": []}
