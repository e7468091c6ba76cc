# healthcomm/modules/care_team/schemas.py
"""Schemas for care-team assignment, escalation and provider endpoints."""

from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

from healthcomm.models.models import Availability, CareTeamRole, VerificationStatus
from .scoring import Urgency


# =============================================================================
# ASSIGNMENT
# =============================================================================

class AssignCareTeamRequest(BaseModel):
    patient_id: UUID
    care_team_role: CareTeamRole
    preferred_specialization: Optional[str] = Field(None, max_length=100)
    urgency: Urgency = Urgency.ROUTINE
    auto_escalate: bool = False


class AssignmentReason(BaseModel):
    """Why the system picked this assignee. Stored on the patient, overwritten on reassignment."""
    score: float
    role: CareTeamRole
    factors: Dict[str, Any]
    assigned_by: str = "system"
    timestamp: datetime


class AssignCareTeamResponse(BaseModel):
    success: bool = True
    assigned_id: str
    assigned_name: str
    role: CareTeamRole
    reason: AssignmentReason
    message: str


# =============================================================================
# ESCALATION
# =============================================================================

class EscalateRequest(BaseModel):
    patient_id: UUID
    reason: Optional[str] = Field(None, max_length=500)


class EscalateResponse(BaseModel):
    success: bool = True
    already_escalated: bool = False
    doctor_id: Optional[str] = None
    doctor_name: Optional[str] = None
    message: str


# =============================================================================
# CARE TEAM VIEW
# =============================================================================

class CareTeamMember(BaseModel):
    id: str
    name: str
    role: CareTeamRole
    availability: Optional[Availability] = None
    specialization: Optional[str] = None
    certified: Optional[bool] = None


class CareTeamResponse(BaseModel):
    patient_id: str
    tier: str  # none, caretaker_only, doctor_supervised
    status: str
    doctor: Optional[CareTeamMember] = None
    caretaker: Optional[CareTeamMember] = None
    assignment_reason: Optional[Dict[str, Any]] = None
    auto_escalate_to_doctor: bool
    escalated_at: Optional[datetime] = None
    escalated_from: Optional[str] = None
    escalation_reason: Optional[str] = None
    chronic_conditions: List[str] = []


# =============================================================================
# PROVIDER SELF-SERVICE
# =============================================================================

class UpdateAvailabilityRequest(BaseModel):
    availability: Availability


class UpdateAvailabilityResponse(BaseModel):
    success: bool = True
    availability: Availability


class VerifyCredentialsRequest(BaseModel):
    license_id: str = Field(..., min_length=1, max_length=100)
    specialization: Optional[str] = Field(None, max_length=100)


class VerifyCredentialsResponse(BaseModel):
    success: bool = True
    status: VerificationStatus
    message: str
