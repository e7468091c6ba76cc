# healthcomm/modules/profile/schemas.py

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from healthcomm.models.models import Availability, UserRole


class UpdateProfileRequest(BaseModel):
    """Partial update. Only the fields that are sent are written."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)

    # Patients
    chronic_conditions: Optional[List[str]] = None
    auto_escalate_to_doctor: Optional[bool] = None

    # Doctors
    specialization: Optional[str] = Field(None, max_length=100)
    years_in_practice: Optional[int] = Field(None, ge=0, le=80)

    # Caretakers
    certified: Optional[bool] = None
    experience_years: Optional[int] = Field(None, ge=0, le=80)

    # Doctors and caretakers
    max_patients: Optional[int] = Field(None, ge=1)

    @field_validator("chronic_conditions")
    @classmethod
    def clean_conditions(cls, v):
        if v is None:
            return v
        cleaned = []
        for condition in v:
            condition = condition.strip()
            if condition and condition not in cleaned:
                cleaned.append(condition)
        return cleaned

    @field_validator("specialization")
    @classmethod
    def blank_specialization_is_none(cls, v):
        if v is None:
            return v
        return v.strip() or None


class ProfileResponse(BaseModel):
    user_id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    has_profile: bool

    # Patients
    status: Optional[str] = None
    chronic_conditions: Optional[List[str]] = None
    auto_escalate_to_doctor: Optional[bool] = None
    vitals_count: Optional[int] = None
    alerts_count: Optional[int] = None

    # Doctors and caretakers
    availability: Optional[Availability] = None
    specialization: Optional[str] = None
    years_in_practice: Optional[int] = None
    certified: Optional[bool] = None
    experience_years: Optional[int] = None
    max_patients: Optional[int] = None


class UpdateProfileResponse(BaseModel):
    success: bool = True
    created: bool
    message: str
    profile: ProfileResponse
