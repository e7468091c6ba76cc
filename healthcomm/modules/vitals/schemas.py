# healthcomm/modules/vitals/schemas.py

import enum
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from healthcomm.common.utils.global_functions import as_utc
from healthcomm.modules.alerts.schemas import AlertResponse


class VitalsReadingCreate(BaseModel):
    """Canonical reading shape. Device adapters translate vendor payloads into this."""
    device_id: str = Field(..., min_length=1, max_length=255)
    heart_rate: Optional[float] = Field(None, ge=0)
    blood_pressure_systolic: Optional[float] = Field(None, ge=0)
    blood_pressure_diastolic: Optional[float] = Field(None, ge=0)
    oxygen_level: Optional[float] = Field(None, ge=0, le=100)
    temperature: Optional[float] = Field(None, ge=0)
    glucose: Optional[float] = Field(None, ge=0)
    respiration: Optional[float] = Field(None, ge=0)
    timestamp: Optional[datetime] = None


class VitalsReadingResponse(BaseModel):
    id: str
    patient_id: str
    device_id: str
    heart_rate: Optional[float] = None
    blood_pressure_systolic: Optional[float] = None
    blood_pressure_diastolic: Optional[float] = None
    oxygen_level: Optional[float] = None
    temperature: Optional[float] = None
    glucose: Optional[float] = None
    respiration: Optional[float] = None
    timestamp: datetime


class VitalsIngestResponse(BaseModel):
    success: bool = True
    reading: VitalsReadingResponse
    alerts: List[AlertResponse]
    patient_status: str
    escalated_to: Optional[str] = None


class ExportFormat(str, enum.Enum):
    JSON = "json"
    CSV = "csv"


class ExportVitalsRequest(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    format: ExportFormat = ExportFormat.JSON

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date and self.end_date and as_utc(self.start_date) > as_utc(self.end_date):
            raise ValueError("start_date must not be after end_date")
        return self


class ExportVitalsResponse(BaseModel):
    success: bool = True
    format: ExportFormat
    count: int
    patient_name: str
    data: Union[List[Dict[str, Any]], str]
