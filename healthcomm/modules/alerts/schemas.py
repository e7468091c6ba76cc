# healthcomm/modules/alerts/schemas.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from healthcomm.models.models import AlertSeverity, AlertSource


class AlertCreate(BaseModel):
    """An alert raised by a device rather than the anomaly classifier."""
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    severity: AlertSeverity
    timestamp: Optional[datetime] = None


class AlertResponse(BaseModel):
    id: str
    patient_id: str
    vitals_reading_id: Optional[str] = None
    title: str
    message: str
    severity: AlertSeverity
    source: AlertSource
    timestamp: datetime


class AlertIngestResponse(BaseModel):
    success: bool = True
    alert: AlertResponse
    patient_status: str
    escalated_to: Optional[str] = None


class AlertsListResponse(BaseModel):
    alerts: List[AlertResponse]
    total: int
