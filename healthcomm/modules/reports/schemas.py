# healthcomm/modules/reports/schemas.py

from typing import List
from datetime import date, datetime
from pydantic import BaseModel


class DailyReportResponse(BaseModel):
    id: str
    patient_id: str
    patient_name: str
    report_date: date
    vitals_count: int
    alerts_count: int
    high_severity_alerts: int
    status: str
    created_at: datetime


class DailyReportsListResponse(BaseModel):
    reports: List[DailyReportResponse]
