# Audit Schemas

from typing import Any, Dict, List
from datetime import datetime
from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: str
    action: str
    details: Dict[str, Any]
    timestamp: datetime


class AuditLogListResponse(BaseModel):
    entries: List[AuditLogResponse]
