# Notifications Schemas

from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel
from datetime import datetime


class NotificationResponse(BaseModel):
    id: str
    type: str
    severity: str
    title: str
    message: str
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    reference_id: Optional[str] = None
    is_read: bool
    created_at: datetime


class NotificationsListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class MarkReadRequest(BaseModel):
    notification_ids: List[UUID]


class MarkReadResponse(BaseModel):
    success: bool
    marked_count: int
