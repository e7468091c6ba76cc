# Notifications Controller

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.common.errors import NotFound
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.auth.dependencies import get_current_user
from healthcomm.models.models import User

from . import notifications_service as service
from .schemas import NotificationsListResponse, MarkReadRequest, MarkReadResponse


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationsListResponse)
async def get_notifications(
    limit: int = Query(20, ge=1, le=200),
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """The caller's inbox, newest first, with the unread total."""
    notifications, unread_count = await service.get_user_notifications(db, current_user, limit, unread_only)
    return NotificationsListResponse(
        notifications=[service.notification_to_response(n) for n in notifications],
        unread_count=unread_count,
    )


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
    request: MarkReadRequest,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    count = await service.mark_notifications_read(db, current_user, request.notification_ids)
    return MarkReadResponse(success=True, marked_count=count)


@router.post("/mark-all-read", response_model=MarkReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    count = await service.mark_all_read(db, current_user)
    return MarkReadResponse(success=True, marked_count=count)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    if not await service.delete_notification(db, current_user, notification_id):
        raise NotFound(GlobalMessages.NOTIFICATION_NOT_FOUND)
    return {"success": True}
