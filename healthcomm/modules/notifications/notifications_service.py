# Notifications Service
"""
Notification sink. Triggers and callables add rows through
``create_notification`` inside their own transaction; a separate push worker
delivers them and flips ``is_sent``. The inbox endpoints read and prune them.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select, update, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.config import settings
from healthcomm.common.utils.global_functions import as_utc, utcnow
from healthcomm.models.models import AlertSeverity, Notification, NotificationType, User
from .schemas import NotificationResponse


def create_notification(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.SYSTEM,
    severity: AlertSeverity = AlertSeverity.LOW,
    patient_id: Optional[UUID] = None,
    patient_name: Optional[str] = None,
    reference_id: Optional[UUID] = None
) -> Notification:
    """Add a notification to the session. The caller commits with the rest of its writes."""
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        severity=severity,
        patient_id=patient_id,
        patient_name=patient_name,
        reference_id=reference_id
    )
    db.add(notification)
    return notification


def notification_to_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=str(n.id),
        type=n.type.value,
        severity=n.severity.value,
        title=n.title,
        message=n.message,
        patient_id=str(n.patient_id) if n.patient_id else None,
        patient_name=n.patient_name,
        reference_id=str(n.reference_id) if n.reference_id else None,
        is_read=n.is_read,
        created_at=as_utc(n.created_at),
    )


# =============================================================================
# INBOX
# =============================================================================

async def get_user_notifications(
    db: AsyncSession,
    user: User,
    limit: int = 20,
    unread_only: bool = False
) -> Tuple[List[Notification], int]:
    """The user's notifications, newest first, and their unread total."""
    query = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(query.order_by(desc(Notification.created_at)).limit(limit))

    unread = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user.id,
            Notification.is_read.is_(False)
        )
    )
    return list(result.scalars().all()), unread.scalar() or 0


async def _mark_read(db: AsyncSession, user: User, *criteria) -> int:
    stmt = (
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read.is_(False), *criteria)
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount


async def mark_notifications_read(db: AsyncSession, user: User, notification_ids: List[UUID]) -> int:
    """Mark the given notifications read. Ids owned by someone else are ignored."""
    if not notification_ids:
        return 0
    return await _mark_read(db, user, Notification.id.in_(notification_ids))


async def mark_all_read(db: AsyncSession, user: User) -> int:
    return await _mark_read(db, user)


async def delete_notification(db: AsyncSession, user: User, notification_id: UUID) -> bool:
    """Delete one of the user's notifications. Returns False if there was none."""
    result = await db.execute(
        delete(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user.id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0


# =============================================================================
# RETENTION
# =============================================================================

async def cleanup_old_notifications(
    db: AsyncSession,
    now: Optional[datetime] = None,
    retention_days: Optional[int] = None
) -> int:
    """Delete read notifications older than the retention window. Returns the deleted count."""
    now = now or utcnow()
    days = retention_days if retention_days is not None else settings.NOTIFICATION_RETENTION_DAYS
    cutoff = now - timedelta(days=days)

    result = await db.execute(
        delete(Notification)
        .where(Notification.created_at < cutoff, Notification.is_read.is_(True))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
