# Audit Service

import enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.models.models import AuditLog, User


def _jsonable(value: Any) -> Any:
    """Make audit details JSON-safe (UUIDs and enums as strings)."""
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def record_audit(
    db: AsyncSession,
    action: str,
    user_id: Optional[UUID],
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Add an audit entry to the session. The caller commits."""
    entry = AuditLog(action=action, user_id=user_id, details=_jsonable(details or {}))
    db.add(entry)
    return entry


async def get_user_audit_logs(db: AsyncSession, user: User, limit: int = 100) -> List[AuditLog]:
    """Audit entries where the user was the actor, newest first."""
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.user_id == user.id)
        .order_by(desc(AuditLog.timestamp))
        .limit(limit)
    )
    return list(result.scalars().all())
