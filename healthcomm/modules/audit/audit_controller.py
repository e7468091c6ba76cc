# Audit Controller

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from healthcomm.common.database.database import get_db_session
from healthcomm.auth.dependencies import get_current_user
from healthcomm.common.utils.global_functions import as_utc
from healthcomm.models.models import User

from . import audit_service as service
from .schemas import AuditLogResponse, AuditLogListResponse


router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=AuditLogListResponse)
async def get_audit_logs(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get audit entries for actions the current user performed."""
    entries = await service.get_user_audit_logs(db, current_user, limit)
    return AuditLogListResponse(
        entries=[
            AuditLogResponse(
                id=str(e.id),
                action=e.action,
                details=e.details or {},
                timestamp=as_utc(e.timestamp)
            )
            for e in entries
        ]
    )
