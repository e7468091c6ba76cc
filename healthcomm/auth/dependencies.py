# healthcomm/auth/dependencies.py

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import jwt

from healthcomm.common.config import settings
from healthcomm.common.database.database import get_db_session
from healthcomm.common.errors import Unauthenticated
from healthcomm.common.utils.global_messages import GlobalMessages
from healthcomm.models.models import User

bearer_scheme = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session)
) -> User:
    """
    Dependency to retrieve the current user based on the JWT token provided in the Authorization header.
    """
    if credentials is None:
        raise Unauthenticated(GlobalMessages.NOT_AUTHENTICATED)

    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        user_id = UUID(payload.get("sub"))
    except (jwt.InvalidTokenError, TypeError, ValueError) as e:
        raise Unauthenticated(GlobalMessages.INVALID_CREDENTIALS) from e

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if user is None or not user.is_active:
        raise Unauthenticated(GlobalMessages.INVALID_CREDENTIALS)
    return user
