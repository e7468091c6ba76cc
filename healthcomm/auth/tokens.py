# healthcomm/auth/tokens.py
"""Access-token minting. Sign-in flows live outside this service; this is used by seeding and tests."""

from datetime import timedelta
from typing import Optional

import jwt

from healthcomm.common.config import settings
from healthcomm.common.utils.global_functions import utcnow


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT token including an expiration date."""
    to_encode = data.copy()
    expire = utcnow() + (expires_delta if expires_delta else timedelta(minutes=settings.JWT_EXPIRATION_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
