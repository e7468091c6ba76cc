# healthcomm/common/errors.py
"""
Typed error taxonomy shared by every callable and trigger.

Each class carries a stable ``code`` string and an HTTP status. They subclass
``HTTPException`` so FastAPI can render them directly; ``main.py`` installs a
handler that adds the ``code`` to the response body.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class HealthCommError(HTTPException):
    code: str = "internal"
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred."

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.default_detail,
            headers=headers,
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.detail}"


class Unauthenticated(HealthCommError):
    code = "unauthenticated"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    default_detail = "User must be authenticated."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidArgument(HealthCommError):
    code = "invalid-argument"
    status_code_default = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid argument."


class NotFound(HealthCommError):
    code = "not-found"
    status_code_default = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."


class PermissionDenied(HealthCommError):
    code = "permission-denied"
    status_code_default = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."


class FailedPrecondition(HealthCommError):
    code = "failed-precondition"
    status_code_default = status.HTTP_409_CONFLICT
    default_detail = "The operation is not allowed in the current state."


class Unavailable(HealthCommError):
    code = "unavailable"
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The requested resource is currently unavailable."


class NoSuitableCandidate(Unavailable):
    """The scorer found no candidate, or the best candidate scored zero."""


class NoAvailableDoctor(Unavailable):
    """No doctor qualifies for an escalation."""


class Internal(HealthCommError):
    code = "internal"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error."


@contextmanager
def internal_errors(message: str) -> Iterator[None]:
    """
    Re-raise typed errors unchanged and wrap anything else as ``Internal``.

    Usable around ``await`` calls inside an async function.
    """
    try:
        yield
    except HealthCommError:
        raise
    except Exception as e:
        logger.exception(message)
        raise Internal(message) from e
