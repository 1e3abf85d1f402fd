"""Error taxonomy shared by every service.

Each error carries the HTTP status it surfaces as; the application's
exception handler renders ``{"error": ..., "details": ...}``.
"""

from typing import Any, Optional
import logging

from fastapi import status

logger = logging.getLogger(__name__)


class BanquetError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload: dict = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class Unauthenticated(BanquetError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidCredential(Unauthenticated):
    default_message = "Invalid token"


class Forbidden(BanquetError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class ValidationError(BanquetError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, field: Optional[str], message: Optional[str] = None, details: Any = None) -> None:
        self.field = field
        merged = {"field": field} if field else {}
        if isinstance(details, dict):
            merged.update(details)
        elif details is not None:
            merged["info"] = details
        super().__init__(message, merged or None)


class NotFound(BanquetError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(BanquetError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InvalidStatus(Conflict):
    default_message = "Invalid status transition"

    def __init__(self, current: Any, attempted: Any, message: Optional[str] = None) -> None:
        self.current = _status_value(current)
        self.attempted = _status_value(attempted)
        super().__init__(
            message or f"Cannot change status from {self.current} to {self.attempted}",
            {"currentStatus": self.current, "attemptedStatus": self.attempted},
        )


class Expired(Conflict):
    default_message = "Expired"


class DependencyUnavailable(BanquetError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "A required service is unavailable, please retry"


class InternalError(BanquetError):
    pass


def _status_value(value: Any) -> Any:
    return getattr(value, "value", value)


def log_error(exc: BanquetError, path: str) -> None:
    """Log a domain error at a level matching its severity."""
    if exc.status_code >= 500:
        logger.error("%s at %s: %s %s", type(exc).__name__, path, exc.message, exc.details)
    else:
        logger.warning("%s at %s: %s %s", type(exc).__name__, path, exc.message, exc.details)
