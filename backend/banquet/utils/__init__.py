from .errors import (
    BanquetError,
    Unauthenticated,
    InvalidCredential,
    Forbidden,
    ValidationError,
    NotFound,
    Conflict,
    InvalidStatus,
    Expired,
    DependencyUnavailable,
    InternalError,
)
from .dates import utcnow, parse_datetime, days_until
