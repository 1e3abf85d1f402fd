"""Resolve the authenticated caller of a request.

A request carries identity either as trusted headers injected by the
gateway, or as a bearer token signed with the shared secret. Both paths
produce the same :class:`Principal`.
"""

from dataclasses import dataclass
from typing import Mapping, Optional
import enum
import logging

from jose import ExpiredSignatureError, JWTError, jwt

from ..core.config import Settings
from ..utils.errors import InvalidCredential, Unauthenticated

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
KYC_STATUS_HEADER = "X-Kyc-Status"
USER_EMAIL_HEADER = "X-User-Email"
IDENTITY_HEADERS = (USER_ID_HEADER, USER_ROLE_HEADER, KYC_STATUS_HEADER, USER_EMAIL_HEADER)


class Role(str, enum.Enum):
    USER = "user"
    VENDOR = "vendor"
    ADMIN = "admin"
    SERVICE_PROVIDER = "service_provider"


class KycStatus(str, enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role
    kyc_status: Optional[KycStatus] = None
    email: Optional[str] = None
    credential: Optional[str] = None
    via_gateway: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _parse_role(value: Optional[str]) -> Optional[Role]:
    if not value:
        return None
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def _parse_kyc(value: Optional[str]) -> Optional[KycStatus]:
    if not value:
        return None
    try:
        return KycStatus(str(value).strip().lower())
    except ValueError:
        return None


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def _bearer_token(headers: Mapping[str, str]) -> str:
    auth = _get_header(headers, "Authorization")
    if not auth:
        raise Unauthenticated("Authentication required")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Malformed authorization header")
    return token.strip()


def decode_token(token: str, settings: Settings) -> Principal:
    """Verify ``token`` and build a Principal from its claims."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise InvalidCredential()
    except JWTError as exc:
        logger.warning("Rejected token failing verification: %s", exc)
        raise InvalidCredential()

    user_id = payload.get("id") or payload.get("sub")
    role = _parse_role(payload.get("role"))
    if user_id is None or role is None:
        logger.warning("Rejected token with missing or unknown claims")
        raise InvalidCredential()
    return Principal(
        id=str(user_id),
        role=role,
        kyc_status=_parse_kyc(payload.get("kycStatus")),
        email=payload.get("email"),
        credential=token,
    )


def authenticate_bearer(headers: Mapping[str, str], settings: Settings) -> Principal:
    """Verify the bearer token in ``headers``, ignoring any identity headers."""
    return decode_token(_bearer_token(headers), settings)


def resolve_principal(headers: Mapping[str, str], settings: Settings) -> Principal:
    """Return the caller's Principal or raise Unauthenticated/InvalidCredential."""
    header_id = _get_header(headers, USER_ID_HEADER)
    header_role = _get_header(headers, USER_ROLE_HEADER)
    if settings.TRUST_GATEWAY_HEADERS and header_id and header_role:
        role = _parse_role(header_role)
        if role is None:
            raise Unauthenticated("Unknown role")
        credential = None
        auth = _get_header(headers, "Authorization")
        if auth and auth.lower().startswith("bearer "):
            credential = auth[7:].strip() or None
        principal = Principal(
            id=header_id,
            role=role,
            kyc_status=_parse_kyc(_get_header(headers, KYC_STATUS_HEADER)),
            email=_get_header(headers, USER_EMAIL_HEADER),
            credential=credential,
            via_gateway=True,
        )
    else:
        principal = authenticate_bearer(headers, settings)

    logger.info(
        "Authenticated principal",
        extra={"principal_id": principal.id, "role": principal.role.value, "via_gateway": principal.via_gateway},
    )
    return principal


def identity_headers(principal: Principal) -> dict:
    """Headers that carry ``principal`` to a sibling service."""
    headers = {
        USER_ID_HEADER: principal.id,
        USER_ROLE_HEADER: principal.role.value,
    }
    if principal.kyc_status is not None:
        headers[KYC_STATUS_HEADER] = principal.kyc_status.value
    if principal.email:
        headers[USER_EMAIL_HEADER] = principal.email
    if principal.credential:
        headers["Authorization"] = f"Bearer {principal.credential}"
    return headers
