from .principal import (
    Principal,
    Role,
    KycStatus,
    resolve_principal,
    authenticate_bearer,
    decode_token,
    identity_headers,
    IDENTITY_HEADERS,
)
from .tokens import create_access_token
