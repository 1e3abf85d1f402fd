from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Any
from pathlib import Path
import os


def _default_env_file() -> str:
    return os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env"))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=_default_env_file(),
        case_sensitive=True,
    )

    SERVICE_NAME: str = "banquet"

    # JWT configuration shared by the gateway and every service
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # When the gateway forwards X-User-* headers the services trust them
    # verbatim. Disable for services exposed without the gateway in front.
    TRUST_GATEWAY_HEADERS: bool = True

    SQLALCHEMY_DATABASE_URL: str = "sqlite:///./banquet.db"

    # Sibling services. An empty venue URL means venues live in this
    # service's own store and are looked up locally.
    VENUE_SERVICE_URL: str = ""
    AUTH_SERVICE_URL: str = ""
    SERVICE_TIMEOUT_SECONDS: float = 5.0

    # Gateway upstreams, keyed by the first path segment after /api/
    GATEWAY_ROUTES: dict[str, str] = {
        "auth": "http://localhost:4001",
        "venue": "http://localhost:4002",
        "booking": "http://localhost:4005",
        "media": "http://localhost:4006",
        "notification": "http://localhost:4007",
        "service-provider": "http://localhost:4008",
        "calendar": "http://localhost:4009",
    }
    GATEWAY_PUBLIC_PATHS: list[str] = ["/api/health", "/api/auth/login", "/api/auth/register"]
    GATEWAY_TIMEOUT_SECONDS: float = 30.0

    # Business rules
    CANCELLATION_NOTICE_DAYS: int = 3
    INVOICE_DUE_DAYS: int = 7
    QUOTE_VALIDITY_DAYS: int = 14

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Periodic sweeps (expired quotes, overdue invoices). 0 disables the loop.
    MAINTENANCE_INTERVAL_SECONDS: int = 0

    # SMTP email settings; an empty host disables delivery
    SMTP_HOST: str = ""
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "no-reply@localhost"

    LOG_LEVEL: str = "INFO"

    @field_validator("VENUE_SERVICE_URL", "AUTH_SERVICE_URL", mode="before")
    def strip_urls(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    def upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


def load_settings(**overrides: Any) -> Settings:
    return Settings(_env_file=_default_env_file(), **overrides)
