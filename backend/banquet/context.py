"""Per-application wiring built once at startup.

Everything a request needs beyond the request itself hangs off an
``AppContext`` stored on ``app.state``; nothing here is module-global.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .core.config import Settings
from .database import build_engine, build_session_factory, create_schema
from .services.sibling_client import SiblingClient
from .utils.dates import utcnow
from .utils.email import Mailer


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    mailer: Mailer
    venue_client: Optional[SiblingClient] = None
    auth_client: Optional[SiblingClient] = None
    clock: Callable[[], datetime] = field(default=utcnow)

    def now(self) -> datetime:
        return self.clock()

    def close(self) -> None:
        for client in (self.venue_client, self.auth_client):
            if client is not None:
                client.close()
        self.engine.dispose()


def build_context(settings: Settings, create_tables: bool = True) -> AppContext:
    engine = build_engine(settings.SQLALCHEMY_DATABASE_URL)
    if create_tables:
        create_schema(engine)
    timeout = settings.SERVICE_TIMEOUT_SECONDS
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        mailer=Mailer(settings),
        venue_client=SiblingClient(settings.VENUE_SERVICE_URL, timeout) if settings.VENUE_SERVICE_URL else None,
        auth_client=SiblingClient(settings.AUTH_SERVICE_URL, timeout) if settings.AUTH_SERVICE_URL else None,
    )
