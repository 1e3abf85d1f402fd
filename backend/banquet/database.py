from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``.

    In-memory SQLite gets a StaticPool so every session shares the single
    connection that holds the schema.
    """
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        in_memory = url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url
        if in_memory:
            engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
        else:
            connect_args["timeout"] = 15
            engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-redef]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

        return engine

    return create_engine(url, pool_pre_ping=True, pool_recycle=300)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_schema(engine: Engine) -> None:
    # Import for side effects: registers every table on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(engine)


@contextmanager
def session_scope(session_factory: sessionmaker):
    """Provide a short-lived session with guaranteed close.

    Used where FastAPI dependencies are unavailable (maintenance sweeps).
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
