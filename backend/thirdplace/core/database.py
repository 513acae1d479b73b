from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from thirdplace.core.config import settings


def _build_engine(dsn: str) -> Engine:
    if dsn.startswith("sqlite"):
        sqlite_engine = create_engine(dsn, connect_args={"check_same_thread": False})

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
            # Deleting a configuration must cascade to its deliveries
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine
    return create_engine(dsn, pool_pre_ping=True)


engine = _build_engine(settings.APP_DATABASE_DSN)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the webhook tables if they do not exist."""
    import thirdplace.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
