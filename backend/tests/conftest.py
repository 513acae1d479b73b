"""Shared test fixtures for all test modules."""

import contextlib
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import thirdplace.models  # noqa: F401
from thirdplace.core import database as db_module
from thirdplace.core.database import Base, get_db
from thirdplace.repositories.webhook_configuration_repository import (
    WebhookConfigurationRepository,
)
from thirdplace.repositories.webhook_delivery_repository import WebhookDeliveryRepository
from thirdplace.schemas.webhook import WebhookConfigurationCreate

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# Fixed base time so created_at ordering is deterministic
BASE_TIME = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    """Create a database session for direct repository testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


def make_configuration(db, **overrides):
    """Create a webhook configuration with sensible defaults."""
    data = {
        "name": "Community CRM",
        "url": "https://example.com/webhooks",
        "events": ["user.joined_community", "webhook.test"],
        "secret_key": None,
        "is_active": True,
    }
    data.update(overrides)
    return WebhookConfigurationRepository(db).create(WebhookConfigurationCreate(**data))


def make_delivery(db, config, *, attempts=0, status="pending", age_seconds=0, **overrides):
    """Create a delivery row, backdating created_at by ``age_seconds``."""
    repo = WebhookDeliveryRepository(db)
    delivery = repo.create(
        webhook_config_id=config.id,
        event_type=overrides.pop("event_type", "user.joined_community"),
        payload=overrides.pop("payload", {"user_id": "u_1", "community_id": "c_1"}),
    )
    delivery.attempts = attempts
    delivery.status = status
    delivery.created_at = BASE_TIME - timedelta(seconds=age_seconds)
    for key, value in overrides.items():
        setattr(delivery, key, value)
    db.commit()
    db.refresh(delivery)
    return delivery


@pytest.fixture
def active_config(db_session):
    """Active configuration with a signing secret."""
    return make_configuration(db_session, name="Signed", secret_key="s3cr3t")


@pytest.fixture
def unsigned_config(db_session):
    """Active configuration without a secret."""
    return make_configuration(db_session, name="Unsigned", url="https://example.com/unsigned")


@pytest.fixture
def inactive_config(db_session):
    """Inactive configuration."""
    return make_configuration(
        db_session, name="Disabled", url="https://example.com/disabled", is_active=False
    )
