"""Column types and defaults shared by the webhook models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Uuid

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid(as_uuid=True)


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def utc_now() -> datetime:
    """Timezone-aware current time, used for attempt and claim timestamps."""
    return datetime.now(UTC)
