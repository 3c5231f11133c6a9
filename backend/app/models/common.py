"""Shared column helpers for the ORM models."""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp used for every created/updated column."""
    return datetime.now(timezone.utc)
