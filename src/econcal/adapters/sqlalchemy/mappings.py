"""SQLAlchemy table metadata for canonical events and the activity log."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class JSONDocument(TypeDecorator[object]):
    """JSON stored as text with stable key order."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: object | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, sort_keys=True, default=str)

    def process_result_value(self, value: str | None, dialect: Dialect) -> object | None:
        _ = dialect
        if value is None:
            return None
        return json.loads(value)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

canonical_event_table = Table(
    "canonical_event",
    metadata,
    Column("event_id", String(64), primary_key=True),
    Column("name", String, nullable=False),
    Column("normalized_name", String, nullable=False),
    Column("currency", String(16), nullable=True),
    Column("category", String, nullable=True),
    Column("impact", String, nullable=True),
    Column("scheduled_at", UTCDateTime, nullable=False),
    Column("original_scheduled_at", UTCDateTime, nullable=True),
    Column("rescheduled_from", UTCDateTime, nullable=True),
    Column("timezone_source", String(32), nullable=True),
    Column("forecast", String, nullable=True),
    Column("previous", String, nullable=True),
    Column("actual", String, nullable=True),
    Column("status", String(16), nullable=False),
    Column("sources", JSONDocument, nullable=False),
    Column("created_by", String(32), nullable=True),
    Column("winner_source", String(32), nullable=True),
    Column("quality_score", Integer, nullable=True),
    Column("last_seen_in_feed", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    Index("ix_canonical_event_currency_scheduled_at", "currency", "scheduled_at"),
    Index("ix_canonical_event_scheduled_at", "scheduled_at"),
)

event_activity_table = Table(
    "event_activity",
    metadata,
    Column("activity_id", String, primary_key=True),
    Column("action", String(32), nullable=False),
    Column("title", String, nullable=False),
    Column("description", String, nullable=False),
    Column("severity", String(16), nullable=False),
    Column("details", JSONDocument, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Index("ix_event_activity_created_at", "created_at"),
)

CANONICAL_EVENT_COLUMNS = frozenset(canonical_event_table.c.keys())


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the metadata without running migrations."""

    log.info("Creating all tables")
    metadata.create_all(engine)
