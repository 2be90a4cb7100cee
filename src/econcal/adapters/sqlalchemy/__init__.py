"""SQLAlchemy adapter package for econcal."""

from __future__ import annotations

from .activity import ActivityLogAuditSink
from .mappings import (
    canonical_event_table,
    create_all_tables,
    event_activity_table,
    metadata,
)
from .repositories import (
    SqlAlchemyActivityRepository,
    SqlAlchemyCanonicalEventRepository,
    strip_absent,
)
from .unit_of_work import (
    SqlAlchemyEventUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "ActivityLogAuditSink",
    "SqlAlchemyActivityRepository",
    "SqlAlchemyCanonicalEventRepository",
    "SqlAlchemyEventUnitOfWork",
    "StartupError",
    "canonical_event_table",
    "create_all_tables",
    "event_activity_table",
    "metadata",
    "shutdown",
    "startup",
    "strip_absent",
]
