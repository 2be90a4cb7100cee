"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    """Known calendar providers.

    Provider names travel as plain strings through the engine so that a feed
    missing from this enum still merges (at lowest priority).
    """

    NFS = "nfs"
    JBLANKED_FF = "jblanked-ff"
    GPT = "gpt"
    JBLANKED_MT = "jblanked-mt"
    JBLANKED_FXSTREET = "jblanked-fxstreet"


class EventStatus(StrEnum):
    SCHEDULED = "scheduled"
    RELEASED = "released"
    REVISED = "revised"
    CANCELLED = "cancelled"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        """Whether the event already occurred (it carries published values)."""

        return self in {EventStatus.RELEASED, EventStatus.REVISED}


_STATUS_RANK: dict[EventStatus, int] = {
    EventStatus.SCHEDULED: 0,
    EventStatus.RELEASED: 1,
    EventStatus.REVISED: 2,
    EventStatus.CANCELLED: 3,
}


class MatchKind(StrEnum):
    """Which identity strategy matched an incoming record."""

    NARROW = "narrow"
    FALLBACK = "fallback"
    IDENTITY = "identity"


class AuditAction(StrEnum):
    EVENT_CREATED = "event_created"
    EVENT_RESCHEDULED = "event_rescheduled"
    EVENT_CANCELLED = "event_cancelled"
    EVENT_REINSTATED = "event_reinstated"
    SYNC_COMPLETED = "sync_completed"
    SYNC_FAILED = "sync_failed"


class AuditSeverity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
