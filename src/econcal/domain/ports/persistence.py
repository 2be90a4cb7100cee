"""Ports for persisting canonical events and activity records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from econcal.domain.model import AuditEvent, CanonicalEvent

# Firestore-style batch limit, kept for stores that honour it.
DEFAULT_CHUNK_SIZE = 400


@dataclass(frozen=True, slots=True)
class UpsertEntry:
    """One document write with merge semantics.

    Optional fields that are ``None`` on ``record`` are left untouched in the
    store; fields named in ``clear`` are deleted explicitly.
    """

    event_id: str
    record: CanonicalEvent
    clear: frozenset[str] = field(default_factory=frozenset)


@runtime_checkable
class CanonicalEventStore(Protocol):
    """Document-store contract consumed by the resolver, detector and orchestrators."""

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> Sequence[CanonicalEvent]: ...

    def query_scheduled_after(self, instant: datetime) -> Sequence[CanonicalEvent]: ...

    def query_rescheduled(self) -> Sequence[CanonicalEvent]: ...

    def get_by_id(self, event_id: str) -> CanonicalEvent | None: ...

    def batch_upsert(
        self, entries: Sequence[UpsertEntry], *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> int: ...

    def new_id(self) -> str: ...


@runtime_checkable
class CanonicalEventRepository(Protocol):
    """Session-scoped repository used inside one unit of work."""

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> list[CanonicalEvent]: ...

    def query_scheduled_after(self, instant: datetime) -> list[CanonicalEvent]: ...

    def query_rescheduled(self) -> list[CanonicalEvent]: ...

    def get(self, event_id: str) -> CanonicalEvent | None: ...

    def upsert(self, entry: UpsertEntry) -> None: ...


@runtime_checkable
class ActivityRepository(Protocol):
    """Persistence contract for the audit activity log."""

    def record(self, event: AuditEvent) -> None: ...

    def get(self, activity_id: str) -> AuditEvent | None: ...
