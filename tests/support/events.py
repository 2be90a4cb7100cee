"""Reusable fakes and builders for canonical-event tests."""

from __future__ import annotations

from dataclasses import fields
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from econcal.domain.model import (
    CanonicalEvent,
    EventStatus,
    ParsedFields,
    Provider,
    ProviderRecord,
    SourceContribution,
)
from econcal.domain.ports import ProviderUnavailableError
from econcal.domain.ports.persistence import DEFAULT_CHUNK_SIZE
from econcal.domain.reconciliation import normalize_event_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from econcal.domain.ports import UpsertEntry

T0 = datetime(2026, 2, 1, 12, 0, tzinfo=UTC)


def make_record(  # noqa: PLR0913
    name: str | None,
    scheduled_at: datetime | None,
    *,
    provider: str = Provider.NFS,
    currency: str | None = "USD",
    status: EventStatus | None = EventStatus.SCHEDULED,
    actual: str | None = None,
    forecast: str | None = None,
    previous: str | None = None,
    impact: str | None = None,
) -> ProviderRecord:
    return ProviderRecord(
        provider=provider,
        name=name,
        scheduled_at=scheduled_at,
        currency=currency,
        status=status,
        actual=actual,
        forecast=forecast,
        previous=previous,
        impact=impact,
        raw_payload={"title": name},
    )


def make_event(  # noqa: PLR0913
    name: str,
    scheduled_at: datetime,
    *,
    event_id: str | None = None,
    currency: str | None = "USD",
    status: EventStatus = EventStatus.SCHEDULED,
    providers: Iterable[str] = (Provider.NFS,),
    last_seen_in_feed: datetime | None = None,
    rescheduled_from: datetime | None = None,
    original_scheduled_at: datetime | None = None,
    actual: str | None = None,
) -> CanonicalEvent:
    sources = {
        provider: SourceContribution(
            original_name=name,
            last_seen_at=last_seen_in_feed or T0,
            parsed=ParsedFields(actual=actual),
        )
        for provider in providers
    }
    return CanonicalEvent(
        event_id=event_id or f"{normalize_event_name(name)}@{scheduled_at.isoformat()}",
        name=name,
        normalized_name=normalize_event_name(name),
        currency=currency,
        scheduled_at=scheduled_at,
        original_scheduled_at=original_scheduled_at or scheduled_at,
        rescheduled_from=rescheduled_from,
        timezone_source=next(iter(sources), None),
        status=status,
        actual=actual,
        sources=sources,
        created_by=next(iter(sources), None),
        created_at=T0,
        updated_at=T0,
        last_seen_in_feed=last_seen_in_feed,
    )


class FakeEventStore:
    """In-memory ``CanonicalEventStore`` with the same merge-write semantics as the database."""

    def __init__(self, initial: Iterable[CanonicalEvent] = ()) -> None:
        self.items: dict[str, CanonicalEvent] = {event.event_id: event for event in initial}
        self.writes: list[list[UpsertEntry]] = []
        self._next_id = 0

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> list[CanonicalEvent]:
        return self._sorted(
            event
            for event in self.items.values()
            if event.currency == currency and start <= event.scheduled_at <= end
        )

    def query_scheduled_after(self, instant: datetime) -> list[CanonicalEvent]:
        return self._sorted(event for event in self.items.values() if event.scheduled_at > instant)

    def query_rescheduled(self) -> list[CanonicalEvent]:
        return self._sorted(
            event for event in self.items.values() if event.rescheduled_from is not None
        )

    def get_by_id(self, event_id: str) -> CanonicalEvent | None:
        return self.items.get(event_id)

    def batch_upsert(
        self, entries: Sequence[UpsertEntry], *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> int:
        for start in range(0, len(entries), chunk_size):
            chunk = list(entries[start : start + chunk_size])
            self.writes.append(chunk)
            for entry in chunk:
                self.items[entry.event_id] = self._merge(entry)
        return len(entries)

    def new_id(self) -> str:
        self._next_id += 1
        return f"generated-{self._next_id}"

    def _merge(self, entry: UpsertEntry) -> CanonicalEvent:
        stored = self.items.get(entry.event_id)
        if stored is None:
            return entry.record
        changes: dict[str, object] = {}
        for item in fields(CanonicalEvent):
            value = getattr(entry.record, item.name)
            if value is not None or item.name in entry.clear:
                changes[item.name] = value
        return stored.with_changes(**changes)

    @staticmethod
    def _sorted(events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
        return sorted(events, key=lambda event: (event.scheduled_at, event.event_id))


class FakeFetcher:
    """Provider fetcher returning canned records or raising a canned error."""

    def __init__(
        self,
        records: Iterable[ProviderRecord] = (),
        *,
        provider: str = Provider.NFS,
        error: ProviderUnavailableError | None = None,
    ) -> None:
        self.records = list(records)
        self.provider = provider
        self.error = error
        self.calls: list[tuple[datetime | None, datetime | None]] = []

    def __call__(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ProviderRecord]:
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return list(self.records)
