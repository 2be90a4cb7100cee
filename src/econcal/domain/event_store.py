"""Document-store implementations built on top of the repository ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import batched
from typing import TYPE_CHECKING
from uuid import uuid4

from econcal.domain.ports.persistence import DEFAULT_CHUNK_SIZE

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from econcal.domain.model import CanonicalEvent
    from econcal.domain.ports import CanonicalEventStore, EventUnitOfWork, UpsertEntry


def _new_event_id() -> str:
    return uuid4().hex


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")


@dataclass(slots=True)
class UnitOfWorkEventStore:
    """``CanonicalEventStore`` backed by short-lived units of work.

    Reads open their own unit of work; writes commit one unit of work per
    chunk so a failing chunk leaves earlier chunks committed.
    """

    unit_of_work_factory: Callable[[], EventUnitOfWork]
    id_factory: Callable[[], str] = _new_event_id

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> list[CanonicalEvent]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.events.query_by_currency_and_time_range(currency, start, end)

    def query_scheduled_after(self, instant: datetime) -> list[CanonicalEvent]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.events.query_scheduled_after(instant)

    def query_rescheduled(self) -> list[CanonicalEvent]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.events.query_rescheduled()

    def get_by_id(self, event_id: str) -> CanonicalEvent | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.events.get(event_id)

    def batch_upsert(
        self, entries: Sequence[UpsertEntry], *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> int:
        _check_chunk_size(chunk_size)
        written = 0
        for chunk in batched(entries, chunk_size):
            with self.unit_of_work_factory() as uow:
                for entry in chunk:
                    uow.repositories.events.upsert(entry)
                uow.commit()
            written += len(chunk)
        return written

    def new_id(self) -> str:
        return self.id_factory()


@dataclass(slots=True)
class StagedEventStore:
    """Write-behind overlay used for the duration of one sync run.

    Staged records shadow the underlying store so that an event created or
    moved earlier in the batch is a match target for later records. Nothing
    reaches the underlying store until ``flush``.
    """

    base: CanonicalEventStore
    _staged: dict[str, UpsertEntry] = field(default_factory=dict, init=False)

    @property
    def pending(self) -> tuple[UpsertEntry, ...]:
        return tuple(self._staged.values())

    def stage(self, entry: UpsertEntry) -> None:
        self._staged.pop(entry.event_id, None)
        self._staged[entry.event_id] = entry

    def flush(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        if not self._staged:
            return 0
        written = self.base.batch_upsert(list(self._staged.values()), chunk_size=chunk_size)
        self._staged.clear()
        return written

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> list[CanonicalEvent]:
        stored = self.base.query_by_currency_and_time_range(currency, start, end)
        return self._overlay(
            stored,
            lambda event: event.currency == currency and start <= event.scheduled_at <= end,
        )

    def query_scheduled_after(self, instant: datetime) -> list[CanonicalEvent]:
        stored = self.base.query_scheduled_after(instant)
        return self._overlay(stored, lambda event: event.scheduled_at > instant)

    def query_rescheduled(self) -> list[CanonicalEvent]:
        stored = self.base.query_rescheduled()
        return self._overlay(stored, lambda event: event.rescheduled_from is not None)

    def get_by_id(self, event_id: str) -> CanonicalEvent | None:
        entry = self._staged.get(event_id)
        if entry is not None:
            return entry.record
        return self.base.get_by_id(event_id)

    def batch_upsert(
        self, entries: Sequence[UpsertEntry], *, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> int:
        _check_chunk_size(chunk_size)
        for entry in entries:
            self.stage(entry)
        return len(entries)

    def new_id(self) -> str:
        return self.base.new_id()

    def _overlay(
        self,
        stored: Iterable[CanonicalEvent],
        predicate: Callable[[CanonicalEvent], bool],
    ) -> list[CanonicalEvent]:
        merged = [event for event in stored if event.event_id not in self._staged]
        merged.extend(entry.record for entry in self._staged.values() if predicate(entry.record))
        return sorted(merged, key=lambda event: (event.scheduled_at, event.event_id))
