from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from econcal.domain.event_store import StagedEventStore, UnitOfWorkEventStore
from econcal.domain.ports import UpsertEntry
from tests.support.events import FakeEventStore, make_event

if TYPE_CHECKING:
    from collections.abc import Callable

    from econcal.adapters.sqlalchemy import SqlAlchemyEventUnitOfWork

AT = datetime(2026, 2, 6, 13, 30, tzinfo=UTC)


def test_staged_records_shadow_the_base_store() -> None:
    stored = make_event("CPI m/m", AT, event_id="cpi")
    base = FakeEventStore([stored])
    staged = StagedEventStore(base)
    moved = stored.with_changes(scheduled_at=AT + timedelta(days=5))
    created = make_event("PPI m/m", AT + timedelta(hours=1), event_id="ppi")

    staged.batch_upsert([UpsertEntry("cpi", moved), UpsertEntry("ppi", created)])

    window = staged.query_by_currency_and_time_range(
        "USD", AT - timedelta(hours=1), AT + timedelta(hours=2)
    )
    assert [event.event_id for event in window] == ["ppi"]
    assert staged.get_by_id("cpi") == moved
    assert base.get_by_id("cpi") == stored
    assert len(staged.pending) == 2


def test_staged_store_flushes_in_chunks() -> None:
    base = FakeEventStore()
    staged = StagedEventStore(base)
    for index in range(5):
        event = make_event(f"Event {index}", AT + timedelta(hours=index), event_id=f"e{index}")
        staged.stage(UpsertEntry(event.event_id, event))

    written = staged.flush(chunk_size=2)

    assert written == 5
    assert [len(chunk) for chunk in base.writes] == [2, 2, 1]
    assert staged.pending == ()
    assert staged.flush() == 0


def test_staged_store_restages_latest_version() -> None:
    staged = StagedEventStore(FakeEventStore())
    first = make_event("CPI m/m", AT, event_id="cpi")
    staged.stage(UpsertEntry("cpi", first))
    staged.stage(UpsertEntry("cpi", first.with_changes(actual="0.3%")))

    assert len(staged.pending) == 1
    assert staged.pending[0].record.actual == "0.3%"


def test_staged_store_delegates_new_ids() -> None:
    staged = StagedEventStore(FakeEventStore())

    assert staged.new_id() == "generated-1"


def test_batch_upsert_rejects_non_positive_chunk() -> None:
    with pytest.raises(ValueError, match="chunk_size"):
        StagedEventStore(FakeEventStore()).batch_upsert([], chunk_size=0)


def test_unit_of_work_store_round_trip(
    sqlite_unit_of_work: Callable[[], SqlAlchemyEventUnitOfWork],
) -> None:
    store = UnitOfWorkEventStore(sqlite_unit_of_work, id_factory=lambda: "fixed")
    events = [
        make_event(f"Event {index}", AT + timedelta(hours=index), event_id=f"e{index}")
        for index in range(3)
    ]

    written = store.batch_upsert([UpsertEntry(e.event_id, e) for e in events], chunk_size=2)

    assert written == 3
    assert store.get_by_id("e1") == events[1]
    window = store.query_by_currency_and_time_range("USD", AT, AT + timedelta(hours=1))
    assert [event.event_id for event in window] == ["e0", "e1"]
    assert [event.event_id for event in store.query_scheduled_after(AT)] == ["e1", "e2"]
    assert store.query_rescheduled() == []
    assert store.new_id() == "fixed"
