from __future__ import annotations

from datetime import UTC, datetime, timedelta

from econcal.domain.model import EventStatus, Provider
from econcal.domain.reconciliation import (
    detect_stale_events,
    is_stale,
    repair_weekly_reschedules,
)
from tests.support.events import FakeEventStore, make_event

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=UTC)
FUTURE = NOW + timedelta(days=2)


def _stale_fixture() -> FakeEventStore:
    return FakeEventStore(
        [
            make_event("Unseen Four Days", FUTURE, last_seen_in_feed=NOW - timedelta(days=4)),
            make_event("Seen Two Days Ago", FUTURE, last_seen_in_feed=NOW - timedelta(days=2)),
            make_event("Never Confirmed", FUTURE + timedelta(hours=1)),
            make_event(
                "Release Feed Only",
                FUTURE,
                providers=(Provider.JBLANKED_FF,),
                last_seen_in_feed=NOW - timedelta(days=10),
            ),
            make_event(
                "Already Past",
                NOW - timedelta(hours=1),
                last_seen_in_feed=NOW - timedelta(days=10),
            ),
            make_event(
                "Already Cancelled",
                FUTURE,
                status=EventStatus.CANCELLED,
                last_seen_in_feed=NOW - timedelta(days=10),
            ),
        ]
    )


def test_detect_stale_events_cancels_unconfirmed_future_events() -> None:
    store = _stale_fixture()

    result = detect_stale_events(store, now=NOW)

    assert result.detected == 2
    assert result.updated == 2
    assert sorted(event.name for event in result.events) == ["Never Confirmed", "Unseen Four Days"]
    cancelled = {
        event.name for event in store.items.values() if event.status is EventStatus.CANCELLED
    }
    assert cancelled == {"Never Confirmed", "Unseen Four Days", "Already Cancelled"}


def test_detect_stale_events_dry_run_writes_nothing() -> None:
    store = _stale_fixture()

    result = detect_stale_events(store, now=NOW, dry_run=True)

    assert result.detected == 2
    assert result.updated == 0
    assert store.writes == []


def test_detect_stale_events_is_idempotent() -> None:
    store = _stale_fixture()
    detect_stale_events(store, now=NOW)

    second = detect_stale_events(store, now=NOW)

    assert second.detected == 0
    assert second.updated == 0


def test_detect_stale_events_respects_threshold() -> None:
    store = _stale_fixture()

    result = detect_stale_events(store, now=NOW, stale_days=5)

    assert [event.name for event in result.events] == ["Never Confirmed"]


def test_is_stale_boundary_is_exclusive() -> None:
    event = make_event("Boundary", FUTURE, last_seen_in_feed=NOW - timedelta(days=3))

    assert not is_stale(event, now=NOW, stale_days=3)
    assert is_stale(
        event.with_changes(last_seen_in_feed=NOW - timedelta(days=3, seconds=1)),
        now=NOW,
        stale_days=3,
    )


def _rescheduled_fixture() -> FakeEventStore:
    return FakeEventStore(
        [
            make_event(
                "Unemployment Claims",
                datetime(2026, 2, 19, 13, 30, tzinfo=UTC),
                event_id="weekly",
                rescheduled_from=datetime(2026, 2, 12, 13, 30, tzinfo=UTC),
                original_scheduled_at=datetime(2026, 2, 12, 13, 30, tzinfo=UTC),
            ),
            make_event(
                "FOMC Meeting Minutes",
                datetime(2026, 3, 9, 19, 0, tzinfo=UTC),
                event_id="genuine",
                rescheduled_from=datetime(2026, 3, 4, 19, 0, tzinfo=UTC),
                original_scheduled_at=datetime(2026, 3, 4, 19, 0, tzinfo=UTC),
            ),
            make_event(
                "Crude Oil Inventories",
                datetime(2026, 3, 25, 15, 30, tzinfo=UTC),
                event_id="four-weeks",
                rescheduled_from=datetime(2026, 2, 25, 15, 30, tzinfo=UTC),
                original_scheduled_at=datetime(2026, 2, 18, 15, 30, tzinfo=UTC),
            ),
            make_event("Retail Sales m/m", datetime(2026, 3, 13, 13, 30, tzinfo=UTC)),
        ]
    )


def test_repair_weekly_reschedules_clears_false_positives() -> None:
    store = _rescheduled_fixture()

    result = repair_weekly_reschedules(store, now=NOW)

    assert result.scanned == 3
    assert result.detected == 2
    assert result.repaired == 2
    weekly = store.items["weekly"]
    assert weekly.rescheduled_from is None
    assert weekly.original_scheduled_at is None
    four_weeks = store.items["four-weeks"]
    assert four_weeks.rescheduled_from is None
    assert four_weeks.original_scheduled_at == datetime(2026, 2, 18, 15, 30, tzinfo=UTC)
    genuine = store.items["genuine"]
    assert genuine.rescheduled_from == datetime(2026, 3, 4, 19, 0, tzinfo=UTC)


def test_repair_weekly_reschedules_dry_run_and_rerun() -> None:
    store = _rescheduled_fixture()

    dry = repair_weekly_reschedules(store, dry_run=True, now=NOW)
    assert (dry.detected, dry.repaired) == (2, 0)
    assert store.writes == []

    repair_weekly_reschedules(store, now=NOW)
    rerun = repair_weekly_reschedules(store, now=NOW)

    assert rerun.scanned == 1
    assert rerun.detected == 0
