from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest

from econcal.domain.model import EventStatus, Provider, require_complete
from econcal.domain.reconciliation import (
    describe_transition,
    is_reinstatement,
    merge_provider_event,
)
from tests.support.events import make_record

if TYPE_CHECKING:
    from econcal.domain.model import CompleteRecord

AT = datetime(2026, 2, 6, 13, 30, tzinfo=UTC)
NOW = datetime(2026, 2, 5, 9, 0, tzinfo=UTC)
LATER = NOW + timedelta(hours=1)


def _nfs(
    name: str = "Non-Farm Employment Change", at: datetime = AT, **kwargs: Any
) -> CompleteRecord:
    return require_complete(make_record(name, at, **kwargs))


def _jblanked(
    name: str = "Non-Farm Employment Change",
    at: datetime = AT,
    *,
    provider: str = Provider.JBLANKED_FF,
    **kwargs: Any,
) -> CompleteRecord:
    status = EventStatus.RELEASED if kwargs.get("actual") else EventStatus.SCHEDULED
    kwargs.setdefault("status", status)
    return require_complete(make_record(name, at, provider=provider, **kwargs))


def test_first_sighting_seeds_event() -> None:
    event = merge_provider_event(
        None, _nfs(forecast="70K", impact="High"), event_id="evt-1", now=NOW
    )

    assert event.event_id == "evt-1"
    assert event.name == "Non-Farm Employment Change"
    assert event.normalized_name == "non-farm employment change"
    assert event.currency == "USD"
    assert event.scheduled_at == AT
    assert event.original_scheduled_at == AT
    assert event.status is EventStatus.SCHEDULED
    assert event.created_by == Provider.NFS
    assert event.timezone_source == Provider.NFS
    assert event.forecast == "70K"
    assert event.impact == "High"
    assert event.winner_source == Provider.NFS
    assert event.quality_score == 100
    assert event.last_seen_in_feed == NOW
    assert event.created_at == NOW
    assert set(event.sources) == {Provider.NFS}


def test_merge_is_idempotent() -> None:
    incoming = _nfs(forecast="70K", previous="256K")
    first = merge_provider_event(None, incoming, event_id="evt-1", now=NOW)

    second = merge_provider_event(first, incoming, event_id="ignored", now=NOW)

    assert second == first


def test_matched_event_keeps_its_id() -> None:
    first = merge_provider_event(None, _nfs(), event_id="evt-1", now=NOW)

    merged = merge_provider_event(first, _jblanked(actual="130K"), event_id="other", now=LATER)

    assert merged.event_id == "evt-1"
    assert merged.created_at == NOW
    assert merged.updated_at == LATER


def test_values_follow_provider_priority() -> None:
    event = merge_provider_event(None, _jblanked(forecast="1.0"), event_id="evt-1", now=NOW)
    assert event.forecast == "1.0"
    assert event.winner_source == Provider.JBLANKED_FF

    event = merge_provider_event(event, _nfs(forecast="2.0"), event_id="evt-1", now=NOW)
    assert event.forecast == "2.0"
    assert event.winner_source == Provider.NFS

    event = merge_provider_event(
        event,
        _jblanked(forecast="3.0", provider=Provider.JBLANKED_MT),
        event_id="evt-1",
        now=NOW,
    )
    assert event.forecast == "2.0"
    assert set(event.sources) == {Provider.NFS, Provider.JBLANKED_FF, Provider.JBLANKED_MT}


def test_actual_comes_from_release_provider() -> None:
    event = merge_provider_event(None, _nfs(forecast="70K"), event_id="evt-1", now=NOW)

    merged = merge_provider_event(
        event, _jblanked(actual="130K", forecast="68K"), event_id="evt-1", now=LATER
    )

    assert merged.actual == "130K"
    assert merged.forecast == "70K"
    assert merged.status is EventStatus.RELEASED
    assert merged.winner_source == Provider.JBLANKED_FF
    assert merged.quality_score == 95


def test_source_values_accumulate_across_sightings() -> None:
    event = merge_provider_event(None, _jblanked(actual="130K"), event_id="evt-1", now=NOW)

    event = merge_provider_event(event, _jblanked(previous="256K"), event_id="evt-1", now=LATER)

    parsed = event.sources[Provider.JBLANKED_FF].parsed
    assert parsed.actual == "130K"
    assert parsed.previous == "256K"
    assert event.actual == "130K"


def test_status_never_regresses() -> None:
    released = merge_provider_event(None, _jblanked(actual="130K"), event_id="evt-1", now=NOW)
    assert released.status is EventStatus.RELEASED

    merged = merge_provider_event(released, _nfs(), event_id="evt-1", now=LATER)

    assert merged.status is EventStatus.RELEASED


def test_cancelled_event_is_reinstated_by_schedule_provider() -> None:
    cancelled = merge_provider_event(
        None, _nfs(forecast="70K", previous="256K"), event_id="evt-1", now=NOW
    ).with_changes(status=EventStatus.CANCELLED)
    incoming = _nfs(forecast="70K", previous="256K")

    assert is_reinstatement(cancelled, incoming.record)
    merged = merge_provider_event(cancelled, incoming, event_id="evt-1", now=LATER)

    assert merged.status is EventStatus.SCHEDULED
    assert merged.last_seen_in_feed == LATER
    for name in ("forecast", "previous", "actual", "scheduled_at", "name", "currency"):
        assert getattr(merged, name) == getattr(cancelled, name), name
    transition = describe_transition(cancelled, merged)
    assert transition.reinstated
    assert not transition.created


def test_cancelled_event_is_reinstated_by_jblanked_row_without_actual() -> None:
    cancelled = merge_provider_event(
        None, _nfs("Unemployment Claims", forecast="225K"), event_id="evt-1", now=NOW
    ).with_changes(status=EventStatus.CANCELLED)
    incoming = _jblanked("Unemployment Claims", forecast="225K")

    assert incoming.record.status is EventStatus.SCHEDULED
    merged = merge_provider_event(cancelled, incoming, event_id="evt-1", now=LATER)

    assert merged.status is EventStatus.SCHEDULED
    assert merged.scheduled_at == cancelled.scheduled_at
    assert merged.forecast == "225K"
    assert describe_transition(cancelled, merged).reinstated


def test_currency_conflict_keeps_existing(caplog: pytest.LogCaptureFixture) -> None:
    event = merge_provider_event(None, _nfs(), event_id="evt-1", now=NOW)

    with caplog.at_level(logging.WARNING):
        merged = merge_provider_event(event, _jblanked(currency="EUR"), event_id="evt-1", now=NOW)

    assert merged.currency == "USD"
    assert "Currency conflict" in caplog.text


def test_missing_currency_is_filled() -> None:
    event = merge_provider_event(None, _jblanked(currency=None), event_id="evt-1", now=NOW)
    assert event.currency is None

    merged = merge_provider_event(event, _nfs(currency="usd"), event_id="evt-1", now=NOW)

    assert merged.currency == "USD"


def test_small_drift_adopts_higher_priority_clock() -> None:
    event = merge_provider_event(None, _jblanked(), event_id="evt-1", now=NOW)
    shifted = AT + timedelta(minutes=3)

    merged = merge_provider_event(event, _nfs(at=shifted), event_id="evt-1", now=NOW)

    assert merged.scheduled_at == shifted
    assert merged.timezone_source == Provider.NFS
    assert merged.rescheduled_from is None


def test_small_drift_from_lower_priority_is_ignored() -> None:
    event = merge_provider_event(None, _nfs(), event_id="evt-1", now=NOW)

    merged = merge_provider_event(
        event, _jblanked(at=AT + timedelta(minutes=3)), event_id="evt-1", now=NOW
    )

    assert merged.scheduled_at == AT
    assert merged.timezone_source == Provider.NFS


def test_reschedule_moves_event_and_remembers_origin() -> None:
    original = datetime(2026, 3, 4, 19, 0, tzinfo=UTC)
    moved = datetime(2026, 3, 9, 19, 0, tzinfo=UTC)
    event = merge_provider_event(
        None, _nfs("FOMC Meeting Minutes", original), event_id="evt-1", now=NOW
    )

    merged = merge_provider_event(
        event,
        _nfs("FOMC Meeting Minutes", moved),
        event_id="evt-1",
        is_reschedule=True,
        now=LATER,
    )

    assert merged.scheduled_at == moved
    assert merged.rescheduled_from == original
    assert merged.original_scheduled_at == original
    transition = describe_transition(event, merged)
    assert transition.rescheduled
    assert transition.changed_schedule
    assert transition.previous_scheduled_at == original


def test_large_drift_without_reschedule_flag_keeps_schedule() -> None:
    event = merge_provider_event(None, _nfs(), event_id="evt-1", now=NOW)

    merged = merge_provider_event(
        event, _nfs(at=AT + timedelta(hours=2)), event_id="evt-1", now=NOW
    )

    assert merged.scheduled_at == AT
    assert merged.rescheduled_from is None


def test_display_name_follows_priority() -> None:
    event = merge_provider_event(
        None, _jblanked("Nonfarm Payrolls"), event_id="evt-1", now=NOW
    )
    assert event.name == "Nonfarm Payrolls"

    merged = merge_provider_event(
        event, _nfs("Non-Farm Employment Change"), event_id="evt-1", now=NOW
    )

    assert merged.name == "Non-Farm Employment Change"
    assert merged.normalized_name == "nonfarm payrolls"


def test_describe_transition_for_new_event() -> None:
    event = merge_provider_event(None, _nfs(), event_id="evt-1", now=NOW)

    transition = describe_transition(None, event)

    assert transition.created
    assert transition.event_id == "evt-1"
    assert not transition.changed_schedule
