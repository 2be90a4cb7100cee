"""Merge one provider sighting into the canonical event it resolved to.

Responsibilities of this stage:
- seed a canonical record for a first sighting
- apply each field group's precedence rule as its own builder
- keep every provider's contribution in ``sources``

Out of scope for this stage:
- identity lookup (see ``resolve``)
- persistence and audit emission

The merge is pure: the same ``existing``, ``incoming`` and ``now`` always
produce the same record, and re-applying a sighting is a no-op apart from
the timestamps derived from ``now``.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from econcal.domain.model import CanonicalEvent, EventStatus, SourceContribution

from .contracts import EventTransition
from .normalize import normalize_currency, normalize_event_name
from .priority import DEFAULT_PRIORITY

if TYPE_CHECKING:
    from econcal.domain.model import CompleteRecord, ProviderName, ProviderRecord

    from .priority import ProviderPriority

log = getLogger(__name__)

DEFAULT_DRIFT_TOLERANCE = timedelta(minutes=5)

_PRIORITIZED_VALUES = ("actual", "forecast", "previous")


def merge_provider_event(  # noqa: PLR0913
    existing: CanonicalEvent | None,
    incoming: CompleteRecord,
    *,
    event_id: str,
    is_reschedule: bool = False,
    priority: ProviderPriority = DEFAULT_PRIORITY,
    drift_tolerance: timedelta = DEFAULT_DRIFT_TOLERANCE,
    now: datetime | None = None,
) -> CanonicalEvent:
    """Return the next canonical state after ``incoming`` was seen.

    ``event_id`` is only used when ``existing`` is ``None``; a matched record
    keeps its id for life.
    """

    moment = now or datetime.now(tz=UTC)
    record = incoming.record

    event = existing if existing is not None else _seed(incoming, event_id=event_id, now=moment)
    event = _reconcile_currency(event, record)
    event = _reconcile_schedule(
        event,
        incoming,
        is_reschedule=is_reschedule,
        priority=priority,
        drift_tolerance=drift_tolerance,
    )
    event = event.with_changes(last_seen_in_feed=moment)
    reinstated = is_reinstatement(existing, record)
    event = _fill_classification(event, incoming)
    event = _remember_source(event, incoming, now=moment)
    event = _progress_status(event, record, reinstated=reinstated)
    event = _select_values(event, priority=priority, incoming_provider=str(record.provider))
    event = _select_display_name(event, priority=priority)
    return event.with_changes(updated_at=moment)


def is_reinstatement(existing: CanonicalEvent | None, record: ProviderRecord) -> bool:
    """A cancelled record that a provider reports as scheduled again."""

    return (
        existing is not None
        and existing.status is EventStatus.CANCELLED
        and record.status is EventStatus.SCHEDULED
    )


def describe_transition(before: CanonicalEvent | None, after: CanonicalEvent) -> EventTransition:
    """Summarize what a merge changed, for callers that emit audit events."""

    if before is None:
        return EventTransition(
            event=after,
            created=True,
            rescheduled=False,
            reinstated=False,
            previous_scheduled_at=None,
            scheduled_at=after.scheduled_at,
            previous_status=None,
            status=after.status,
        )
    rescheduled = (
        after.scheduled_at != before.scheduled_at
        and after.rescheduled_from is not None
        and after.rescheduled_from == before.scheduled_at
    )
    return EventTransition(
        event=after,
        created=False,
        rescheduled=rescheduled,
        reinstated=(
            before.status is EventStatus.CANCELLED and after.status is EventStatus.SCHEDULED
        ),
        previous_scheduled_at=before.scheduled_at,
        scheduled_at=after.scheduled_at,
        previous_status=before.status,
        status=after.status,
    )


def _seed(incoming: CompleteRecord, *, event_id: str, now: datetime) -> CanonicalEvent:
    record = incoming.record
    provider = str(record.provider)
    return CanonicalEvent(
        event_id=event_id,
        name=incoming.name,
        normalized_name=normalize_event_name(incoming.name),
        currency=normalize_currency(record.currency),
        scheduled_at=incoming.scheduled_at,
        original_scheduled_at=incoming.scheduled_at,
        timezone_source=provider,
        created_by=provider,
        status=EventStatus.SCHEDULED,
        created_at=now,
        updated_at=now,
    )


def _reconcile_currency(event: CanonicalEvent, record: ProviderRecord) -> CanonicalEvent:
    currency = normalize_currency(record.currency)
    if currency is None or currency == event.currency:
        return event
    if event.currency is None:
        return event.with_changes(currency=currency)
    log.warning(
        "Currency conflict on %s (%s): keeping %s, %s reported %s",
        event.event_id,
        event.display_name,
        event.currency,
        record.provider,
        currency,
    )
    return event


def _reconcile_schedule(
    event: CanonicalEvent,
    incoming: CompleteRecord,
    *,
    is_reschedule: bool,
    priority: ProviderPriority,
    drift_tolerance: timedelta,
) -> CanonicalEvent:
    provider = str(incoming.record.provider)
    drift = abs(incoming.scheduled_at - event.scheduled_at)
    if drift == timedelta(0):
        return event

    if drift <= drift_tolerance:
        if priority.outranks(provider, event.timezone_source):
            return event.with_changes(scheduled_at=incoming.scheduled_at, timezone_source=provider)
        return event

    if not is_reschedule:
        return event

    return event.with_changes(
        rescheduled_from=event.scheduled_at,
        scheduled_at=incoming.scheduled_at,
        original_scheduled_at=event.original_scheduled_at or event.scheduled_at,
        timezone_source=provider,
    )


def _fill_classification(event: CanonicalEvent, incoming: CompleteRecord) -> CanonicalEvent:
    record = incoming.record
    changes: dict[str, object] = {}
    if not event.normalized_name:
        changes["normalized_name"] = normalize_event_name(incoming.name)
    if not event.category and record.category:
        changes["category"] = record.category
    if not event.impact and record.impact:
        changes["impact"] = record.impact
    return event.with_changes(**changes) if changes else event


def _remember_source(
    event: CanonicalEvent, incoming: CompleteRecord, *, now: datetime
) -> CanonicalEvent:
    record = incoming.record
    provider = str(record.provider)
    previous = event.sources.get(provider)
    parsed = previous.parsed.overlay(record.parsed) if previous is not None else record.parsed
    contribution = SourceContribution(
        original_name=incoming.name,
        last_seen_at=now,
        raw_payload=record.raw_payload,
        parsed=parsed,
    )
    return event.with_changes(sources={**event.sources, provider: contribution})


def _progress_status(
    event: CanonicalEvent, record: ProviderRecord, *, reinstated: bool
) -> CanonicalEvent:
    if reinstated:
        return event.with_changes(status=EventStatus.SCHEDULED)
    if record.status is None or record.status.rank <= event.status.rank:
        return event
    return event.with_changes(status=record.status)


def _select_values(
    event: CanonicalEvent,
    *,
    priority: ProviderPriority,
    incoming_provider: ProviderName,
) -> CanonicalEvent:
    ordered = priority.ordered(event.sources)
    changes: dict[str, object] = {}
    winners: list[ProviderName] = []
    for field_name in _PRIORITIZED_VALUES:
        for provider in ordered:
            value = getattr(event.sources[provider].parsed, field_name)
            if value is not None:
                changes[field_name] = value
                winners.append(provider)
                break

    winner = next(iter(winners), None) or event.winner_source or incoming_provider
    changes["winner_source"] = winner
    changes["quality_score"] = priority.quality_for(winner)
    return event.with_changes(**changes)


def _select_display_name(event: CanonicalEvent, *, priority: ProviderPriority) -> CanonicalEvent:
    for provider in priority.ordered(event.sources):
        name = event.sources[provider].original_name.strip()
        if name:
            return event.with_changes(name=name) if name != event.name else event
    fallback = event.name or event.normalized_name
    return event.with_changes(name=fallback) if fallback != event.name else event
