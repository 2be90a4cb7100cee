"""Batch passes over stored canonical events.

- ``detect_stale_events`` cancels future events the authoritative schedule
  provider stopped confirming.
- ``repair_weekly_reschedules`` clears ``rescheduled_from`` markers that were
  written for what is really the next occurrence of a weekly series.

Both passes are idempotent and support a dry run that reports without writing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from econcal.domain.model import EventStatus, Provider
from econcal.domain.ports.persistence import DEFAULT_CHUNK_SIZE, UpsertEntry

from .resolve import weekly_cadence_weeks

if TYPE_CHECKING:
    from econcal.domain.model import CanonicalEvent, ProviderName
    from econcal.domain.ports import CanonicalEventStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StaleDetectionResult:
    detected: int
    updated: int
    events: tuple[CanonicalEvent, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class RepairResult:
    scanned: int
    detected: int
    repaired: int
    events: tuple[CanonicalEvent, ...] = field(default_factory=tuple)


def is_stale(
    event: CanonicalEvent,
    *,
    now: datetime,
    stale_days: int,
    authoritative_provider: ProviderName = Provider.NFS,
) -> bool:
    """Future, not yet cancelled, known to the authoritative provider and unseen for too long."""

    if event.scheduled_at <= now or event.status is EventStatus.CANCELLED:
        return False
    if not event.has_source(authoritative_provider):
        return False
    if event.last_seen_in_feed is None:
        return True
    return event.last_seen_in_feed < now - timedelta(days=stale_days)


def detect_stale_events(  # noqa: PLR0913
    store: CanonicalEventStore,
    *,
    stale_days: int = 3,
    authoritative_provider: ProviderName = Provider.NFS,
    dry_run: bool = False,
    now: datetime | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> StaleDetectionResult:
    """Mark stale future events as cancelled.

    Run right after an authoritative schedule sync so that "not seen" means
    "not in the feed this cycle". The returned events carry the cancelled
    state so callers can emit audits for them.
    """

    moment = now or datetime.now(tz=UTC)
    stale = [
        event.with_changes(status=EventStatus.CANCELLED, updated_at=moment)
        for event in store.query_scheduled_after(moment)
        if is_stale(
            event,
            now=moment,
            stale_days=stale_days,
            authoritative_provider=authoritative_provider,
        )
    ]
    log.info("Stale detection found %d event(s) unseen for %d+ days", len(stale), stale_days)
    if dry_run or not stale:
        return StaleDetectionResult(detected=len(stale), updated=0, events=tuple(stale))

    written = store.batch_upsert(
        [UpsertEntry(event_id=event.event_id, record=event) for event in stale],
        chunk_size=chunk_size,
    )
    return StaleDetectionResult(detected=len(stale), updated=written, events=tuple(stale))


def repair_weekly_reschedules(  # noqa: PLR0913
    store: CanonicalEventStore,
    *,
    dry_run: bool = False,
    max_weeks: int = 8,
    tolerance: timedelta = timedelta(days=1),
    now: datetime | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RepairResult:
    """Clear reschedule markers whose offset is a whole number of weeks."""

    moment = now or datetime.now(tz=UTC)
    candidates = store.query_rescheduled()
    entries: list[UpsertEntry] = []
    for event in candidates:
        entry = _repair_entry(event, max_weeks=max_weeks, tolerance=tolerance, now=moment)
        if entry is not None:
            entries.append(entry)

    repaired_events = tuple(entry.record for entry in entries)
    log.info(
        "Reschedule repair scanned %d event(s), %d weekly false positive(s)",
        len(candidates),
        len(entries),
    )
    if dry_run or not entries:
        return RepairResult(
            scanned=len(candidates), detected=len(entries), repaired=0, events=repaired_events
        )

    written = store.batch_upsert(entries, chunk_size=chunk_size)
    return RepairResult(
        scanned=len(candidates), detected=len(entries), repaired=written, events=repaired_events
    )


def _repair_entry(
    event: CanonicalEvent,
    *,
    max_weeks: int,
    tolerance: timedelta,
    now: datetime,
) -> UpsertEntry | None:
    if event.rescheduled_from is None:
        return None
    weeks = weekly_cadence_weeks(
        event.scheduled_at - event.rescheduled_from, max_weeks=max_weeks, tolerance=tolerance
    )
    if weeks is None:
        return None

    log.debug(
        "Clearing reschedule of %s (%s): %d week(s) from %s",
        event.event_id,
        event.display_name,
        weeks,
        event.rescheduled_from.isoformat(),
    )
    cleared = {"rescheduled_from"}
    changes: dict[str, object] = {"rescheduled_from": None, "updated_at": now}
    if event.original_scheduled_at == event.rescheduled_from:
        cleared.add("original_scheduled_at")
        changes["original_scheduled_at"] = None
    return UpsertEntry(
        event_id=event.event_id,
        record=event.with_changes(**changes),
        clear=frozenset(cleared),
    )
