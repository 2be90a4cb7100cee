"""Application services that feed provider records through the reconciliation engine."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from econcal.domain.audit import LoggingAuditSink
from econcal.domain.event_store import StagedEventStore
from econcal.domain.model import IncompleteRecordError, Provider, require_complete
from econcal.domain.model import audit as audit_events
from econcal.domain.ports import ProviderUnavailableError, UpsertEntry
from econcal.domain.reconciliation import (
    DEFAULT_SETTINGS,
    IdentityResolver,
    compute_event_id,
    describe_transition,
    detect_stale_events,
    merge_provider_event,
    normalize_currency,
    normalize_event_name,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from econcal.domain.model import CanonicalEvent, CompleteRecord, ProviderRecord
    from econcal.domain.ports import AuditSink, CanonicalEventStore, ProviderFetcher
    from econcal.domain.reconciliation import (
        EventTransition,
        IdentityMatch,
        ReconciliationSettings,
    )
    from econcal.domain.time_windows import TimeWindow

log = getLogger(__name__)

type MatchStrategy = Callable[[IdentityResolver, CompleteRecord], IdentityMatch | None]
type IdAssigner = Callable[[CompleteRecord], str | None]
type ExistingGuard = Callable[[CanonicalEvent], str | None]

# Sources a generated event may never override.
PREFERRED_SOURCES: Final[frozenset[str]] = frozenset(
    {Provider.NFS, Provider.JBLANKED_FF, Provider.JBLANKED_MT, Provider.JBLANKED_FXSTREET}
)


@dataclass(frozen=True, slots=True)
class RecordDiagnostic:
    """Why one provider record was skipped or failed."""

    index: int
    provider: str
    name: str | None
    reason: str


@dataclass(slots=True)
class SyncResult:
    """Aggregate outcome of one sync run."""

    source: str
    processed: int = 0
    created: int = 0
    merged: int = 0
    skipped: int = 0
    errors: int = 0
    rescheduled: int = 0
    reinstated: int = 0
    cancelled: int = 0
    written: int = 0
    diagnostics: list[RecordDiagnostic] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return self.merged


def sync_schedule_events(  # noqa: PLR0913
    *,
    fetcher: ProviderFetcher,
    store: CanonicalEventStore,
    audit_sink: AuditSink | None = None,
    settings: ReconciliationSettings = DEFAULT_SETTINGS,
    detect_stale: bool = True,
    now: datetime | None = None,
) -> SyncResult:
    """Reconcile the authoritative weekly schedule.

    Records resolve by narrow match, then by wide identity match (which is
    where reschedules are recognized); anything unmatched becomes a new event
    with a deterministic id. Stale detection runs on the same clock once the
    batch is written.
    """

    moment = now or datetime.now(tz=UTC)
    sink = audit_sink or LoggingAuditSink()
    records = _fetch(fetcher, sink=sink, source=fetcher.provider)

    result, transitions = _reconcile_records(
        records,
        source=fetcher.provider,
        store=store,
        settings=settings,
        match=_narrow_then_identity,
        assign_id=_deterministic_id,
        now=moment,
    )
    _emit_transition_audits(sink, transitions)

    if detect_stale:
        stale = detect_stale_events(
            store,
            stale_days=settings.stale_days,
            authoritative_provider=settings.authoritative_provider,
            now=moment,
            chunk_size=settings.chunk_size,
        )
        result.cancelled = stale.updated
        reason = f"Not seen in feed for {settings.stale_days}+ days"
        for event in stale.events:
            sink.emit(
                audit_events.event_cancelled(
                    name=event.display_name, currency=event.currency, reason=reason
                )
            )

    _emit_summary(sink, result, records)
    return result


def sync_actual_events(
    *,
    fetcher: ProviderFetcher,
    store: CanonicalEventStore,
    audit_sink: AuditSink | None = None,
    settings: ReconciliationSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> SyncResult:
    """Merge released values into existing events; never creates events."""

    moment = now or datetime.now(tz=UTC)
    sink = audit_sink or LoggingAuditSink()
    records = _fetch(fetcher, sink=sink, source=fetcher.provider)
    result, transitions = _reconcile_records(
        records,
        source=fetcher.provider,
        store=store,
        settings=settings,
        match=_narrow_then_fallback,
        assign_id=lambda _incoming: None,
        now=moment,
    )
    _emit_transition_audits(sink, transitions)
    _emit_summary(sink, result, records)
    return result


def sync_backfill_events(  # noqa: PLR0913
    *,
    fetcher: ProviderFetcher,
    store: CanonicalEventStore,
    window: TimeWindow,
    audit_sink: AuditSink | None = None,
    settings: ReconciliationSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> SyncResult:
    """Backfill a date range; unmatched records become events with store-issued ids."""

    moment = now or datetime.now(tz=UTC)
    sink = audit_sink or LoggingAuditSink()
    start, end = window.resolve(clock=lambda: moment)
    source = f"{fetcher.provider} backfill"
    log.info("Backfilling %s from %s to %s", fetcher.provider, start.isoformat(), end.isoformat())
    records = _fetch(fetcher, sink=sink, source=source, start=start, end=end)
    result, transitions = _reconcile_records(
        records,
        source=source,
        store=store,
        settings=settings,
        match=_narrow_then_fallback,
        assign_id=lambda _incoming: store.new_id(),
        now=moment,
    )
    _emit_transition_audits(sink, transitions)
    _emit_summary(sink, result, records)
    return result


def sync_generated_events(
    records: Sequence[ProviderRecord],
    *,
    store: CanonicalEventStore,
    audit_sink: AuditSink | None = None,
    settings: ReconciliationSettings = DEFAULT_SETTINGS,
    now: datetime | None = None,
) -> SyncResult:
    """Merge uploaded generated events as a fallback source.

    An event already confirmed by a preferred provider is left alone and the
    record counts as skipped. Unmatched records become events with a
    deterministic id.
    """

    moment = now or datetime.now(tz=UTC)
    sink = audit_sink or LoggingAuditSink()
    log.info("Merging %d generated record(s)", len(records))
    result, transitions = _reconcile_records(
        records,
        source=Provider.GPT,
        store=store,
        settings=settings,
        match=_narrow_only,
        assign_id=_deterministic_id,
        guard=_preferred_source_present,
        now=moment,
    )
    _emit_transition_audits(sink, transitions)
    _emit_summary(sink, result, records)
    return result


def _deterministic_id(incoming: CompleteRecord) -> str:
    return compute_event_id(
        currency=normalize_currency(incoming.record.currency),
        normalized_name=normalize_event_name(incoming.name),
        scheduled_at=incoming.scheduled_at,
    )


def _preferred_source_present(event: CanonicalEvent) -> str | None:
    present = sorted(PREFERRED_SOURCES.intersection(event.sources))
    if present:
        return f"already sourced from {', '.join(present)}"
    return None


def _narrow_only(resolver: IdentityResolver, incoming: CompleteRecord) -> IdentityMatch | None:
    return resolver.find_narrow_match(incoming)


def _narrow_then_identity(
    resolver: IdentityResolver, incoming: CompleteRecord
) -> IdentityMatch | None:
    return resolver.find_narrow_match(incoming) or resolver.find_identity_match(incoming)


def _narrow_then_fallback(
    resolver: IdentityResolver, incoming: CompleteRecord
) -> IdentityMatch | None:
    return resolver.find_narrow_match(incoming) or resolver.find_fallback_match(incoming)


def _fetch(
    fetcher: ProviderFetcher,
    *,
    sink: AuditSink,
    source: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Sequence[ProviderRecord]:
    try:
        records = fetcher(start=start, end=end)
    except ProviderUnavailableError as exc:
        sink.emit(audit_events.sync_failed(source=source, error=str(exc)))
        raise
    log.info("Fetched %d record(s) from %s", len(records), fetcher.provider)
    return records


def _reconcile_records(  # noqa: PLR0913
    records: Sequence[ProviderRecord],
    *,
    source: str,
    store: CanonicalEventStore,
    settings: ReconciliationSettings,
    match: MatchStrategy,
    assign_id: IdAssigner,
    now: datetime,
    guard: ExistingGuard | None = None,
) -> tuple[SyncResult, list[EventTransition]]:
    """Resolve and merge records in provider order, then write the batch.

    Store reads and the final write propagate their errors. A record that
    fails validation or merging is counted and skipped.
    """

    staged = StagedEventStore(store)
    resolver = IdentityResolver(staged, settings)
    result = SyncResult(source=source)
    transitions: list[EventTransition] = []

    for index, record in enumerate(records):
        result.processed += 1
        try:
            incoming = require_complete(record)
        except IncompleteRecordError as exc:
            result.skipped += 1
            result.diagnostics.append(_diagnostic(index, record, str(exc)))
            log.warning("Skipping record %d from %s: %s", index, record.provider, exc)
            continue

        found = match(resolver, incoming)
        existing: CanonicalEvent | None
        if found is not None:
            existing = found.event
            event_id = existing.event_id
        else:
            candidate_id = assign_id(incoming)
            if candidate_id is None:
                result.skipped += 1
                result.diagnostics.append(_diagnostic(index, record, "no base event"))
                log.debug("No base event for %s %r", record.provider, incoming.name)
                continue
            event_id = candidate_id
            existing = staged.get_by_id(event_id)

        if existing is not None and guard is not None:
            reason = guard(existing)
            if reason is not None:
                result.skipped += 1
                result.diagnostics.append(_diagnostic(index, record, reason))
                log.debug("Skipping %s %r: %s", record.provider, incoming.name, reason)
                continue

        try:
            merged = merge_provider_event(
                existing,
                incoming,
                event_id=event_id,
                is_reschedule=found is not None and found.is_reschedule,
                priority=settings.priority,
                drift_tolerance=settings.drift_tolerance,
                now=now,
            )
        except Exception as exc:  # noqa: BLE001
            result.errors += 1
            result.diagnostics.append(_diagnostic(index, record, f"merge failed: {exc}"))
            log.exception("Failed to merge record %d from %s", index, record.provider)
            continue

        staged.stage(UpsertEntry(event_id=merged.event_id, record=merged))
        transition = describe_transition(existing, merged)
        transitions.append(transition)
        if transition.created:
            result.created += 1
        else:
            result.merged += 1
        if transition.rescheduled:
            result.rescheduled += 1
        if transition.reinstated:
            result.reinstated += 1

    result.written = staged.flush(chunk_size=settings.chunk_size)
    log.info(
        "%s: processed=%d created=%d merged=%d skipped=%d errors=%d written=%d",
        source,
        result.processed,
        result.created,
        result.merged,
        result.skipped,
        result.errors,
        result.written,
    )
    return result, transitions


def _diagnostic(index: int, record: ProviderRecord, reason: str) -> RecordDiagnostic:
    return RecordDiagnostic(
        index=index, provider=str(record.provider), name=record.name, reason=reason
    )


def _emit_transition_audits(sink: AuditSink, transitions: Sequence[EventTransition]) -> None:
    for transition in transitions:
        event = transition.event
        if transition.created:
            sink.emit(
                audit_events.event_created(
                    event_id=event.event_id,
                    name=event.display_name,
                    currency=event.currency,
                    scheduled_at=event.scheduled_at,
                    provider=event.created_by or "unknown",
                )
            )
        if transition.rescheduled and transition.previous_scheduled_at is not None:
            sink.emit(
                audit_events.event_rescheduled(
                    name=event.display_name,
                    currency=event.currency,
                    original=transition.previous_scheduled_at,
                    new=transition.scheduled_at,
                )
            )
        if transition.reinstated:
            sink.emit(
                audit_events.event_reinstated(name=event.display_name, currency=event.currency)
            )


def _emit_summary(sink: AuditSink, result: SyncResult, records: Sequence[ProviderRecord]) -> None:
    currencies = sorted(
        {code for record in records if (code := normalize_currency(record.currency)) is not None}
    )
    sink.emit(
        audit_events.sync_completed(
            source=result.source,
            processed=result.processed,
            created=result.created,
            updated=result.merged,
            rescheduled=result.rescheduled,
            cancelled=result.cancelled,
            currencies=tuple(currencies),
        )
    )
