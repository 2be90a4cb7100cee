"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from econcal.adapters.generated import parse_generated_events
from econcal.adapters.jblanked import JBlankedFetcher
from econcal.adapters.nfs import NfsFetcher
from econcal.adapters.sqlalchemy import ActivityLogAuditSink, SqlAlchemyEventUnitOfWork
from econcal.adapters.sqlalchemy.unit_of_work import is_started, startup
from econcal.config import get_jblanked_config, get_reconciliation_config
from econcal.domain.audit import CompositeAuditSink, LoggingAuditSink
from econcal.domain.data_integration import (
    SyncResult,
    sync_actual_events,
    sync_backfill_events,
    sync_generated_events,
    sync_schedule_events,
)
from econcal.domain.event_store import UnitOfWorkEventStore
from econcal.domain.model import Provider
from econcal.domain.model import audit as audit_events
from econcal.domain.ports import EventUnitOfWork, ProviderPayloadError, ProviderUnavailableError
from econcal.domain.reconciliation import (
    RepairResult,
    StaleDetectionResult,
    detect_stale_events,
    repair_weekly_reschedules,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from econcal.domain.ports import AuditSink, ProviderFetcher
    from econcal.domain.reconciliation import ReconciliationSettings
    from econcal.domain.time_windows import TimeWindow

UnitOfWorkFactory = Callable[[], EventUnitOfWork]
FetcherFactory = Callable[[str], "ProviderFetcher"]

log = getLogger(__name__)


def _resolve_unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyEventUnitOfWork


def _audit_sink(unit_of_work_factory: UnitOfWorkFactory) -> AuditSink:
    return CompositeAuditSink((LoggingAuditSink(), ActivityLogAuditSink(unit_of_work_factory)))


def sync_nfs_schedule(
    *,
    fetcher: ProviderFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
    detect_stale: bool = True,
) -> SyncResult:
    """Reconcile this week's NFS schedule, then cancel events NFS stopped listing."""

    factory = _resolve_unit_of_work(unit_of_work_factory)
    effective_settings = settings or get_reconciliation_config()
    log.info("Starting NFS schedule sync: detect_stale=%s", detect_stale)
    result = sync_schedule_events(
        fetcher=fetcher or NfsFetcher(),
        store=UnitOfWorkEventStore(factory),
        audit_sink=_audit_sink(factory),
        settings=effective_settings,
        detect_stale=detect_stale,
    )
    log.info(
        "Finished NFS schedule sync: created=%s, merged=%s, rescheduled=%s, cancelled=%s",
        result.created,
        result.merged,
        result.rescheduled,
        result.cancelled,
    )
    return result


def _jblanked_fetcher(provider: str) -> ProviderFetcher:
    return JBlankedFetcher(provider=provider)


def sync_jblanked_actuals(
    *,
    providers: Sequence[str] | None = None,
    fetcher_factory: FetcherFactory | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
) -> list[SyncResult]:
    """Merge today's released values from each JBlanked feed into existing events.

    A feed that is unavailable is logged and skipped; the run fails only when
    every feed failed.
    """

    factory = _resolve_unit_of_work(unit_of_work_factory)
    effective_settings = settings or get_reconciliation_config()
    selected = tuple(providers) if providers else get_jblanked_config().providers
    build_fetcher = fetcher_factory or _jblanked_fetcher
    store = UnitOfWorkEventStore(factory)
    sink = _audit_sink(factory)

    results: list[SyncResult] = []
    failures: list[ProviderUnavailableError] = []
    for provider in selected:
        log.info("Starting %s actuals sync", provider)
        try:
            result = sync_actual_events(
                fetcher=build_fetcher(provider),
                store=store,
                audit_sink=sink,
                settings=effective_settings,
            )
        except ProviderUnavailableError as exc:
            log.error("%s actuals sync failed: %s", provider, exc)  # noqa: TRY400
            failures.append(exc)
            continue
        log.info(
            "Finished %s actuals sync: merged=%s, skipped=%s",
            provider,
            result.merged,
            result.skipped,
        )
        results.append(result)

    if failures and not results:
        raise failures[-1]
    return results


def backfill_jblanked_range(
    *,
    window: TimeWindow,
    fetcher: ProviderFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
) -> SyncResult:
    """Import a historical Forex Factory range from JBlanked."""

    factory = _resolve_unit_of_work(unit_of_work_factory)
    result = sync_backfill_events(
        fetcher=fetcher or JBlankedFetcher(),
        store=UnitOfWorkEventStore(factory),
        window=window,
        audit_sink=_audit_sink(factory),
        settings=settings or get_reconciliation_config(),
    )
    log.info(
        "Finished backfill: created=%s, merged=%s, skipped=%s",
        result.created,
        result.merged,
        result.skipped,
    )
    return result


def import_generated_events(
    *,
    path: Path,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
) -> SyncResult:
    """Merge a JSON file of generated events without overriding preferred sources."""

    try:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        message = f"{path} is not valid JSON: {exc}"
        raise ProviderPayloadError(message, provider=Provider.GPT) from exc
    records = parse_generated_events(payload)

    factory = _resolve_unit_of_work(unit_of_work_factory)
    result = sync_generated_events(
        records,
        store=UnitOfWorkEventStore(factory),
        audit_sink=_audit_sink(factory),
        settings=settings or get_reconciliation_config(),
    )
    log.info(
        "Finished generated import: created=%s, merged=%s, skipped=%s, errors=%s",
        result.created,
        result.merged,
        result.skipped,
        result.errors,
    )
    return result


def detect_stale(
    *,
    dry_run: bool = False,
    stale_days: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
) -> StaleDetectionResult:
    """Run stale detection on its own, outside an NFS sync."""

    factory = _resolve_unit_of_work(unit_of_work_factory)
    effective_settings = settings or get_reconciliation_config()
    days = effective_settings.stale_days if stale_days is None else stale_days
    result = detect_stale_events(
        UnitOfWorkEventStore(factory),
        stale_days=days,
        authoritative_provider=effective_settings.authoritative_provider,
        dry_run=dry_run,
        chunk_size=effective_settings.chunk_size,
    )
    if not dry_run:
        sink = _audit_sink(factory)
        reason = f"Not seen in feed for {days}+ days"
        for event in result.events:
            sink.emit(
                audit_events.event_cancelled(
                    name=event.display_name, currency=event.currency, reason=reason
                )
            )
    log.info(
        "Stale detection finished: detected=%s, updated=%s, dry_run=%s",
        result.detected,
        result.updated,
        dry_run,
    )
    return result


def repair_reschedules(
    *,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: ReconciliationSettings | None = None,
) -> RepairResult:
    """Clear reschedule markers that are really weekly recurrences."""

    factory = _resolve_unit_of_work(unit_of_work_factory)
    effective_settings = settings or get_reconciliation_config()
    cadence = effective_settings.weekly
    result = repair_weekly_reschedules(
        UnitOfWorkEventStore(factory),
        dry_run=dry_run,
        max_weeks=cadence.repair_max_weeks,
        tolerance=cadence.tolerance,
        chunk_size=effective_settings.chunk_size,
    )
    log.info(
        "Reschedule repair finished: scanned=%s, detected=%s, repaired=%s, dry_run=%s",
        result.scanned,
        result.detected,
        result.repaired,
        dry_run,
    )
    return result
