"""Audit records emitted by sync callers around engine transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .enums import AuditAction, AuditSeverity

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditEvent:
    """One activity-log entry.

    ``activity_id`` is deterministic so that a re-run of the same sync
    overwrites its previous entry instead of duplicating it.
    """

    action: AuditAction
    title: str
    description: str
    dedupe_key: str
    severity: AuditSeverity = AuditSeverity.INFO
    metadata: Mapping[str, object] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def activity_id(self) -> str:
        return f"{self.action}_{self.dedupe_key}"


def _slug(value: str) -> str:
    return "_".join(value.split())


def event_created(
    *, event_id: str, name: str, currency: str | None, scheduled_at: datetime, provider: str
) -> AuditEvent:
    return AuditEvent(
        action=AuditAction.EVENT_CREATED,
        title=f"{name} created",
        description=(
            f"New event from {provider} at {scheduled_at.isoformat()} ({currency or 'N/A'})"
        ),
        dedupe_key=event_id,
        metadata={
            "eventId": event_id,
            "eventName": name,
            "currency": currency,
            "scheduledAt": scheduled_at.isoformat(),
            "provider": provider,
        },
    )


def event_rescheduled(
    *, name: str, currency: str | None, original: datetime, new: datetime
) -> AuditEvent:
    original_text = original.isoformat()
    new_text = new.isoformat()
    return AuditEvent(
        action=AuditAction.EVENT_RESCHEDULED,
        title=f"{name} rescheduled",
        description=(
            f"Event rescheduled from {original_text} to {new_text} ({currency or 'Unknown'})"
        ),
        dedupe_key=f"{_slug(name)}_{original_text}",
        severity=AuditSeverity.WARNING,
        metadata={
            "eventName": name,
            "originalDate": original_text,
            "newDate": new_text,
            "currency": currency,
        },
    )


def event_cancelled(
    *, name: str, currency: str | None, reason: str = "Not seen in feed for 3+ days"
) -> AuditEvent:
    currency_text = currency or "N/A"
    return AuditEvent(
        action=AuditAction.EVENT_CANCELLED,
        title=f"{name} cancelled",
        description=f"Event marked as cancelled ({currency_text}). {reason}",
        dedupe_key=f"{_slug(name)}_{currency_text}",
        severity=AuditSeverity.WARNING,
        metadata={"eventName": name, "currency": currency, "reason": reason},
    )


def event_reinstated(*, name: str, currency: str | None) -> AuditEvent:
    currency_text = currency or "N/A"
    return AuditEvent(
        action=AuditAction.EVENT_REINSTATED,
        title=f"{name} reinstated",
        description=f"Previously cancelled event reappeared in feed ({currency_text})",
        dedupe_key=f"{_slug(name)}_{currency_text}",
        severity=AuditSeverity.SUCCESS,
        metadata={"eventName": name, "currency": currency},
    )


def sync_completed(  # noqa: PLR0913
    *,
    source: str,
    processed: int,
    created: int,
    updated: int,
    rescheduled: int = 0,
    cancelled: int = 0,
    currencies: tuple[str, ...] = (),
) -> AuditEvent:
    metadata: dict[str, object] = {
        "source": source,
        "eventsProcessed": processed,
        "eventsCreated": created,
        "eventsUpdated": updated,
        "rescheduledCount": rescheduled,
        "cancelledCount": cancelled,
    }
    if currencies:
        metadata["currencyTags"] = list(currencies)
    return AuditEvent(
        action=AuditAction.SYNC_COMPLETED,
        title=f"{source} sync completed",
        description=(
            f"Processed {processed} events: {created} created, {updated} updated, "
            f"{rescheduled} rescheduled, {cancelled} cancelled"
        ),
        dedupe_key=_slug(source.lower()),
        severity=AuditSeverity.SUCCESS,
        metadata=metadata,
    )


def sync_failed(*, source: str, error: str) -> AuditEvent:
    return AuditEvent(
        action=AuditAction.SYNC_FAILED,
        title=f"{source} sync failed",
        description=f"Sync error: {error}",
        dedupe_key=_slug(source.lower()),
        severity=AuditSeverity.ERROR,
        metadata={"source": source, "error": error},
    )
