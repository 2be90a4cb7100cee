"""SQLAlchemy repository implementations for canonical events and activity."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import insert, select, update

from econcal.domain.model import (
    AuditAction,
    AuditEvent,
    AuditSeverity,
    CanonicalEvent,
    EventStatus,
    ParsedFields,
    SourceContribution,
)

from .mappings import CANONICAL_EVENT_COLUMNS, canonical_event_table, event_activity_table

if TYPE_CHECKING:
    from sqlalchemy.engine import RowMapping
    from sqlalchemy.orm import Session

    from econcal.domain.ports import UpsertEntry

# Columns that a merge write never removes even if the record carries None.
_REQUIRED_COLUMNS = frozenset(
    column.key for column in canonical_event_table.c if not column.nullable
)


def strip_absent(values: Mapping[str, object]) -> dict[str, object]:
    """Drop ``None`` values so that a merge write leaves those columns untouched."""

    return {key: value for key, value in values.items() if value is not None}


def _parsed_to_document(parsed: ParsedFields) -> dict[str, object]:
    return strip_absent(
        {
            "actual": parsed.actual,
            "forecast": parsed.forecast,
            "previous": parsed.previous,
            "outcome": parsed.outcome,
            "strength": parsed.strength,
            "quality": parsed.quality,
        }
    )


def _sources_to_document(
    sources: Mapping[str, SourceContribution],
) -> dict[str, dict[str, object]]:
    return {
        provider: {
            "originalName": contribution.original_name,
            "lastSeenAt": contribution.last_seen_at.isoformat(),
            "rawPayload": dict(contribution.raw_payload),
            "parsed": _parsed_to_document(contribution.parsed),
        }
        for provider, contribution in sources.items()
    }


def _text(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _sources_from_document(document: object) -> dict[str, SourceContribution]:
    if not isinstance(document, Mapping):
        return {}
    sources: dict[str, SourceContribution] = {}
    for provider, entry in cast(Mapping[str, object], document).items():
        if not isinstance(entry, Mapping):
            continue
        data = cast(Mapping[str, object], entry)
        parsed = data.get("parsed")
        parsed_data = cast(Mapping[str, object], parsed) if isinstance(parsed, Mapping) else {}
        raw = data.get("rawPayload")
        last_seen = _text(data.get("lastSeenAt"))
        if last_seen is None:
            continue
        sources[provider] = SourceContribution(
            original_name=_text(data.get("originalName")) or "",
            last_seen_at=datetime.fromisoformat(last_seen),
            raw_payload=dict(cast(Mapping[str, object], raw)) if isinstance(raw, Mapping) else {},
            parsed=ParsedFields(
                actual=_text(parsed_data.get("actual")),
                forecast=_text(parsed_data.get("forecast")),
                previous=_text(parsed_data.get("previous")),
                outcome=_text(parsed_data.get("outcome")),
                strength=_text(parsed_data.get("strength")),
                quality=_text(parsed_data.get("quality")),
            ),
        )
    return sources


def event_to_row(event: CanonicalEvent) -> dict[str, object]:
    return {
        "event_id": event.event_id,
        "name": event.name,
        "normalized_name": event.normalized_name,
        "currency": event.currency,
        "category": event.category,
        "impact": event.impact,
        "scheduled_at": event.scheduled_at,
        "original_scheduled_at": event.original_scheduled_at,
        "rescheduled_from": event.rescheduled_from,
        "timezone_source": event.timezone_source,
        "forecast": event.forecast,
        "previous": event.previous,
        "actual": event.actual,
        "status": str(event.status),
        "sources": _sources_to_document(event.sources),
        "created_by": event.created_by,
        "winner_source": event.winner_source,
        "quality_score": event.quality_score,
        "last_seen_in_feed": event.last_seen_in_feed,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


def event_from_row(row: RowMapping) -> CanonicalEvent:
    return CanonicalEvent(
        event_id=row["event_id"],
        name=row["name"],
        normalized_name=row["normalized_name"],
        currency=row["currency"],
        category=row["category"],
        impact=row["impact"],
        scheduled_at=row["scheduled_at"],
        original_scheduled_at=row["original_scheduled_at"],
        rescheduled_from=row["rescheduled_from"],
        timezone_source=row["timezone_source"],
        forecast=row["forecast"],
        previous=row["previous"],
        actual=row["actual"],
        status=EventStatus(row["status"]),
        sources=_sources_from_document(row["sources"]),
        created_by=row["created_by"],
        winner_source=row["winner_source"],
        quality_score=row["quality_score"],
        last_seen_in_feed=row["last_seen_in_feed"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlAlchemyCanonicalEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def query_by_currency_and_time_range(
        self, currency: str, start: datetime, end: datetime
    ) -> list[CanonicalEvent]:
        table = canonical_event_table
        stmt = (
            select(table)
            .where(table.c.currency == currency)
            .where(table.c.scheduled_at >= start)
            .where(table.c.scheduled_at <= end)
            .order_by(table.c.scheduled_at, table.c.event_id)
        )
        return [event_from_row(row) for row in self.session.execute(stmt).mappings()]

    def query_scheduled_after(self, instant: datetime) -> list[CanonicalEvent]:
        table = canonical_event_table
        stmt = (
            select(table)
            .where(table.c.scheduled_at > instant)
            .order_by(table.c.scheduled_at, table.c.event_id)
        )
        return [event_from_row(row) for row in self.session.execute(stmt).mappings()]

    def query_rescheduled(self) -> list[CanonicalEvent]:
        table = canonical_event_table
        stmt = (
            select(table)
            .where(table.c.rescheduled_from.is_not(None))
            .order_by(table.c.scheduled_at, table.c.event_id)
        )
        return [event_from_row(row) for row in self.session.execute(stmt).mappings()]

    def get(self, event_id: str) -> CanonicalEvent | None:
        stmt = select(canonical_event_table).where(canonical_event_table.c.event_id == event_id)
        row = self.session.execute(stmt).mappings().one_or_none()
        return event_from_row(row) if row is not None else None

    def upsert(self, entry: UpsertEntry) -> None:
        """Insert, or shallow-merge into the stored row.

        ``None`` fields of the record are not written; ``entry.clear`` names
        the columns to reset explicitly.
        """

        unknown = entry.clear - CANONICAL_EVENT_COLUMNS
        if unknown:
            raise ValueError(f"Cannot clear unknown fields: {', '.join(sorted(unknown))}")
        required = entry.clear & _REQUIRED_COLUMNS
        if required:
            raise ValueError(f"Cannot clear required fields: {', '.join(sorted(required))}")
        if entry.record.event_id != entry.event_id:
            raise ValueError(
                f"Entry id {entry.event_id} does not match record id {entry.record.event_id}"
            )

        table = canonical_event_table
        values = strip_absent(event_to_row(entry.record))
        exists = self.session.execute(
            select(table.c.event_id).where(table.c.event_id == entry.event_id)
        ).first()
        if exists is None:
            self.session.execute(insert(table).values(**values))
            return

        values.pop("event_id")
        values.update(dict.fromkeys(entry.clear))
        self.session.execute(
            update(table).where(table.c.event_id == entry.event_id).values(**values)
        )


def _activity_to_row(event: AuditEvent) -> dict[str, object]:
    return {
        "activity_id": event.activity_id,
        "action": str(event.action),
        "title": event.title,
        "description": event.description,
        "severity": str(event.severity),
        "details": dict(event.metadata),
        "created_at": event.created_at,
    }


def _activity_from_row(row: RowMapping) -> AuditEvent:
    action = AuditAction(row["action"])
    prefix = f"{action}_"
    activity_id: str = row["activity_id"]
    details = row["details"]
    return AuditEvent(
        action=action,
        title=row["title"],
        description=row["description"],
        dedupe_key=activity_id.removeprefix(prefix),
        severity=AuditSeverity(row["severity"]),
        metadata=dict(cast(Mapping[str, object], details)) if isinstance(details, Mapping) else {},
        created_at=row["created_at"],
    )


class SqlAlchemyActivityRepository:
    """Activity log keyed by deterministic activity id; a repeat overwrites."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def record(self, event: AuditEvent) -> None:
        table = event_activity_table
        values = _activity_to_row(event)
        exists = self.session.execute(
            select(table.c.activity_id).where(table.c.activity_id == event.activity_id)
        ).first()
        if exists is None:
            self.session.execute(insert(table).values(**values))
            return
        values.pop("activity_id")
        self.session.execute(
            update(table).where(table.c.activity_id == event.activity_id).values(**values)
        )

    def get(self, activity_id: str) -> AuditEvent | None:
        stmt = select(event_activity_table).where(
            event_activity_table.c.activity_id == activity_id
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        return _activity_from_row(row) if row is not None else None

    def recent(self, limit: int = 20) -> list[AuditEvent]:
        table = event_activity_table
        stmt = select(table).order_by(table.c.created_at.desc(), table.c.activity_id).limit(limit)
        return [_activity_from_row(row) for row in self.session.execute(stmt).mappings()]
