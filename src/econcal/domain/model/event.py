"""Canonical economic event and the provider records that feed it."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING

from .enums import EventStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

type ProviderName = str
type RawPayload = Mapping[str, object]


class IncompleteRecordError(ValueError):
    """Raised when a provider record lacks the fields required for reconciliation."""

    def __init__(self, message: str, *, provider: ProviderName, name: str | None) -> None:
        super().__init__(message)
        self.provider = provider
        self.name = name


@dataclass(frozen=True, slots=True, kw_only=True)
class ParsedFields:
    """Values one provider reported for an event."""

    actual: str | None = None
    forecast: str | None = None
    previous: str | None = None
    outcome: str | None = None
    strength: str | None = None
    quality: str | None = None

    def overlay(self, newer: ParsedFields) -> ParsedFields:
        """Take every value present in ``newer``, keep ours where it is silent."""

        values = {
            item.name: getattr(newer, item.name)
            if getattr(newer, item.name) is not None
            else getattr(self, item.name)
            for item in fields(self)
        }
        return ParsedFields(**values)


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceContribution:
    """Per-provider audit entry kept on the canonical event."""

    original_name: str
    last_seen_at: datetime
    raw_payload: RawPayload = field(default_factory=dict)
    parsed: ParsedFields = field(default_factory=ParsedFields)


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalEvent:
    """The reconciled record for one real-world calendar release."""

    event_id: str
    name: str
    normalized_name: str
    scheduled_at: datetime
    created_at: datetime
    updated_at: datetime
    currency: str | None = None
    category: str | None = None
    impact: str | None = None
    original_scheduled_at: datetime | None = None
    rescheduled_from: datetime | None = None
    timezone_source: ProviderName | None = None
    forecast: str | None = None
    previous: str | None = None
    actual: str | None = None
    status: EventStatus = EventStatus.SCHEDULED
    sources: Mapping[ProviderName, SourceContribution] = field(default_factory=dict)
    created_by: ProviderName | None = None
    winner_source: ProviderName | None = None
    quality_score: int | None = None
    last_seen_in_feed: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.normalized_name or "Unknown"

    def has_source(self, provider: ProviderName) -> bool:
        return provider in self.sources

    def with_changes(self, **changes: object) -> CanonicalEvent:
        return replace(self, **changes)  # pyright: ignore[reportArgumentType]


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderRecord:
    """One normalized sighting returned by a provider adapter.

    ``scheduled_at`` must already be UTC; adapters own timezone handling.
    """

    provider: ProviderName
    name: str | None
    scheduled_at: datetime | None
    currency: str | None = None
    status: EventStatus | None = None
    forecast: str | None = None
    previous: str | None = None
    actual: str | None = None
    category: str | None = None
    impact: str | None = None
    outcome: str | None = None
    strength: str | None = None
    quality: str | None = None
    raw_payload: RawPayload = field(default_factory=dict)

    @property
    def parsed(self) -> ParsedFields:
        return ParsedFields(
            actual=self.actual,
            forecast=self.forecast,
            previous=self.previous,
            outcome=self.outcome,
            strength=self.strength,
            quality=self.quality,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CompleteRecord:
    """A provider record that passed validation; name and timestamp are present."""

    record: ProviderRecord
    name: str
    scheduled_at: datetime


def require_complete(record: ProviderRecord) -> CompleteRecord:
    """Reject records without a name or a timezone-aware timestamp."""

    name = (record.name or "").strip()
    if not name:
        raise IncompleteRecordError(
            "Provider record is missing an event name",
            provider=record.provider,
            name=record.name,
        )
    if record.scheduled_at is None:
        raise IncompleteRecordError(
            f"Provider record {name!r} is missing a timestamp",
            provider=record.provider,
            name=name,
        )
    if record.scheduled_at.tzinfo is None:
        raise IncompleteRecordError(
            f"Provider record {name!r} has a naive timestamp",
            provider=record.provider,
            name=name,
        )
    return CompleteRecord(record=record, name=record.name or name, scheduled_at=record.scheduled_at)
