"""Translate uploaded generated events into provider records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC
from logging import getLogger
from typing import cast

from pydantic import ValidationError

from econcal.domain.model import EventStatus, Provider, ProviderRecord
from econcal.domain.ports import ProviderPayloadError

from .schema import GeneratedEventPayload, GeneratedParsedValues

log = getLogger(__name__)


def parse_generated_event(item: Mapping[str, object]) -> ProviderRecord:
    """Translate one uploaded event.

    Values under ``sources.gpt.parsed`` take precedence over the top-level
    ones. Without an explicit status, an event with an actual is released.
    """

    raw = dict(item)
    try:
        payload = GeneratedEventPayload.model_validate(raw)
    except ValidationError as exc:
        log.warning("Invalid generated event %r: %s", raw.get("name"), exc.errors()[0]["msg"])
        name = raw.get("name")
        return ProviderRecord(
            provider=Provider.GPT,
            name=name if isinstance(name, str) else None,
            scheduled_at=None,
            raw_payload=raw,
        )

    source = payload.sources.gpt
    parsed = source.parsed if source is not None else GeneratedParsedValues()
    actual = parsed.actual or payload.actual
    scheduled_at = payload.datetime_utc
    if scheduled_at is not None:
        if scheduled_at.tzinfo is None:
            scheduled_at = scheduled_at.replace(tzinfo=UTC)
        scheduled_at = scheduled_at.astimezone(UTC)
    status = payload.status or (EventStatus.RELEASED if actual else EventStatus.SCHEDULED)
    return ProviderRecord(
        provider=Provider.GPT,
        name=payload.name,
        scheduled_at=scheduled_at,
        currency=payload.currency,
        status=status,
        actual=actual,
        forecast=parsed.forecast or payload.forecast,
        previous=parsed.previous or payload.previous,
        category=payload.category,
        impact=payload.impact,
        outcome=parsed.outcome,
        strength=parsed.strength,
        quality=parsed.quality,
        raw_payload=source.raw if source is not None and source.raw is not None else raw,
    )


def parse_generated_events(payload: object) -> list[ProviderRecord]:
    if not isinstance(payload, list):
        raise ProviderPayloadError(
            f"Unexpected generated events payload type: {type(payload).__name__}",
            provider=Provider.GPT,
        )
    records: list[ProviderRecord] = []
    for item in cast(list[object], payload):
        if not isinstance(item, Mapping):
            log.warning("Ignoring non-object generated event: %r", item)
            continue
        records.append(parse_generated_event(cast(Mapping[str, object], item)))
    return records
