"""Translate JBlanked payloads into provider records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from econcal.domain.model import EventStatus, ProviderRecord
from econcal.domain.ports import ProviderPayloadError

from .schema import JBlankedEnvelope, JBlankedEventPayload

if TYPE_CHECKING:
    from econcal.domain.model import ProviderName

log = getLogger(__name__)

_DATE_FORMAT = "%Y.%m.%d %H:%M:%S"


def parse_jblanked_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, _DATE_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        log.warning("Unparseable JBlanked date %r", value)
        return None


def parse_jblanked_event(item: Mapping[str, object], *, provider: ProviderName) -> ProviderRecord:
    """Translate one entry. An entry with an actual value counts as released."""

    raw = dict(item)
    try:
        payload = JBlankedEventPayload.model_validate(raw)
    except ValidationError as exc:
        log.warning("Invalid %s row %r: %s", provider, raw.get("Name"), exc.errors()[0]["msg"])
        name = raw.get("Name")
        return ProviderRecord(
            provider=provider,
            name=name if isinstance(name, str) else None,
            scheduled_at=None,
            raw_payload=raw,
        )

    return ProviderRecord(
        provider=provider,
        name=payload.name,
        scheduled_at=parse_jblanked_timestamp(payload.date),
        currency=payload.currency,
        status=EventStatus.RELEASED if payload.actual is not None else EventStatus.SCHEDULED,
        actual=payload.actual,
        forecast=payload.forecast,
        previous=payload.previous,
        category=payload.category,
        impact=payload.strength,
        outcome=payload.outcome,
        strength=payload.strength,
        quality=payload.quality,
        raw_payload=raw,
    )


def unwrap_jblanked_payload(payload: object, *, provider: ProviderName) -> list[object]:
    if isinstance(payload, list):
        return cast(list[object], payload)
    if isinstance(payload, Mapping):
        try:
            return JBlankedEnvelope.model_validate(payload).value
        except ValidationError as exc:
            raise ProviderPayloadError(
                f"Unexpected {provider} payload keys: {sorted(map(str, payload))}",
                provider=provider,
            ) from exc
    raise ProviderPayloadError(
        f"Unexpected {provider} payload type: {type(payload).__name__}", provider=provider
    )


def parse_jblanked_calendar(payload: object, *, provider: ProviderName) -> list[ProviderRecord]:
    records: list[ProviderRecord] = []
    for item in unwrap_jblanked_payload(payload, provider=provider):
        if not isinstance(item, Mapping):
            log.warning("Ignoring non-object %s row: %r", provider, item)
            continue
        records.append(parse_jblanked_event(cast(Mapping[str, object], item), provider=provider))
    return records
