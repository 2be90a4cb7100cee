"""Translate NFS payloads into provider records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC
from logging import getLogger
from typing import cast

from pydantic import ValidationError

from econcal.domain.model import EventStatus, Provider, ProviderRecord
from econcal.domain.ports import ProviderPayloadError

from .schema import NfsEventPayload

log = getLogger(__name__)


def parse_nfs_event(item: Mapping[str, object]) -> ProviderRecord:
    """Translate one feed row.

    A row that fails validation still yields a record (without timestamp) so
    that the sync reports it as skipped instead of dropping it silently.
    """

    raw = dict(item)
    try:
        payload = NfsEventPayload.model_validate(raw)
    except ValidationError as exc:
        log.warning("Invalid NFS row %r: %s", raw.get("title"), exc.errors()[0]["msg"])
        title = raw.get("title")
        return ProviderRecord(
            provider=Provider.NFS,
            name=title if isinstance(title, str) else None,
            scheduled_at=None,
            raw_payload=raw,
        )

    scheduled_at = payload.date
    if scheduled_at is not None and scheduled_at.tzinfo is not None:
        scheduled_at = scheduled_at.astimezone(UTC)
    return ProviderRecord(
        provider=Provider.NFS,
        name=payload.title,
        scheduled_at=scheduled_at,
        currency=payload.country,
        status=EventStatus.SCHEDULED,
        forecast=payload.forecast,
        previous=payload.previous,
        impact=payload.impact,
        raw_payload=raw,
    )


def parse_nfs_calendar(payload: object) -> list[ProviderRecord]:
    if not isinstance(payload, list):
        raise ProviderPayloadError(
            f"Unexpected NFS payload type: {type(payload).__name__}", provider=Provider.NFS
        )
    records: list[ProviderRecord] = []
    for item in cast(list[object], payload):
        if not isinstance(item, Mapping):
            log.warning("Ignoring non-object NFS row: %r", item)
            continue
        records.append(parse_nfs_event(cast(Mapping[str, object], item)))
    return records
