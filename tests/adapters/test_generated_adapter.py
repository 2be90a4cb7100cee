from __future__ import annotations

from datetime import UTC, datetime

import pytest

from econcal.adapters.generated import parse_generated_event, parse_generated_events
from econcal.domain.model import EventStatus, Provider
from econcal.domain.ports import ProviderPayloadError

PMI_ROW: dict[str, object] = {
    "name": "ISM Services PMI",
    "currency": "usd",
    "category": "Business",
    "impact": "High",
    "datetimeUtc": "2026-02-04T15:00:00Z",
    "forecast": "52.0",
    "sources": {
        "gpt": {
            "raw": {"prompt": "week 6"},
            "parsed": {"forecast": "52.5", "previous": 51.8, "strength": "Weak Data"},
        }
    },
}


def test_parse_generated_event_prefers_parsed_values() -> None:
    record = parse_generated_event(PMI_ROW)

    assert record.provider == Provider.GPT
    assert record.name == "ISM Services PMI"
    assert record.scheduled_at == datetime(2026, 2, 4, 15, 0, tzinfo=UTC)
    assert record.currency == "usd"
    assert record.status is EventStatus.SCHEDULED
    assert record.forecast == "52.5"
    assert record.previous == "51.8"
    assert record.strength == "Weak Data"
    assert record.category == "Business"
    assert record.raw_payload == {"prompt": "week 6"}


def test_parse_generated_event_with_actual_is_released() -> None:
    record = parse_generated_event(
        {"name": "CPI m/m", "datetimeUtc": "2026-02-11T13:30:00", "actual": "0.4%"}
    )

    assert record.status is EventStatus.RELEASED
    assert record.actual == "0.4%"
    assert record.scheduled_at == datetime(2026, 2, 11, 13, 30, tzinfo=UTC)
    assert record.raw_payload["name"] == "CPI m/m"


def test_parse_generated_event_keeps_explicit_status() -> None:
    record = parse_generated_event(
        {"name": "CPI m/m", "datetimeUtc": "2026-02-11T13:30:00Z", "status": "cancelled"}
    )

    assert record.status is EventStatus.CANCELLED


def test_parse_generated_event_keeps_invalid_rows_as_incomplete_records() -> None:
    record = parse_generated_event({"name": "Broken", "datetimeUtc": "tomorrow"})

    assert record.name == "Broken"
    assert record.scheduled_at is None


def test_parse_generated_events_rejects_non_list_payload() -> None:
    with pytest.raises(ProviderPayloadError):
        parse_generated_events({"events": []})


def test_parse_generated_events_skips_non_objects() -> None:
    records = parse_generated_events([PMI_ROW, 3])

    assert [record.name for record in records] == ["ISM Services PMI"]
