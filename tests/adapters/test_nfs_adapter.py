from __future__ import annotations

from datetime import UTC, datetime

import httpx
import pytest

from econcal.adapters.nfs import NfsFetcher, parse_nfs_calendar, parse_nfs_event
from econcal.config.nfs import NfsConfig
from econcal.domain.model import EventStatus, Provider
from econcal.domain.ports import (
    ProviderPayloadError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)
from tests.support.http import make_client_factory

NFP_ROW: dict[str, object] = {
    "title": "Non-Farm Employment Change",
    "country": "USD",
    "date": "2026-02-06T08:30:00-05:00",
    "impact": "High",
    "forecast": "70K",
    "previous": "256K",
}


def test_parse_nfs_event_converts_to_utc() -> None:
    record = parse_nfs_event(NFP_ROW)

    assert record.provider == Provider.NFS
    assert record.name == "Non-Farm Employment Change"
    assert record.scheduled_at == datetime(2026, 2, 6, 13, 30, tzinfo=UTC)
    assert record.currency == "USD"
    assert record.status is EventStatus.SCHEDULED
    assert record.forecast == "70K"
    assert record.previous == "256K"
    assert record.impact == "High"
    assert record.raw_payload == NFP_ROW


def test_parse_nfs_event_blank_fields_become_none() -> None:
    record = parse_nfs_event(
        {"title": "Bank Holiday", "country": "JPY", "date": "", "forecast": ""}
    )

    assert record.scheduled_at is None
    assert record.forecast is None


def test_parse_nfs_event_keeps_invalid_rows_as_incomplete_records() -> None:
    record = parse_nfs_event({"title": "Broken", "country": "USD", "date": "next tuesday"})

    assert record.name == "Broken"
    assert record.scheduled_at is None


def test_parse_nfs_calendar_rejects_non_list_payload() -> None:
    with pytest.raises(ProviderPayloadError):
        parse_nfs_calendar({"events": []})


def test_parse_nfs_calendar_skips_non_objects() -> None:
    records = parse_nfs_calendar([NFP_ROW, "garbage"])

    assert [record.name for record in records] == ["Non-Farm Employment Change"]


def test_nfs_fetcher_requests_weekly_feed() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[NFP_ROW])

    fetcher = NfsFetcher(config=NfsConfig(), client_factory=make_client_factory(handler))

    records = fetcher()

    assert len(records) == 1
    assert records[0].scheduled_at == datetime(2026, 2, 6, 13, 30, tzinfo=UTC)
    assert seen[0].url == httpx.URL("https://nfs.faireconomy.media/ff_calendar_thisweek.json")


@pytest.mark.parametrize(
    ("response", "error"),
    [
        (httpx.Response(429), ProviderRateLimitError),
        (httpx.Response(503), ProviderUnavailableError),
        (httpx.Response(200, text="<html>maintenance</html>"), ProviderPayloadError),
        (httpx.Response(200, json={"error": "nope"}), ProviderPayloadError),
    ],
)
def test_nfs_fetcher_maps_failures(
    response: httpx.Response,
    error: type[Exception],
) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return response

    fetcher = NfsFetcher(config=NfsConfig(), client_factory=make_client_factory(handler))

    with pytest.raises(error):
        fetcher()
