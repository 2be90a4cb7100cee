"""Pydantic models describing the Fair Economy weekly calendar feed."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class NfsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NfsEventPayload(NfsBaseModel):
    """One row of ``ff_calendar_thisweek.json``.

    ``date`` carries the feed's own UTC offset (``2026-02-20T08:30:00-05:00``).
    """

    title: str | None = None
    country: str | None = None
    date: datetime | None = None
    impact: str | None = None
    forecast: str | None = None
    previous: str | None = None
    url: str | None = None

    _normalize_blanks = field_validator(
        "title", "country", "date", "impact", "forecast", "previous", "url", mode="before"
    )(_blank_to_none)
