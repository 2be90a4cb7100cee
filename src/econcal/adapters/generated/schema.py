"""Pydantic models describing uploaded, machine-generated calendar events."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator

from econcal.domain.model import EventStatus  # noqa: TC001


def _to_text(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class GeneratedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GeneratedParsedValues(GeneratedBaseModel):
    actual: str | None = None
    forecast: str | None = None
    previous: str | None = None
    outcome: str | None = None
    strength: str | None = None
    quality: str | None = None

    _normalize_text = field_validator(
        "actual", "forecast", "previous", "outcome", "strength", "quality", mode="before"
    )(_to_text)


class GeneratedSourcePayload(GeneratedBaseModel):
    raw: dict[str, object] | None = None
    parsed: GeneratedParsedValues = Field(default_factory=GeneratedParsedValues)


class GeneratedSources(GeneratedBaseModel):
    gpt: GeneratedSourcePayload | None = None


class GeneratedEventPayload(GeneratedBaseModel):
    """One uploaded event; ``datetimeUtc`` is ISO-8601, naive values are UTC."""

    name: str | None = None
    currency: str | None = None
    category: str | None = None
    impact: str | None = None
    datetime_utc: datetime | None = Field(default=None, alias="datetimeUtc")
    status: EventStatus | None = None
    actual: str | None = None
    forecast: str | None = None
    previous: str | None = None
    sources: GeneratedSources = Field(default_factory=GeneratedSources)

    _normalize_text = field_validator(
        "name",
        "currency",
        "category",
        "impact",
        "datetime_utc",
        "status",
        "actual",
        "forecast",
        "previous",
        mode="before",
    )(_to_text)
