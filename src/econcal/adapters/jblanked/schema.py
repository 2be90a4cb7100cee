"""Pydantic models describing JBlanked calendar payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_text(value: object) -> object:
    """Blank strings become ``None``; numbers are kept as their text form."""

    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return value


class JBlankedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class JBlankedEventPayload(JBlankedBaseModel):
    """One calendar entry. ``Date`` is ``YYYY.MM.DD HH:MM:SS`` in UTC."""

    name: str | None = Field(default=None, alias="Name")
    currency: str | None = Field(default=None, alias="Currency")
    category: str | None = Field(default=None, alias="Category")
    date: str | None = Field(default=None, alias="Date")
    actual: str | None = Field(default=None, alias="Actual")
    forecast: str | None = Field(default=None, alias="Forecast")
    previous: str | None = Field(default=None, alias="Previous")
    outcome: str | None = Field(default=None, alias="Outcome")
    strength: str | None = Field(default=None, alias="Strength")
    quality: str | None = Field(default=None, alias="Quality")

    _normalize_text = field_validator(
        "name",
        "currency",
        "category",
        "date",
        "actual",
        "forecast",
        "previous",
        "outcome",
        "strength",
        "quality",
        mode="before",
    )(_to_text)


class JBlankedEnvelope(JBlankedBaseModel):
    """Some endpoints wrap the list as ``{"value": [...]}``."""

    value: list[object]
