"""Public interface for uploaded, machine-generated calendar events."""

from __future__ import annotations

from .schema import GeneratedEventPayload
from .translator import parse_generated_event, parse_generated_events

__all__ = ["GeneratedEventPayload", "parse_generated_event", "parse_generated_events"]
