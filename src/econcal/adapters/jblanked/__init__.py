"""Public interface for the JBlanked adapter."""

from __future__ import annotations

from .client import JBlankedFetcher
from .schema import JBlankedEventPayload
from .translator import (
    parse_jblanked_calendar,
    parse_jblanked_event,
    parse_jblanked_timestamp,
    unwrap_jblanked_payload,
)

__all__ = [
    "JBlankedEventPayload",
    "JBlankedFetcher",
    "parse_jblanked_calendar",
    "parse_jblanked_event",
    "parse_jblanked_timestamp",
    "unwrap_jblanked_payload",
]
