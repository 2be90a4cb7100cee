"""Domain model for canonical economic events."""

from __future__ import annotations

from .audit import AuditEvent
from .enums import AuditAction, AuditSeverity, EventStatus, MatchKind, Provider
from .event import (
    CanonicalEvent,
    CompleteRecord,
    IncompleteRecordError,
    ParsedFields,
    ProviderName,
    ProviderRecord,
    RawPayload,
    SourceContribution,
    require_complete,
)

__all__ = [
    "AuditAction",
    "AuditEvent",
    "AuditSeverity",
    "CanonicalEvent",
    "CompleteRecord",
    "EventStatus",
    "IncompleteRecordError",
    "MatchKind",
    "ParsedFields",
    "Provider",
    "ProviderName",
    "ProviderRecord",
    "RawPayload",
    "SourceContribution",
    "require_complete",
]
