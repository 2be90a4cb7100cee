"""Audit sinks that do not depend on any adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from econcal.domain.model import AuditSeverity

if TYPE_CHECKING:
    from econcal.domain.model import AuditEvent
    from econcal.domain.ports import AuditSink

log = logging.getLogger(__name__)

_LEVELS = {
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.SUCCESS: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
}


@dataclass(slots=True)
class LoggingAuditSink:
    """Write audit events to the log."""

    logger: logging.Logger = field(default=log)

    def emit(self, event: AuditEvent) -> None:
        self.logger.log(
            _LEVELS.get(event.severity, logging.INFO),
            "[%s] %s: %s",
            event.action,
            event.title,
            event.description,
        )


@dataclass(slots=True)
class CompositeAuditSink:
    """Fan an audit event out to several sinks.

    A failing sink is logged and skipped; audit delivery never aborts a sync.
    """

    sinks: tuple[AuditSink, ...]

    def emit(self, event: AuditEvent) -> None:
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception:
                log.exception("Audit sink %s failed for %s", type(sink).__name__, event.activity_id)
