from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from econcal.domain.model import AuditEvent


@dataclass(slots=True)
class RecordingAuditSink:
    """Keep emitted audit events in memory, in emission order."""

    events: list[AuditEvent] = field(default_factory=list)

    def emit(self, event: AuditEvent) -> None:
        self.events.append(event)
