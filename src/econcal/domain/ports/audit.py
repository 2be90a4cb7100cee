"""Port for the audit/notification sink fed by sync callers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from econcal.domain.model import AuditEvent


@runtime_checkable
class AuditSink(Protocol):
    """Receives audit events. Implementations must not raise on delivery problems."""

    def emit(self, event: AuditEvent) -> None: ...
