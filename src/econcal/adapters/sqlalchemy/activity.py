"""Audit sink that persists activity entries through the unit of work."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

if TYPE_CHECKING:
    from econcal.domain.model import AuditEvent
    from econcal.domain.ports import EventUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True)
class ActivityLogAuditSink:
    """Write each audit event to ``event_activity`` in its own transaction.

    Storage errors are logged and dropped; the activity log must not fail a sync.
    """

    unit_of_work_factory: Callable[[], EventUnitOfWork]

    def emit(self, event: AuditEvent) -> None:
        try:
            with self.unit_of_work_factory() as uow:
                uow.repositories.activity.record(event)
                uow.commit()
        except SQLAlchemyError:
            log.exception("Failed to record activity %s", event.activity_id)
