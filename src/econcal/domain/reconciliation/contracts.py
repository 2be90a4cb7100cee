"""Shared reconciliation result types.

This module holds only:
- the identity-resolution outcome handed from resolver to merge
- the transition summary handed from merge to audit callers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime, timedelta

    from econcal.domain.model import CanonicalEvent, EventStatus, MatchKind


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentityMatch:
    """Canonical record an incoming provider record resolved to.

    ``time_diff`` is the absolute distance between both timestamps.
    """

    event: CanonicalEvent
    score: float
    time_diff: timedelta
    kind: MatchKind
    is_reschedule: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class EventTransition:
    """State change produced by one merge, used by callers to emit audits."""

    event: CanonicalEvent
    created: bool
    rescheduled: bool
    reinstated: bool
    previous_scheduled_at: datetime | None
    scheduled_at: datetime
    previous_status: EventStatus | None
    status: EventStatus

    @property
    def event_id(self) -> str:
        return self.event.event_id

    @property
    def changed_schedule(self) -> bool:
        previous = self.previous_scheduled_at
        return previous is not None and previous != self.scheduled_at
