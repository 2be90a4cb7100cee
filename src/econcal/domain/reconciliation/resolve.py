"""Identity resolution against canonical events in the document store.

Responsibilities of this stage:
- find the canonical record an incoming provider record belongs to
- tell genuine reschedules apart from the next occurrence of a recurring series
- never mutate persistence state

Strategies, all scoped to an exact currency match:
- narrow: same instant within a few minutes, strict name similarity
- fallback: narrow with a relaxed window and threshold, for imprecise providers
- identity: wide window with terminal-state and weekly-cadence guards
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from econcal.domain.model import MatchKind

from .contracts import IdentityMatch
from .normalize import normalize_currency
from .settings import DEFAULT_SETTINGS, ReconciliationSettings
from .similarity import similarity

if TYPE_CHECKING:
    from econcal.domain.model import CanonicalEvent, CompleteRecord
    from econcal.domain.ports import CanonicalEventStore

    from .settings import WindowMatch

log = getLogger(__name__)

_WEEK = timedelta(days=7)


def weekly_cadence_weeks(
    time_diff: timedelta,
    *,
    max_weeks: int,
    tolerance: timedelta,
) -> int | None:
    """Return N when ``time_diff`` lies within ``tolerance`` of N weeks, N in 1..max_weeks.

    >>> weekly_cadence_weeks(timedelta(days=7, hours=2), max_weeks=4, tolerance=timedelta(days=1))
    1
    """

    distance = abs(time_diff)
    weeks = round(distance / _WEEK)
    if weeks < 1 or weeks > max_weeks:
        return None
    if abs(distance - weeks * _WEEK) > tolerance:
        return None
    return weeks


@dataclass(slots=True, kw_only=True)
class _Candidate:
    event: CanonicalEvent
    score: float
    time_diff: timedelta

    @property
    def sort_key(self) -> tuple[float, timedelta, str]:
        return (-self.score, self.time_diff, self.event.event_id)


@dataclass(slots=True)
class IdentityResolver:
    """Read-only matcher bound to one store and one set of tunables."""

    store: CanonicalEventStore
    settings: ReconciliationSettings = DEFAULT_SETTINGS

    def find_narrow_match(self, incoming: CompleteRecord) -> IdentityMatch | None:
        return self._window_match(incoming, self.settings.narrow, MatchKind.NARROW)

    def find_fallback_match(self, incoming: CompleteRecord) -> IdentityMatch | None:
        match = self._window_match(incoming, self.settings.fallback, MatchKind.FALLBACK)
        if match is not None:
            log.warning(
                "Fallback match for %s %r (%s): canonical %s at %s, drift %s, score %.2f",
                incoming.record.provider,
                incoming.name,
                match.event.currency,
                match.event.event_id,
                match.event.scheduled_at.isoformat(),
                match.time_diff,
                match.score,
            )
        return match

    def find_identity_match(self, incoming: CompleteRecord) -> IdentityMatch | None:
        """Wide-window lookup used by the schedule provider to track reschedules.

        The best candidate is rejected when it already happened (released or
        revised) or when its distance is a whole number of weeks, which marks
        the neighbouring occurrence of a recurring release.
        """

        window = self.settings.identity
        candidates = [
            candidate
            for candidate in self._candidates(incoming, window)
            if candidate.score >= window.threshold
        ]
        if not candidates:
            return None
        best = min(candidates, key=lambda candidate: candidate.sort_key)

        if best.event.status.is_terminal:
            log.debug(
                "Identity match for %r rejected: %s is already %s",
                incoming.name,
                best.event.event_id,
                best.event.status,
            )
            return None

        cadence = self.settings.weekly
        weeks = weekly_cadence_weeks(
            best.time_diff, max_weeks=cadence.max_weeks, tolerance=cadence.tolerance
        )
        if weeks is not None:
            log.debug(
                "Identity match for %r rejected: %s is %d week(s) away, treating as recurrence",
                incoming.name,
                best.event.event_id,
                weeks,
            )
            return None

        return IdentityMatch(
            event=best.event,
            score=best.score,
            time_diff=best.time_diff,
            kind=MatchKind.IDENTITY,
            is_reschedule=best.time_diff > self.settings.drift_tolerance,
        )

    def _window_match(
        self,
        incoming: CompleteRecord,
        window: WindowMatch,
        kind: MatchKind,
    ) -> IdentityMatch | None:
        candidates = self._candidates(incoming, window)
        if not candidates:
            return None
        best = min(candidates, key=lambda candidate: candidate.sort_key)
        if best.score < window.threshold:
            return None
        return IdentityMatch(
            event=best.event,
            score=best.score,
            time_diff=best.time_diff,
            kind=kind,
        )

    def _candidates(self, incoming: CompleteRecord, window: WindowMatch) -> list[_Candidate]:
        currency = normalize_currency(incoming.record.currency)
        if currency is None:
            return []
        events = self.store.query_by_currency_and_time_range(
            currency,
            incoming.scheduled_at - window.window,
            incoming.scheduled_at + window.window,
        )
        return [
            _Candidate(
                event=event,
                score=similarity(incoming.name, event.normalized_name or event.name),
                time_diff=abs(event.scheduled_at - incoming.scheduled_at),
            )
            for event in events
        ]
