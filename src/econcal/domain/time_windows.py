"""Utilities for constraining backfill runs to specific time windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Time window values must include timezone information")
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow:
    """Describe the desired temporal bounds for a backfill run.

    ``lookback`` counts back from ``end`` (or from now) and narrows ``start``
    when both are given.
    """

    start: datetime | None = None
    end: datetime | None = None
    lookback: timedelta | None = None

    def resolve(self, *, clock: Clock = utcnow) -> tuple[datetime, datetime]:
        """Resolve the window into concrete UTC timestamps.

        A window with neither ``start`` nor ``lookback`` is rejected: a
        backfill must be bounded.
        """

        resolved_end = _ensure_aware(self.end)
        resolved_start = _ensure_aware(self.start)

        if self.lookback is not None:
            if self.lookback < timedelta(0):
                raise ValueError("Lookback duration must be non-negative")
            anchor = resolved_end or clock()
            if anchor.tzinfo is None:
                anchor = anchor.replace(tzinfo=UTC)
            anchor = anchor.astimezone(UTC)
            start_from_lookback = anchor - self.lookback
            if resolved_start is None:
                resolved_start = start_from_lookback
            else:
                resolved_start = max(resolved_start, start_from_lookback)
            if resolved_end is None:
                resolved_end = anchor

        if resolved_start is None:
            raise ValueError("Time window needs a start or a lookback")
        if resolved_end is None:
            resolved_end = clock().astimezone(UTC)
        if resolved_start > resolved_end:
            raise ValueError("Time window start must be before end")

        return resolved_start, resolved_end


__all__ = ["Clock", "TimeWindow", "utcnow"]
