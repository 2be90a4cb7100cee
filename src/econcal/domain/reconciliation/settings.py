"""Tunable thresholds for identity resolution, merging and staleness.

The defaults are product-tuned values, not derived constants. Override them
through ``econcal.config.get_reconciliation_config`` rather than editing here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from econcal.domain.model import Provider
from econcal.domain.ports.persistence import DEFAULT_CHUNK_SIZE

from .priority import DEFAULT_PRIORITY, ProviderPriority

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_SETTINGS",
    "ReconciliationSettings",
    "WeeklyCadence",
    "WindowMatch",
]


@dataclass(frozen=True, slots=True)
class WindowMatch:
    """Time window and name-similarity threshold for one lookup strategy."""

    window: timedelta
    threshold: float

    def __post_init__(self) -> None:
        if self.window < timedelta(0):
            raise ValueError("Match window must be non-negative")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("Similarity threshold must be within [0, 1]")


@dataclass(frozen=True, slots=True)
class WeeklyCadence:
    """Tolerance band around N x 7 days that marks a recurring series."""

    tolerance: timedelta = timedelta(days=1)
    max_weeks: int = 4
    repair_max_weeks: int = 8


@dataclass(frozen=True, slots=True)
class ReconciliationSettings:
    priority: ProviderPriority = DEFAULT_PRIORITY
    narrow: WindowMatch = field(
        default_factory=lambda: WindowMatch(window=timedelta(minutes=5), threshold=0.8)
    )
    fallback: WindowMatch = field(
        default_factory=lambda: WindowMatch(window=timedelta(minutes=180), threshold=0.6)
    )
    identity: WindowMatch = field(
        default_factory=lambda: WindowMatch(window=timedelta(days=15), threshold=0.85)
    )
    weekly: WeeklyCadence = field(default_factory=WeeklyCadence)
    drift_tolerance: timedelta = timedelta(minutes=5)
    stale_days: int = 3
    authoritative_provider: str = Provider.NFS
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.stale_days < 0:
            raise ValueError("stale_days must be non-negative")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")


DEFAULT_SETTINGS = ReconciliationSettings()
