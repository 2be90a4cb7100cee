"""Canonical event reconciliation engine.

Stages, leaves first: normalize, similarity, resolve, merge, stale.
"""

from __future__ import annotations

from .contracts import EventTransition, IdentityMatch
from .merge import (
    DEFAULT_DRIFT_TOLERANCE,
    describe_transition,
    is_reinstatement,
    merge_provider_event,
)
from .normalize import compute_event_id, name_tokens, normalize_currency, normalize_event_name
from .priority import (
    DEFAULT_PRIORITY,
    DEFAULT_PRIORITY_ORDER,
    DEFAULT_QUALITY_SCORES,
    UNKNOWN_QUALITY_SCORE,
    ProviderPriority,
)
from .resolve import IdentityResolver, weekly_cadence_weeks
from .settings import (
    DEFAULT_SETTINGS,
    ReconciliationSettings,
    WeeklyCadence,
    WindowMatch,
)
from .similarity import similarity
from .stale import (
    RepairResult,
    StaleDetectionResult,
    detect_stale_events,
    is_stale,
    repair_weekly_reschedules,
)

__all__ = [
    "DEFAULT_DRIFT_TOLERANCE",
    "DEFAULT_PRIORITY",
    "DEFAULT_PRIORITY_ORDER",
    "DEFAULT_QUALITY_SCORES",
    "DEFAULT_SETTINGS",
    "UNKNOWN_QUALITY_SCORE",
    "EventTransition",
    "IdentityMatch",
    "IdentityResolver",
    "ProviderPriority",
    "ReconciliationSettings",
    "RepairResult",
    "StaleDetectionResult",
    "WeeklyCadence",
    "WindowMatch",
    "compute_event_id",
    "describe_transition",
    "detect_stale_events",
    "is_reinstatement",
    "is_stale",
    "merge_provider_event",
    "name_tokens",
    "normalize_currency",
    "normalize_event_name",
    "repair_weekly_reschedules",
    "similarity",
    "weekly_cadence_weeks",
]
