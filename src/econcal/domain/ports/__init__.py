"""Domain port definitions for adapters."""

from __future__ import annotations

from .audit import AuditSink
from .fetching import (
    ProviderAuthError,
    ProviderFetcher,
    ProviderPayloadError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)
from .persistence import (
    ActivityRepository,
    CanonicalEventRepository,
    CanonicalEventStore,
    UpsertEntry,
)
from .unit_of_work import (
    EventRepositories,
    EventUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ActivityRepository",
    "AuditSink",
    "CanonicalEventRepository",
    "CanonicalEventStore",
    "EventRepositories",
    "EventUnitOfWork",
    "ProviderAuthError",
    "ProviderFetcher",
    "ProviderPayloadError",
    "ProviderRateLimitError",
    "ProviderUnavailableError",
    "RepositoryCollection",
    "UnitOfWork",
    "UpsertEntry",
]
