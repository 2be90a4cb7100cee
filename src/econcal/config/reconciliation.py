"""Reconciliation tunables read from the environment."""

from __future__ import annotations

from logging import getLogger

from econcal.domain.model import Provider
from econcal.domain.reconciliation import (
    DEFAULT_PRIORITY_ORDER,
    DEFAULT_QUALITY_SCORES,
    ProviderPriority,
    ReconciliationSettings,
)
from econcal.domain.reconciliation.settings import DEFAULT_CHUNK_SIZE

from .env import env_int, env_list
from .errors import ConfigurationError

log = getLogger(__name__)

DEFAULT_STALE_DAYS = 3


def get_reconciliation_config() -> ReconciliationSettings:
    """Build settings from ``ECONCAL_PROVIDER_PRIORITY``, ``ECONCAL_STALE_DAYS``
    and ``ECONCAL_BATCH_SIZE``; unset variables keep the defaults.
    """

    order = env_list("ECONCAL_PROVIDER_PRIORITY", DEFAULT_PRIORITY_ORDER)
    try:
        priority = ProviderPriority(order=order, quality_scores=DEFAULT_QUALITY_SCORES)
        settings = ReconciliationSettings(
            priority=priority,
            stale_days=env_int("ECONCAL_STALE_DAYS", DEFAULT_STALE_DAYS),
            chunk_size=env_int("ECONCAL_BATCH_SIZE", DEFAULT_CHUNK_SIZE),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid reconciliation configuration: {exc}") from exc

    unlisted = priority.missing(Provider)
    if unlisted:
        log.warning("Providers without a priority entry rank last: %s", ", ".join(unlisted))
    return settings
