"""Fair Economy (NFS) weekly calendar configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

NFS_BASE_URL = "https://nfs.faireconomy.media/"
NFS_THIS_WEEK_PATH = "ff_calendar_thisweek.json"
NFS_TIMEOUT_SECONDS = 20.0


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="nfs",
        base_url=NFS_BASE_URL,
        timeout_seconds=NFS_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


@dataclass(frozen=True, slots=True)
class NfsConfig:
    """The feed is public; only the endpoint and transport policy are configurable."""

    path: str = NFS_THIS_WEEK_PATH
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_nfs_config(*, resilience: ResilienceConfig | None = None) -> NfsConfig:
    return NfsConfig(resilience=resilience or _default_resilience())
