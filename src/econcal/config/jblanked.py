"""JBlanked news API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from econcal.domain.model import Provider

from .env import env_list, first_env_var
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import get_http_cache_path

JBLANKED_BASE_URL: Final[str] = "https://www.jblanked.com/news/api/"
JBLANKED_TIMEOUT_SECONDS: Final[float] = 30.0
JBLANKED_RANGE_CACHE_TTL_SECONDS: Final[float] = 6 * 60 * 60

# Provider id -> path segment of the JBlanked feed.
JBLANKED_FEEDS = MappingProxyType(
    {
        Provider.JBLANKED_FF: "forex-factory",
        Provider.JBLANKED_MT: "mql5",
        Provider.JBLANKED_FXSTREET: "fxstreet",
    }
)
DEFAULT_JBLANKED_PROVIDERS: Final[tuple[str, ...]] = (Provider.JBLANKED_FF,)


def default_jblanked_resilience(*, cache: CacheConfig | None = None) -> ResilienceConfig:
    """Shared policy for every JBlanked endpoint.

    429 is not retried: the quota is daily, so retrying only burns calls.
    """

    return ResilienceConfig(
        name="jblanked",
        base_url=JBLANKED_BASE_URL,
        timeout_seconds=JBLANKED_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3, status_forcelist=frozenset({500, 502, 503, 504})),
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        cache=cache,
        default_headers={"Accept": "application/json"},
    )


@dataclass(frozen=True)
class JBlankedConfig:
    """Holds JBlanked API configuration values."""

    api_key: str
    providers: tuple[str, ...]
    resilience: ResilienceConfig
    range_resilience: ResilienceConfig


def parse_jblanked_providers(names: tuple[str, ...]) -> tuple[str, ...]:
    unknown = sorted(set(names) - set(JBLANKED_FEEDS))
    if unknown:
        known = ", ".join(sorted(JBLANKED_FEEDS))
        raise ConfigurationError(
            f"Unknown JBlanked provider(s): {', '.join(unknown)} (expected one of {known})"
        )
    return tuple(dict.fromkeys(names))


def get_jblanked_config(
    *,
    resilience: ResilienceConfig | None = None,
    range_resilience: ResilienceConfig | None = None,
) -> JBlankedConfig:
    api_key = first_env_var(("JBLANKED_API_KEY", "NEWS_API_KEY"))
    providers = parse_jblanked_providers(
        env_list("JBLANKED_PROVIDERS", DEFAULT_JBLANKED_PROVIDERS)
    )
    return JBlankedConfig(
        api_key=api_key,
        providers=providers,
        resilience=resilience or default_jblanked_resilience(),
        range_resilience=range_resilience
        or default_jblanked_resilience(
            cache=CacheConfig(
                backend="sqlite",
                sqlite_path=str(get_http_cache_path()),
                default_ttl_seconds=JBLANKED_RANGE_CACHE_TTL_SECONDS,
            )
        ),
    )
