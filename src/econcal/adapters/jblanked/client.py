"""HTTP client for the JBlanked news calendar API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from econcal.adapters.http_resilience import ClientFactory, ResilientClient, default_client_factory
from econcal.config.errors import ConfigurationError
from econcal.config.jblanked import JBLANKED_FEEDS, JBlankedConfig, get_jblanked_config
from econcal.domain.model import Provider
from econcal.domain.ports import (
    ProviderAuthError,
    ProviderFetcher,
    ProviderPayloadError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)

from .translator import parse_jblanked_calendar

if TYPE_CHECKING:
    from datetime import datetime

    from econcal.config.http_resilience import ResilienceConfig
    from econcal.domain.model import ProviderRecord

log = getLogger(__name__)

_AUTH_FAILURES = frozenset({httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN})


@dataclass(slots=True)
class JBlankedFetcher:
    """Fetch one JBlanked feed.

    Without a range the ``today`` endpoint is used (actuals); with ``start``
    and ``end`` the ``range`` endpoint is used (backfill) through the cached
    transport.
    """

    provider: str = Provider.JBLANKED_FF
    config: JBlankedConfig = field(default_factory=get_jblanked_config)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __post_init__(self) -> None:
        if self.provider not in JBLANKED_FEEDS:
            raise ConfigurationError(f"{self.provider} is not a JBlanked feed")

    def __call__(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ProviderRecord]:
        return asyncio.run(self._fetch_async(start=start, end=end))

    async def _fetch_async(
        self, *, start: datetime | None, end: datetime | None
    ) -> list[ProviderRecord]:
        feed = JBLANKED_FEEDS[self.provider]
        params: dict[str, str] | None = None
        resilience: ResilienceConfig = self.config.resilience
        if start is None and end is None:
            path = f"{feed}/calendar/today/"
        else:
            if start is None or end is None:
                raise ValueError("A JBlanked range needs both start and end")
            path = f"{feed}/calendar/range/"
            params = {"from": start.date().isoformat(), "to": end.date().isoformat()}
            resilience = self.config.range_resilience

        async with self.client_factory(resilience) as client:
            payload = await self._request(client, path, params)
        records = parse_jblanked_calendar(payload, provider=self.provider)
        log.info("%s returned %d row(s) from %s", self.provider, len(records), path)
        return records

    async def _request(
        self,
        client: ResilientClient,
        path: str,
        params: dict[str, str] | None,
    ) -> object:
        try:
            response = await client.get(
                path,
                params=params,
                headers={"Authorization": f"Api-Key {self.config.api_key}"},
            )
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                f"{self.provider} request failed: {exc}", provider=self.provider
            ) from exc

        if response.status_code in _AUTH_FAILURES:
            raise ProviderAuthError(
                f"{self.provider} rejected the API key (HTTP {response.status_code})",
                provider=self.provider,
            )
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise ProviderRateLimitError(
                f"{self.provider} rate limit reached", provider=self.provider
            )
        if response.is_error:
            raise ProviderUnavailableError(
                f"{self.provider} responded with HTTP {response.status_code}",
                provider=self.provider,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderPayloadError(
                f"{self.provider} response is not JSON", provider=self.provider
            ) from exc


if TYPE_CHECKING:
    _fetcher_check: ProviderFetcher = JBlankedFetcher()
