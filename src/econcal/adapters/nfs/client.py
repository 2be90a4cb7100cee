"""HTTP client for the Fair Economy (NFS) weekly calendar."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from econcal.adapters.http_resilience import ClientFactory, ResilientClient, default_client_factory
from econcal.config.nfs import NfsConfig, get_nfs_config
from econcal.domain.model import Provider
from econcal.domain.ports import (
    ProviderFetcher,
    ProviderPayloadError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)

from .translator import parse_nfs_calendar

if TYPE_CHECKING:
    from datetime import datetime

    from econcal.domain.model import ProviderRecord

log = getLogger(__name__)


@dataclass(slots=True)
class NfsFetcher:
    """Fetch this week's schedule; the feed has no range parameter."""

    config: NfsConfig = field(default_factory=get_nfs_config)
    client_factory: ClientFactory = field(default=default_client_factory)
    provider: str = Provider.NFS

    def __call__(
        self,
        *,
        start: datetime | None = None,  # noqa: ARG002
        end: datetime | None = None,  # noqa: ARG002
    ) -> list[ProviderRecord]:
        return asyncio.run(self._fetch_async())

    async def _fetch_async(self) -> list[ProviderRecord]:
        async with self.client_factory(self.config.resilience) as client:
            payload = await self._request(client)
        records = parse_nfs_calendar(payload)
        log.info("NFS feed returned %d row(s)", len(records))
        return records

    async def _request(self, client: ResilientClient) -> object:
        try:
            response = await client.get(self.config.path)
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                f"NFS request failed: {exc}", provider=self.provider
            ) from exc

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise ProviderRateLimitError("NFS rate limit reached", provider=self.provider)
        if response.is_error:
            raise ProviderUnavailableError(
                f"NFS responded with HTTP {response.status_code}", provider=self.provider
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderPayloadError("NFS response is not JSON", provider=self.provider) from exc


if TYPE_CHECKING:
    _fetcher_check: ProviderFetcher = NfsFetcher()
