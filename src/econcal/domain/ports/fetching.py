"""Ports for fetching provider calendar records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from econcal.domain.model import ProviderRecord


class ProviderUnavailableError(RuntimeError):
    """Raised by fetchers when a provider cannot deliver a usable payload."""

    def __init__(self, message: str, *, provider: str) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderAuthError(ProviderUnavailableError):
    """The provider rejected our credentials."""


class ProviderRateLimitError(ProviderUnavailableError):
    """The provider quota is exhausted."""


class ProviderPayloadError(ProviderUnavailableError):
    """The provider answered with a payload we cannot interpret."""


@runtime_checkable
class ProviderFetcher(Protocol):
    """Callable port returning normalized records for a date range.

    Fetchers bound to a fixed window (this week, today) ignore the range.
    """

    @property
    def provider(self) -> str: ...

    def __call__(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[ProviderRecord]: ...


__all__ = [
    "ProviderAuthError",
    "ProviderFetcher",
    "ProviderPayloadError",
    "ProviderRateLimitError",
    "ProviderUnavailableError",
]
