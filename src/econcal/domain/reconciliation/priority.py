"""Provider priority used for field selection and clock-skew correction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from econcal.domain.model import Provider

if TYPE_CHECKING:
    from collections.abc import Iterable

    from econcal.domain.model import ProviderName

DEFAULT_PRIORITY_ORDER: tuple[ProviderName, ...] = (
    Provider.NFS,
    Provider.JBLANKED_FF,
    Provider.GPT,
    Provider.JBLANKED_MT,
    Provider.JBLANKED_FXSTREET,
)

DEFAULT_QUALITY_SCORES: Mapping[ProviderName, int] = MappingProxyType(
    {
        Provider.NFS: 100,
        Provider.JBLANKED_FF: 95,
        Provider.GPT: 60,
        Provider.JBLANKED_MT: 90,
        Provider.JBLANKED_FXSTREET: 85,
    }
)

UNKNOWN_QUALITY_SCORE = 50


@dataclass(frozen=True, slots=True)
class ProviderPriority:
    """Ordered provider list plus its reverse index.

    Lower rank wins. Providers missing from ``order`` rank after every listed
    provider and among themselves by name, so an unexpected feed still merges
    deterministically instead of failing.
    """

    order: tuple[ProviderName, ...] = DEFAULT_PRIORITY_ORDER
    quality_scores: Mapping[ProviderName, int] = field(
        default_factory=lambda: DEFAULT_QUALITY_SCORES
    )
    _rank: Mapping[ProviderName, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.order:
            raise ValueError("Provider priority must list at least one provider")
        normalized = tuple(str(provider) for provider in self.order)
        duplicates = sorted({name for name in normalized if normalized.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate providers in priority order: {', '.join(duplicates)}")
        object.__setattr__(self, "order", normalized)
        object.__setattr__(
            self, "_rank", MappingProxyType({name: index for index, name in enumerate(normalized)})
        )

    def rank(self, provider: ProviderName | None) -> int:
        if provider is None:
            return len(self.order)
        return self._rank.get(str(provider), len(self.order))

    def is_listed(self, provider: ProviderName) -> bool:
        return str(provider) in self._rank

    def outranks(self, provider: ProviderName, other: ProviderName | None) -> bool:
        """Whether ``provider`` strictly beats ``other``; ``None`` loses to anyone."""

        if other is None:
            return True
        return self.rank(provider) < self.rank(other)

    def ordered(self, providers: Iterable[ProviderName]) -> list[ProviderName]:
        return sorted(providers, key=lambda name: (self.rank(name), str(name)))

    def missing(self, providers: Iterable[ProviderName]) -> list[ProviderName]:
        return sorted({str(name) for name in providers if not self.is_listed(name)})

    def quality_for(self, provider: ProviderName | None) -> int:
        if provider is None:
            return UNKNOWN_QUALITY_SCORE
        return self.quality_scores.get(str(provider), UNKNOWN_QUALITY_SCORE)


DEFAULT_PRIORITY = ProviderPriority()
