"""Token-set similarity between event names."""

from __future__ import annotations

from .normalize import name_tokens


def similarity(name_a: str | None, name_b: str | None) -> float:
    """Jaccard index of the normalized name tokens, in ``[0, 1]``.

    Two empty names are equal; one empty name matches nothing.
    """

    tokens_a = name_tokens(name_a)
    tokens_b = name_tokens(name_b)
    if not tokens_a and not tokens_b:
        return 1.0
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)
