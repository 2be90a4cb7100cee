"""Normalization helpers that turn provider text into comparable keys.

Responsibilities of this stage:
- fold cosmetic differences between provider event names
- canonicalize currency codes
- derive deterministic event ids

All functions are total: they never raise for string input.
"""

from __future__ import annotations

import hashlib
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

_TRADEMARK_GLYPHS = re.compile(r"[™®]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")
_MONTH_OVER_MONTH = re.compile(r"\b(?:m/m|m-o-m)\b")
_TOKEN_SPLIT = re.compile(r"\s+|-")
_CURRENCY_PREFIX = "CURRENCY_"
_EVENT_ID_LENGTH = 32


def normalize_event_name(raw: str | None) -> str:
    """Return the matching key for an event name.

    ``"Core CPI m/m"`` and ``"CORE CPI M-O-M"`` both become ``"core cpi mom"``.
    """

    if not raw:
        return ""
    text = _TRADEMARK_GLYPHS.sub("", raw)
    text = text.lower()
    text = _WHITESPACE.sub(" ", text).strip()
    text = _HYPHEN_RUNS.sub("-", text)
    return _MONTH_OVER_MONTH.sub("mom", text)


def normalize_currency(raw: str | None) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip().upper()
    text = text.removeprefix(_CURRENCY_PREFIX)
    return text or None


def name_tokens(name: str | None) -> frozenset[str]:
    normalized = normalize_event_name(name)
    return frozenset(token for token in _TOKEN_SPLIT.split(normalized) if token)


def compute_event_id(
    *,
    currency: str | None,
    normalized_name: str,
    scheduled_at: datetime,
) -> str:
    """Deterministic id from ``currency|name|epoch millis``."""

    code = (currency or "N/A").upper()
    name = normalized_name.strip().lower()
    millis = int(scheduled_at.timestamp() * 1000)
    key = f"{code}|{name}|{millis}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:_EVENT_ID_LENGTH]
