"""Typed readers for environment variables."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def _read(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def first_env_var(names: Sequence[str]) -> str:
    """Return the first non-blank variable among ``names``, e.g. a key and its legacy alias."""

    for name in names:
        value = _read(name)
        if value is not None:
            return value
    raise MissingConfigurationError(f"Missing configuration for: {' or '.join(names)}")


def env_int(name: str, default: int) -> int:
    value = _read(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def env_list(name: str, default: Sequence[str]) -> tuple[str, ...]:
    """Split a comma separated variable, dropping blank items."""

    value = _read(name)
    if value is None:
        return tuple(default)
    return tuple(item.strip() for item in value.split(",") if item.strip())
