"""Errors raised while reading econcal settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """An environment setting is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """A required setting, such as the JBlanked API key, is unset or blank."""
