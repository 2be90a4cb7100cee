"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, env_list, first_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .jblanked import (
    JBLANKED_FEEDS,
    JBlankedConfig,
    default_jblanked_resilience,
    get_jblanked_config,
)
from .logging import configure_logging
from .nfs import NfsConfig, get_nfs_config
from .reconciliation import get_reconciliation_config
from .storage import (
    StorageConfig,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "JBLANKED_FEEDS",
    "CacheConfig",
    "ConfigurationError",
    "JBlankedConfig",
    "MissingConfigurationError",
    "NfsConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "default_jblanked_resilience",
    "env_int",
    "env_list",
    "first_env_var",
    "get_database_uri",
    "get_http_cache_path",
    "get_jblanked_config",
    "get_nfs_config",
    "get_reconciliation_config",
    "get_storage_config",
]
