"""Where econcal keeps its SQLite database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "econcal"
DEFAULT_DB_FILENAME: Final[str] = "econcal.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """A resolved data directory; it is created when a file path is requested."""

    data_dir: Path

    def file_path(self, filename: str) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / filename

    @property
    def database_path(self) -> Path:
        return self.file_path(DEFAULT_DB_FILENAME)

    @property
    def http_cache_path(self) -> Path:
        return self.file_path(HTTP_CACHE_FILENAME)


def _platform_data_home() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    base = os.getenv("XDG_DATA_HOME")
    return Path(base) if base else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    configured = os.getenv("ECONCAL_DATA_DIR")
    data_dir = Path(configured) if configured else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_uri() -> str:
    """``DATABASE_URI`` when set, otherwise a SQLite file in the data directory."""

    configured = os.getenv("DATABASE_URI")
    if configured:
        return configured
    return f"sqlite+pysqlite:///{get_storage_config().database_path}"


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path
