from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest  # noqa: TC002

from econcal.config import storage


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("ECONCAL_DATA_DIR", str(custom))

    config = storage.get_storage_config()

    assert config.data_dir == custom.resolve()
    assert not custom.exists()


def test_storage_config_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("ECONCAL_DATA_DIR", raising=False)
    monkeypatch.setattr(storage.os, "name", "posix")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    config = storage.get_storage_config()

    assert config.data_dir == (tmp_path / storage.APP_DIR_NAME).resolve()


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert storage.get_database_uri() == "sqlite:///override.db"


def test_database_uri_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("ECONCAL_DATA_DIR", str(tmp_path / "data-dir"))

    uri = storage.get_database_uri()

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_http_cache_path_lives_in_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("ECONCAL_DATA_DIR", str(tmp_path))

    assert storage.get_http_cache_path() == tmp_path.resolve() / storage.HTTP_CACHE_FILENAME
