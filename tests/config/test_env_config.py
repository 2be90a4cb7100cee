from __future__ import annotations

import pytest

from econcal.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_int,
    env_list,
    first_env_var,
)


def test_first_env_var_falls_back_in_order(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRIMARY_KEY", "   ")
    monkeypatch.setenv("SECONDARY_KEY", " fallback ")

    assert first_env_var(["PRIMARY_KEY", "SECONDARY_KEY"]) == "fallback"


def test_first_env_var_raises_when_all_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PRIMARY_KEY", raising=False)
    monkeypatch.delenv("SECONDARY_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="PRIMARY_KEY or SECONDARY_KEY"):
        first_env_var(["PRIMARY_KEY", "SECONDARY_KEY"])


def test_env_int_uses_default_and_parses(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert env_int("EXAMPLE_INT", 7) == 7

    monkeypatch.setenv("EXAMPLE_INT", "12")
    assert env_int("EXAMPLE_INT", 7) == 12


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "twelve")

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT"):
        env_int("EXAMPLE_INT", 7)


def test_env_list_splits_and_strips(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_LIST", " a, ,b ,c")

    assert env_list("EXAMPLE_LIST", ("z",)) == ("a", "b", "c")
    monkeypatch.delenv("EXAMPLE_LIST")
    assert env_list("EXAMPLE_LIST", ("z",)) == ("z",)
