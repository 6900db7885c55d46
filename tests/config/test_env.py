from __future__ import annotations

import pytest

from rollcall.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_bool,
    env_float,
    env_int,
    optional_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_optional_env_var_strips_and_treats_blank_as_unset(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PRESENT_VAR", "  token ")
    monkeypatch.setenv("BLANK_VAR", " ")

    assert optional_env_var("PRESENT_VAR") == "token"
    assert optional_env_var("BLANK_VAR") is None


def test_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WORKERS", raising=False)
    assert env_int("WORKERS", 4) == 4

    monkeypatch.setenv("WORKERS", "8")
    assert env_int("WORKERS", 4, minimum=1) == 8

    monkeypatch.setenv("WORKERS", "0")
    with pytest.raises(ConfigurationError, match=">= 1"):
        env_int("WORKERS", 4, minimum=1)

    monkeypatch.setenv("WORKERS", "many")
    with pytest.raises(ConfigurationError, match="must be an integer"):
        env_int("WORKERS", 4)


def test_env_float(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMEOUT", "2.5")
    assert env_float("TIMEOUT", 5.0) == 2.5

    monkeypatch.setenv("TIMEOUT", "-1")
    with pytest.raises(ConfigurationError, match="must be positive"):
        env_float("TIMEOUT", 5.0)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), ("on", True), ("0", False), ("FALSE", False), ("off", False)],
)
def test_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("FLAG", raw)

    assert env_bool("FLAG", not expected) is expected


def test_env_bool_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="must be a boolean"):
        env_bool("FLAG", True)
