"""Tests for settings loading and validation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir

_ENV_NAMES = (
    "PORT",
    "SERVICE_NAME",
    "CACHE_TTL_MS",
    "RATE_WINDOW_MS",
    "RATE_MAX",
    "TZCLOCK_PORT",
    "TZCLOCK_CACHE_TTL_SECONDS",
    "TZCLOCK_RATE_WINDOW_SECONDS",
    "TZCLOCK_RATE_MAX_REQUESTS",
    "TZCLOCK_LOG_LEVEL",
    "TZCLOCK_TRANSITION_STEP_HOURS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = AppSettings(_env_file=None)

    assert settings.port == 3000
    assert settings.cache_ttl_seconds == 10
    assert settings.zone_list_ttl_seconds == 60
    assert settings.rate_window_seconds == 60
    assert settings.rate_max_requests == 120
    assert settings.transition_horizon == timedelta(days=370)
    assert settings.transition_step == timedelta(hours=6)


def test_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TZCLOCK_PORT", "8080")
    monkeypatch.setenv("TZCLOCK_CACHE_TTL_SECONDS", "2.5")
    monkeypatch.setenv("TZCLOCK_LOG_LEVEL", "debug")

    settings = AppSettings(_env_file=None)

    assert settings.port == 8080
    assert settings.cache_ttl_seconds == 2.5
    assert settings.log_level == "DEBUG"


def test_legacy_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "4000")
    monkeypatch.setenv("RATE_MAX", "30")
    monkeypatch.setenv("CACHE_TTL_MS", "5000")
    monkeypatch.setenv("RATE_WINDOW_MS", "120000")

    settings = AppSettings(_env_file=None)

    assert settings.port == 4000
    assert settings.rate_max_requests == 30
    assert settings.cache_ttl_seconds == 5.0
    assert settings.rate_window_seconds == 120.0


def test_prefixed_variable_wins_over_legacy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_TTL_MS", "5000")
    monkeypatch.setenv("TZCLOCK_CACHE_TTL_SECONDS", "7")

    assert AppSettings(_env_file=None).cache_ttl_seconds == 7


def test_env_file(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("TZCLOCK_RATE_MAX_REQUESTS=9\nTZCLOCK_HOST=127.0.0.1\n", encoding="utf-8")

    settings = AppSettings(_env_file=str(env_file))

    assert settings.rate_max_requests == 9
    assert settings.host == "127.0.0.1"


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("port", 0),
        ("cache_ttl_seconds", 0),
        ("rate_max_requests", 0),
        ("transition_step_hours", 24),
        ("log_level", "LOUD"),
    ],
)
def test_invalid_values(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        AppSettings(_env_file=None, **{field: value})


def test_user_config_dir_honours_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_user_config_dir() == tmp_path / "tzclock"
