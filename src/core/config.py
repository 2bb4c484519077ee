"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking them
  into the CLI or the HTTP adapter.
- Lets every adapter (HTTP/CLI/oracle) read config the same way.
"""

from __future__ import annotations

import os
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "tzclock"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "tzclock"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "tzclock"
    return Path.home() / ".config" / "tzclock"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


# Variables understood by the original deployment, expressed in milliseconds.
_LEGACY_MS_VARS: dict[str, str] = {
    "CACHE_TTL_MS": "cache_ttl_seconds",
    "RATE_WINDOW_MS": "rate_window_seconds",
}


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without polluting the Core.
    - A single configuration contract for CLI, HTTP and services.
    """

    model_config = SettingsConfigDict(
        env_prefix="TZCLOCK_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    service_name: str = Field(
        default="Simple Time Zone API (DST-aware)",
        min_length=1,
        validation_alias=AliasChoices("TZCLOCK_SERVICE_NAME", "SERVICE_NAME"),
        description="Name reported by /health and the usage page.",
    )
    host: str = Field(
        default="0.0.0.0",
        min_length=1,
        description="Interface the HTTP server binds to.",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("TZCLOCK_PORT", "PORT"),
        description="Listening port.",
    )

    cache_ttl_seconds: float = Field(
        default=10.0,
        gt=0,
        description="TTL for /time and /convert cache entries (seconds).",
    )
    zone_list_ttl_seconds: float = Field(
        default=60.0,
        gt=0,
        description="TTL for the /timezones cache entry (seconds).",
    )

    rate_window_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Length of the fixed admission window (seconds).",
    )
    rate_max_requests: int = Field(
        default=120,
        ge=1,
        validation_alias=AliasChoices("TZCLOCK_RATE_MAX_REQUESTS", "RATE_MAX"),
        description="Maximum requests per client within one window.",
    )
    rate_max_tracked_clients: int = Field(
        default=10_000,
        ge=1,
        description="Above this many client windows, expired ones are swept.",
    )

    transition_horizon_days: int = Field(
        default=370,
        ge=1,
        le=3660,
        description="How far ahead the next DST change is searched (days).",
    )
    transition_step_hours: float = Field(
        default=6.0,
        gt=0,
        lt=24,
        description="Coarse scan step; must stay below the minimum gap between changes.",
    )
    transition_budget_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Wall-clock budget for one transition search.",
    )

    cors_enabled: bool = Field(
        default=True,
        description="Send permissive CORS headers.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level (DEBUG, INFO, WARNING, ...).",
    )

    @model_validator(mode="before")
    @classmethod
    def _apply_legacy_ms_vars(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        for env_name, field_name in _LEGACY_MS_VARS.items():
            raw = os.environ.get(env_name)
            if raw is None or field_name in data:
                continue
            prefixed = f"TZCLOCK_{field_name.upper()}"
            if prefixed in os.environ:
                continue
            data[field_name] = float(raw) / 1000.0
        return data

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def transition_horizon(self) -> timedelta:
        return timedelta(days=self.transition_horizon_days)

    @property
    def transition_step(self) -> timedelta:
        return timedelta(hours=self.transition_step_hours)
