"""
Centralized settings for seedgate.

Manifesto:
    The gate's behavior must be explicit and environment-driven, but it must
    never be *disabled* by configuration: settings choose how the gate
    decides, not whether it runs.

    - **Pydantic validation:** Unknown modes fail at startup
    - **Environment-driven:** ``SEEDGATE_*`` variables and ``.env`` files
    - **Cached:** ``get_settings()`` returns a single validated instance

Fields
──────
build_profile        : ``release`` (default) or ``debug``; debug short-circuits
                       the classifier to "allowed"
scope_mode           : ``context`` (contextvars counter, default) or ``process``
require_scope        : when True, an open suppression scope is required even in
                       allowed contexts
inspect_call_stack   : enable the call-stack migration signal
extra_test_modules   : additional module names treated as test frameworks
extra_hosting_markers: additional env vars treated as production hosting markers
log_level, log_format: structlog configuration

Tags:
    seedgate, configuration, settings, pydantic, caching
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuildProfile(str, Enum):
    RELEASE = "release"
    DEBUG = "debug"


class ScopeMode(str, Enum):
    CONTEXT = "context"
    PROCESS = "process"


class SeedGateSettings(BaseSettings):
    """seedgate configuration, read from ``SEEDGATE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SEEDGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Classifier ───────────────────────────────────────────────
    build_profile: BuildProfile = Field(default=BuildProfile.RELEASE)
    inspect_call_stack: bool = Field(default=True)
    extra_test_modules: list[str] = Field(default_factory=list)
    extra_hosting_markers: list[str] = Field(default_factory=list)

    # ── Gate ─────────────────────────────────────────────────────
    scope_mode: ScopeMode = Field(default=ScopeMode.CONTEXT)
    require_scope: bool = Field(default=True)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("build_profile", "scope_mode", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value

    @property
    def is_debug_build(self) -> bool:
        return self.build_profile == BuildProfile.DEBUG


_settings_cache: dict[str, SeedGateSettings] = {}


def get_settings(*, _force_reload: bool = False) -> SeedGateSettings:
    """Load, validate, and cache a :class:`SeedGateSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = SeedGateSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (mainly for testing)."""
    _settings_cache.clear()


__all__ = [
    "BuildProfile",
    "ScopeMode",
    "SeedGateSettings",
    "get_settings",
    "clear_settings_cache",
]
