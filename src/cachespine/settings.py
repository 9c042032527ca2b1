"""
Centralized settings for cachespine.

All fields can be set via ``CACHESPINE_*`` environment variables (e.g.
``CACHESPINE_BACKEND=redis``) or a ``.env`` file in the working directory.

Examples:
    >>> import os
    >>> os.environ["CACHESPINE_BACKEND"] = "redis"
    >>> get_settings(_force_reload=True).backend
    <StoreBackend.REDIS: 'redis'>
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(str, Enum):
    """Store backends buildable from settings."""

    MEMORY = "memory"
    EVICTING = "evicting"
    REDIS = "redis"
    MONGO = "mongo"


class SerializerKind(str, Enum):
    JSON = "json"
    PICKLE = "pickle"


class CacheSettings(BaseSettings):
    """cachespine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CACHESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Cache ────────────────────────────────────────────────────
    backend: StoreBackend = Field(default=StoreBackend.MEMORY)
    key_prefix: str = Field(default="", description="Namespace prefix for every physical key")
    strict_namespace: bool = Field(default=False)
    dedupe_dirty: bool = Field(default=True)

    # ── Memory ───────────────────────────────────────────────────
    memory_max_size: int = Field(default=10_000, ge=1)
    memory_default_ttl_seconds: int | None = Field(default=3600)

    # ── Redis ────────────────────────────────────────────────────
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_default_ttl_seconds: int | None = Field(default=None)
    redis_serializer: SerializerKind = Field(default=SerializerKind.JSON)
    redis_scan_count: int = Field(default=500, ge=1)

    # ── Mongo ────────────────────────────────────────────────────
    mongo_url: str = Field(default="mongodb://localhost:27017")
    mongo_database: str = Field(default="cache")
    mongo_collection: str = Field(default="cache")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="json or console")


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, CacheSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CacheSettings:
    """Load, validate, and cache a :class:`CacheSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = CacheSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "StoreBackend",
    "SerializerKind",
    "CacheSettings",
    "get_settings",
    "clear_settings_cache",
]
