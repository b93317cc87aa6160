"""
Centralized settings for kvspine.

:class:`ConnectionSettings` is the validated, cached source of connection
defaults. Every field can be set via ``KVSPINE_*`` environment variables
(e.g. ``KVSPINE_DRIVER=memory``) or through a ``.env`` file.

Tags:
    kvspine, configuration, settings, pydantic

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectionSettings(BaseSettings):
    """Connection and logging defaults."""

    model_config = SettingsConfigDict(
        env_prefix="KVSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    driver: str = Field(default="redis", description="Driver alias, registered name or dotted path")
    name: str = Field(default="", description="Logical connection name used in logs")
    log: bool = Field(default=False, description="Enable query logging at construction")
    lazy: bool = Field(default=False, description="Defer driver resolution to the first command")

    # ── Backend ──────────────────────────────────────────────────
    url: str | None = Field(default=None, description="redis:// URL; overrides host/port/db")
    host: str = Field(default="localhost")
    port: int = Field(default=6379)
    db: int = Field(default=0)
    password: str | None = Field(default=None)

    # ── Logging ──────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    def connection_config(self) -> dict[str, Any]:
        """Config mapping for ``RedisConnection``.

        Backend keys only appear when they differ from the driver defaults, so
        drivers that take no backend options (``memory``) are not handed
        unexpected ones.
        """
        config: dict[str, Any] = {
            "driver": self.driver,
            "name": self.name,
            "log": self.log,
            "lazy": self.lazy,
        }
        if self.url:
            config["url"] = self.url
        for key, default in (("host", "localhost"), ("port", 6379), ("db", 0), ("password", None)):
            value = getattr(self, key)
            if value != default:
                config[key] = value
        return config


_settings: ConnectionSettings | None = None


def get_settings() -> ConnectionSettings:
    """Get or create the settings instance."""
    global _settings
    if _settings is None:
        _settings = ConnectionSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
