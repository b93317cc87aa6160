"""Configuration for kvspine connections."""

from kvspine.config.settings import ConnectionSettings, get_settings, reset_settings

__all__ = ["ConnectionSettings", "get_settings", "reset_settings"]
