"""Configuration management using pydantic-settings."""

from .settings import (
    LOCAL_HOSTS,
    FallbackSettings,
    FlightForumSettings,
    HttpSettings,
    LoggingSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LOCAL_HOSTS",
    "FallbackSettings",
    "FlightForumSettings",
    "HttpSettings",
    "LoggingSettings",
    "clear_settings_cache",
    "get_settings",
]
