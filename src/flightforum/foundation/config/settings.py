"""Environment-based configuration using pydantic-settings.

Settings are read once at the application edge and handed to the client as
an explicit ``ClientConfig``; library code never reads them implicitly.

Example:
    >>> from flightforum.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.http.mcp_server_url
    'http://localhost:8000'

    # Or with environment variables:
    # MCP_SERVER_URL=http://tools.internal:8000
    # FLIGHTFORUM_FALLBACK_HOST=localhost
    # FLIGHTFORUM_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, PositiveFloat, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_HOSTS: frozenset[str] = frozenset({"localhost", "127.0.0.1", "::1"})


class HttpSettings(BaseSettings):
    """Tool-call transport configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FLIGHTFORUM_HTTP_",
        extra="ignore",
        populate_by_name=True,
    )

    mcp_server_url: str = Field(
        default="http://localhost:8000",
        validation_alias=AliasChoices("FLIGHTFORUM_HTTP_MCP_SERVER_URL", "MCP_SERVER_URL"),
        description="Base URL; calls go to {mcp_server_url}/call_tool",
    )
    timeout: PositiveFloat = Field(default=10.0, description="Transport timeout in seconds")

    @field_validator("mcp_server_url", mode="after")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class FallbackSettings(BaseSettings):
    """Mock-fallback configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FLIGHTFORUM_FALLBACK_",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Synthesize data when the live call fails")
    host: str = Field(default="", description="Execution host name; local hosts skip the live call")

    @computed_field
    @property
    def is_local(self) -> bool:
        """Whether the execution host is a local/development host."""
        return self.host.lower() in LOCAL_HOSTS


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FLIGHTFORUM_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class FlightForumSettings(BaseSettings):
    """Root settings.

    Example environment variables:
        FLIGHTFORUM_HTTP_TIMEOUT=5
        FLIGHTFORUM_FALLBACK_ENABLED=false
    """

    model_config = SettingsConfigDict(
        env_prefix="FLIGHTFORUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    fallback: FallbackSettings = Field(default_factory=FallbackSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> FlightForumSettings:
    """Get the settings instance (cached)."""
    return FlightForumSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
