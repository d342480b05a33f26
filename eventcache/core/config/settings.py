#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
event platform cache layer. All configuration is centralized here so the
composition root, the Redis backend and the coordinator read the same values.

- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: Platform Team
Date: 2025-12-05
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ONE_MIB = 1024 * 1024


class RedisSettings(BaseSettings):
    """
    Redis connection configuration.

    REDIS_HOST left unset means the cache backend is not configured and
    every cache call goes straight to the origin.
    """

    REDIS_HOST: str | None = Field(default=None, description="Redis server host (unset disables caching)")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")

    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_MAX_RECONNECT_ATTEMPTS: int = Field(
        default=3, description="Reconnect attempts before caching is disabled"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Read-through cache configuration.

    STAGE-C: Cache coordinator configuration
    """

    CACHE_BACKEND: Literal["redis", "memory", "none"] = Field(
        default="redis", description="Key-value backend used by the cache coordinator"
    )
    CACHE_DEFAULT_TTL: int = Field(default=3600, description="TTL used when a call site passes none")
    CACHE_MAX_OBJECT_SIZE: int = Field(
        default=ONE_MIB, description="Largest serialized value (bytes) that will be cached"
    )
    CACHE_FETCH_TIMEOUT: float | None = Field(
        default=None, description="Optional origin fetch timeout in seconds (disabled when unset)"
    )
    CACHE_WARM_ON_STARTUP: bool = Field(default=True, description="Run cache warm-up during startup")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Event Platform Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    ADMIN_TOKEN: str | None = Field(
        default=None, description="Token required on X-Admin-Token for admin cache routes"
    )
    API_HOST: str = Field(default="0.0.0.0", description="Bind host when run directly")
    API_PORT: int = Field(default=8000, description="Bind port when run directly")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from eventcache.core.config.settings import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        max_size = settings.cache.CACHE_MAX_OBJECT_SIZE
    """

    # Redis settings
    REDIS_HOST: str | None = Field(default=None, description="Redis server host (unset disables caching)")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=5.0, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")
    REDIS_MAX_RECONNECT_ATTEMPTS: int = Field(
        default=3, description="Reconnect attempts before caching is disabled"
    )

    # Cache settings
    CACHE_BACKEND: Literal["redis", "memory", "none"] = Field(
        default="redis", description="Key-value backend used by the cache coordinator"
    )
    CACHE_DEFAULT_TTL: int = Field(default=3600, description="TTL used when a call site passes none")
    CACHE_MAX_OBJECT_SIZE: int = Field(
        default=ONE_MIB, description="Largest serialized value (bytes) that will be cached"
    )
    CACHE_FETCH_TIMEOUT: float | None = Field(
        default=None, description="Optional origin fetch timeout in seconds (disabled when unset)"
    )
    CACHE_WARM_ON_STARTUP: bool = Field(default=True, description="Run cache warm-up during startup")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Event Platform Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    ADMIN_TOKEN: str | None = Field(
        default=None, description="Token required on X-Admin-Token for admin cache routes"
    )
    API_HOST: str = Field(default="0.0.0.0", description="Bind host when run directly")
    API_PORT: int = Field(default=8000, description="Bind port when run directly")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("CACHE_MAX_OBJECT_SIZE", "CACHE_DEFAULT_TTL")
    @classmethod
    def validate_positive(cls, v):
        """Size limit and default TTL must be positive."""
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("CACHE_FETCH_TIMEOUT")
    @classmethod
    def validate_fetch_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("must be positive, or unset to disable the timeout")
        return v

    # Grouped views
    @property
    def redis(self) -> "RedisSettings":
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_MAX_RECONNECT_ATTEMPTS=self.REDIS_MAX_RECONNECT_ATTEMPTS,
        )

    @property
    def cache(self) -> "CacheSettings":
        """Get cache settings."""
        return CacheSettings(
            CACHE_BACKEND=self.CACHE_BACKEND,
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_MAX_OBJECT_SIZE=self.CACHE_MAX_OBJECT_SIZE,
            CACHE_FETCH_TIMEOUT=self.CACHE_FETCH_TIMEOUT,
            CACHE_WARM_ON_STARTUP=self.CACHE_WARM_ON_STARTUP,
        )

    @property
    def logging(self) -> "LoggingSettings":
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> "ApplicationSettings":
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            ADMIN_TOKEN=self.ADMIN_TOKEN,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (lazily created)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
