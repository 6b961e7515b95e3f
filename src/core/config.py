"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables. Every setting has a safe default: the service boots with no
environment at all and runs its key-value store in memory mode.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic
- Remote store credentials are optional (absence selects memory mode)

Usage:
    from src.core.config import settings

    # Access config
    ttl = settings.session_ttl_seconds

    # Store mode detection
    if settings.redis_configured:
        # Remote Redis is used
"""

import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.enums import Environment


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )

    # Core application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, detailed errors)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata
    app_name: str = Field(
        default="NeuroQuest",
        description="Application name (also used to derive the session cookie name)",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API v1 route prefix",
    )

    # Key-value store configuration (Redis)
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL (e.g., rediss://host:6379). "
        "Memory mode is used when this or redis_token is missing.",
    )
    redis_token: str | None = Field(
        default=None,
        description="Redis access token (sent as the connection password)",
    )
    redis_socket_timeout: float = Field(
        default=5.0,
        description="Connect and per-command timeout for Redis, in seconds",
    )
    redis_max_connections: int = Field(
        default=50,
        description="Connection pool size for the Redis client",
    )

    # Rate limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Master switch for rate limiting. Rate limiting is also "
        "disabled whenever the store runs in memory mode.",
    )

    # Sessions
    session_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Server-side session lifetime and cookie Max-Age (seconds)",
    )

    # Maintenance
    cron_secret: str | None = Field(
        default=None,
        description="Shared secret required in X-Cron-Secret for maintenance "
        "endpoints (unset = no check)",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalize and validate the log level name.

        Args:
            v: Log level name.

        Returns:
            str: Upper-cased level name.

        Raises:
            ValueError: If the level is not a standard logging level.
        """
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log_level: {v}")
        return level

    @field_validator("session_ttl_seconds")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        """
        Validate session lifetime is positive.

        Args:
            v: Session TTL in seconds.

        Returns:
            int: Validated TTL.

        Raises:
            ValueError: If TTL is not positive.
        """
        if v <= 0:
            raise ValueError("session_ttl_seconds must be positive")
        return v

    @field_validator("redis_url", "redis_token")
    @classmethod
    def blank_as_none(cls, v: str | None) -> str | None:
        """
        Treat empty credential strings as unset.

        Args:
            v: Raw value from the environment.

        Returns:
            str | None: Stripped value, or None when blank.
        """
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @property
    def redis_configured(self) -> bool:
        """
        Check if remote store credentials are complete.

        Returns:
            bool: True when both URL and token are set.
        """
        return bool(self.redis_url and self.redis_token)

    @property
    def session_cookie_name(self) -> str:
        """
        Session cookie name derived from the app name.

        Returns:
            str: e.g. "neuroquest_session".
        """
        slug = re.sub(r"[^a-z0-9]+", "_", self.app_name.lower()).strip("_")
        return f"{slug or 'app'}_session"

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing environment.

        Returns:
            bool: True if environment is TESTING, False otherwise.
        """
        return self.environment == Environment.TESTING

    @property
    def is_ci(self) -> bool:
        """
        Check if running in CI environment.

        Returns:
            bool: True if environment is CI, False otherwise.
        """
        return self.environment == Environment.CI

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
