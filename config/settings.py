"""
Configuration management for the session store.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are loaded from environment variables or .env files,
with environment-specific files layered on top of the base .env file.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Driver names understood by the session directory
SUPPORTED_SESSION_DRIVERS = ("database", "redis-session")


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    Files are loaded in order, with later files overriding earlier ones.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }

    env_specific_file = env_file_map.get(environment, ".env.development")

    return (".env", env_specific_file)


class Settings(BaseSettings):
    """
    Session store settings loaded from environment variables.

    The session driver is normalized but deliberately not restricted to the
    supported values: the session directory is responsible for reporting an
    unsupported driver, softly from some operations and loudly from others.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Session Configuration
    session_driver: str = Field(
        default="redis-session",
        description="Session driver: 'redis-session' or 'database'"
    )
    session_lifetime: int = Field(
        default=120,
        ge=1,
        le=525600,  # One year
        description="Session lifetime in minutes"
    )
    session_table: str = Field(
        default="sessions",
        description="Table holding sessions for the database driver"
    )
    session_connection: Optional[str] = Field(
        default=None,
        description="Connection URL override used only by the session store"
    )

    # Redis Configuration
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for session storage"
    )
    redis_prefix: str = Field(
        default="",
        description="Connection-level key prefix applied to every Redis key"
    )
    cache_prefix: str = Field(
        default="session_cache:",
        description="Store-level key prefix applied to session keys"
    )

    # Database Configuration
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy database URL for the database driver"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("session_driver")
    @classmethod
    def normalize_session_driver(cls, v: str) -> str:
        """Normalize the driver name without rejecting unknown drivers."""
        return v.strip().lower()

    @field_validator("session_table")
    @classmethod
    def validate_session_table(cls, v: str) -> str:
        """Validate that session_table is not empty."""
        if not v or not v.strip():
            raise ValueError("session_table cannot be empty")
        return v.strip()

    @field_validator("redis_url", "session_connection")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that Redis URLs use a redis scheme."""
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss:// or unix://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @model_validator(mode="after")
    def validate_session_store_config(self) -> "Settings":
        """Validate that the selected driver has a backing store outside development."""
        if self.environment == Environment.DEVELOPMENT:
            # Development may run on the in-memory store
            return self
        if self.session_driver == "redis-session" and not self.session_redis_url:
            raise ValueError(
                "redis_url is required when session_driver is 'redis-session' "
                "in non-development environments"
            )
        if self.session_driver == "database" and not self.database_url:
            raise ValueError(
                "database_url is required when session_driver is 'database' "
                "in non-development environments"
            )
        return self

    @property
    def session_redis_url(self) -> Optional[str]:
        """The Redis URL used by the session store; the connection override wins."""
        return self.session_connection or self.redis_url


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)

    existing_env_files = [env_file for env_file in env_files if Path(env_file).exists()]
    if not existing_env_files:
        existing_env_files = list(env_files)

    try:
        class EnvironmentSettings(Settings):
            model_config = SettingsConfigDict(
                env_file=tuple(existing_env_files),
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        # Extract field-level errors from Pydantic ValidationError
        if hasattr(e, 'errors'):
            for error in e.errors():
                field_name = '.'.join(str(loc) for loc in error.get('loc', []))
                error_type = error.get('type', '')
                error_msg = error.get('msg', str(error))

                if error_type == 'missing':
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name or "settings"] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


# Global settings cache
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None


def validate_startup() -> None:
    """
    Validate the session settings at application startup.

    An unsupported session driver is only logged: the session directory
    decides per operation whether that is an error.

    Raises:
        ConfigurationError: If any required settings are missing or invalid.
    """
    settings = get_settings()

    validation_errors = {}

    if settings.session_driver not in SUPPORTED_SESSION_DRIVERS:
        logger.warning(
            "Session driver is not supported by the session directory",
            extra={"extra_data": {
                "session_driver": settings.session_driver,
                "supported_drivers": list(SUPPORTED_SESSION_DRIVERS),
            }}
        )

    if settings.database_url is not None and "://" not in settings.database_url:
        validation_errors["database_url"] = (
            f"Invalid database URL: {settings.database_url}. "
            "Expected an SQLAlchemy URL such as sqlite:///sessions.db"
        )

    if settings.cache_prefix and "*" in settings.cache_prefix:
        validation_errors["cache_prefix"] = "cache_prefix cannot contain '*'"

    if validation_errors:
        raise ConfigurationError(
            "Configuration validation failed during startup",
            invalid_fields=validation_errors
        )

