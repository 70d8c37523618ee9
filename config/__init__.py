# Configuration module for the session store
from .settings import (
    Settings,
    Environment,
    ConfigurationError,
    SUPPORTED_SESSION_DRIVERS,
    get_settings,
    clear_settings_cache,
    validate_startup,
)

__all__ = [
    "Settings",
    "Environment",
    "ConfigurationError",
    "SUPPORTED_SESSION_DRIVERS",
    "get_settings",
    "clear_settings_cache",
    "validate_startup",
]
