"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        LifeStealError: Base exception for all errors raised by the core.
        ConfigurationError: Configuration-related errors.
        ValidationError: Invalid caller arguments.
        LedgerError, DispatchError: Engine faults.
        StorageError, PersistenceError: Durable storage faults.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        log_context: Bind context for a with block.
"""

from __future__ import annotations

from lifesteal.core.exceptions import (
    ConfigurationError,
    DispatchError,
    LedgerError,
    LifeStealError,
    PersistenceError,
    StorageError,
    ValidationError,
)
from lifesteal.core.logging import (
    bind_context,
    clear_context,
    log_context,
    configure_logging,
    get_logger,
)
from lifesteal.core.config import (
    DispatchSettings,
    PolicySettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)


__all__ = [
    # Exceptions
    "LifeStealError",
    "ConfigurationError",
    "ValidationError",
    "LedgerError",
    "DispatchError",
    "StorageError",
    "PersistenceError",
    # Configuration
    "Settings",
    "PolicySettings",
    "StorageSettings",
    "DispatchSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
