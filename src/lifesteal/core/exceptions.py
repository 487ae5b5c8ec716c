"""Custom exception hierarchy for the LifeSteal core.

Domain outcomes such as clamping, withdraw rejection or an idempotent
elimination are reported through return values. The exceptions defined
here are reserved for programming errors (bad arguments, invalid
configuration) and for hard faults at the storage boundary. All of them
inherit from LifeStealError so the host can catch everything the core
raises at a single boundary.

Example:
    >>> from lifesteal.core.exceptions import PersistenceError
    >>> raise PersistenceError("Could not save", collection="eliminated-players")
"""

from __future__ import annotations

from typing import Any


class LifeStealError(Exception):
    """Base exception for all LifeSteal errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(LifeStealError):
    """Raised when settings or a policy snapshot are missing or inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with the offending key.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(LifeStealError):
    """Raised when a caller passes an argument outside its valid domain.

    Distinct from clamping: a token count of zero is a caller bug, an
    oversized balance is simply clamped.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the argument that failed validation.
            invalid_value: The rejected value.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Engine Exceptions
# =============================================================================


class LedgerError(LifeStealError):
    """Base exception for unexpected engine faults.

    Never raised for clamping, rejection or no-op transitions.
    """

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ledger error with actor context.

        Args:
            message: Human-readable error description.
            actor_id: Identity of the actor involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if actor_id:
            combined_details["actor_id"] = actor_id
        super().__init__(message, details=combined_details)


class DispatchError(LedgerError):
    """Raised when work is submitted to a dispatcher that has shut down."""


# =============================================================================
# Storage Exceptions
# =============================================================================


class StorageError(LifeStealError):
    """Base exception for durable storage faults."""


class PersistenceError(StorageError):
    """Raised when the elimination store cannot read or write its backing file.

    The in-memory state stays authoritative for the rest of the process
    lifetime when a write fails.
    """

    def __init__(
        self,
        message: str,
        *,
        collection: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with storage location.

        Args:
            message: Human-readable error description.
            collection: Name of the persisted collection.
            path: Path of the database file.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if collection:
            combined_details["collection"] = collection
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


__all__ = [
    "LifeStealError",
    "ConfigurationError",
    "ValidationError",
    "LedgerError",
    "DispatchError",
    "StorageError",
    "PersistenceError",
]
