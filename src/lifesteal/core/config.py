"""Configuration management for the LifeSteal core.

This module provides centralized configuration management using
pydantic-settings, reading environment variables and ``.env`` files. The
policy section is converted into an immutable PolicyConfig snapshot; the
engine never reads settings directly.

Example:
    >>> from lifesteal.core.config import get_settings
    >>> settings = get_settings()
    >>> policy = settings.policy.to_policy()

Environment Variables:
    LIFESTEAL_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    LIFESTEAL_JSON_LOGS: Emit JSON log lines
    LIFESTEAL_POLICY_MIN_BALANCE: Floor balance
    LIFESTEAL_POLICY_MAX_BALANCE: Ceiling balance (0 or less disables it)
    LIFESTEAL_POLICY_ELIMINATION_MODE: exile/restrict (ban/spectator accepted)
    LIFESTEAL_STORAGE_DATABASE_PATH: Path to the SQLite database
    LIFESTEAL_DISPATCH_MAX_WORKERS: Threads draining per-actor queues
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lifesteal.core.constants import (
    DEFAULT_BALANCE,
    DEFAULT_DATABASE_FILENAME,
    DEFAULT_DISPATCH_WORKERS,
    DEFAULT_FLOOR,
    DEFAULT_REVIVAL_BALANCE,
    DISPATCH_SHUTDOWN_TIMEOUT,
    ELIMINATED_COLLECTION,
)
from lifesteal.core.exceptions import ConfigurationError
from lifesteal.models.enums import EliminationMode


if TYPE_CHECKING:
    from lifesteal.models.policy import PolicyConfig


class PolicySettings(BaseSettings):
    """Tunable life economy limits as read from the environment.

    Attributes:
        min_balance: Floor balance.
        max_balance: Ceiling balance; zero or negative disables the ceiling.
        natural_death_loss: Life points lost on a natural death.
        monster_death_loss: Life points lost when killed by a mob.
        pvp_victim_loses: Life points a player-kill victim loses.
        pvp_killer_gains: Life points a killer gains.
        token_value: Life points represented by one token.
        elimination_enabled: Eliminate actors who reach the floor.
        elimination_mode: Consequence applied on elimination.
        revival_balance: Balance restored on revival.
        starting_balance: Balance of an actor with no record.
        withdraw_enabled: Allow withdrawing balance as tokens.
        revival_enabled: Allow revival requests from players.
        override_keep_inventory: Penalise deaths in keep-inventory worlds.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFESTEAL_POLICY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_balance: float = Field(default=DEFAULT_FLOOR, ge=0, description="Floor balance")
    max_balance: float = Field(
        default=0.0,
        description="Ceiling balance, disabled when not positive",
    )
    natural_death_loss: float = Field(default=2.0, ge=0, description="Natural death loss")
    monster_death_loss: float = Field(default=2.0, ge=0, description="Mob kill loss")
    pvp_victim_loses: float = Field(default=2.0, ge=0, description="Victim loss on PvP kill")
    pvp_killer_gains: float = Field(default=2.0, ge=0, description="Killer gain on PvP kill")
    token_value: float = Field(default=2.0, gt=0, description="Life points per token")
    elimination_enabled: bool = Field(default=False, description="Eliminate at the floor")
    elimination_mode: EliminationMode = Field(
        default=EliminationMode.RESTRICT,
        description="Consequence applied on elimination",
    )
    revival_balance: float = Field(
        default=DEFAULT_REVIVAL_BALANCE,
        gt=0,
        description="Balance restored on revival",
    )
    starting_balance: float = Field(
        default=DEFAULT_BALANCE,
        gt=0,
        description="Balance of an actor with no record",
    )
    withdraw_enabled: bool = Field(default=True, description="Allow token withdrawals")
    revival_enabled: bool = Field(default=True, description="Allow player revivals")
    override_keep_inventory: bool = Field(
        default=False,
        description="Penalise deaths in keep-inventory worlds",
    )

    @field_validator("elimination_mode", mode="before")
    @classmethod
    def parse_elimination_mode(cls, value: object) -> object:
        """Accept ``BAN``/``SPECTATOR`` and mixed-case names."""
        if isinstance(value, str):
            return EliminationMode(value)
        return value

    @model_validator(mode="after")
    def validate_ceiling(self) -> "PolicySettings":
        """Ensure an enabled ceiling lies above the floor.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If ``max_balance`` is enabled but not above
                ``min_balance``.
        """
        if self.ceiling_enabled and self.max_balance <= self.min_balance:
            raise ConfigurationError(
                f"max_balance ({self.max_balance}) must be greater than "
                f"min_balance ({self.min_balance})",
                config_key="max_balance",
            )
        return self

    @property
    def ceiling_enabled(self) -> bool:
        """A positive ``max_balance`` enables the ceiling."""
        return self.max_balance > 0

    def to_policy(self) -> PolicyConfig:
        """Build the immutable snapshot the engine runs on.

        Returns:
            A PolicyConfig carrying these settings.
        """
        from lifesteal.models.policy import PolicyConfig

        return PolicyConfig(
            floor=self.min_balance,
            ceiling_enabled=self.ceiling_enabled,
            ceiling=self.max_balance if self.ceiling_enabled else 0.0,
            natural_loss=self.natural_death_loss,
            monster_loss=self.monster_death_loss,
            kill_loss=self.pvp_victim_loses,
            kill_gain=self.pvp_killer_gains,
            token_exchange_rate=self.token_value,
            elimination_enabled=self.elimination_enabled,
            elimination_mode=self.elimination_mode,
            revival_balance=self.revival_balance,
            default_balance=self.starting_balance,
            withdraw_enabled=self.withdraw_enabled,
            revival_enabled=self.revival_enabled,
            override_keep_inventory=self.override_keep_inventory,
        )


class StorageSettings(BaseSettings):
    """Configuration for the durable elimination record.

    Attributes:
        data_path: Directory holding the database file.
        database_path: Path to the SQLite database; derived from
            ``data_path`` when not set.
        collection_name: Key of the eliminated-actor collection.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFESTEAL_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_path: Path = Field(
        default=Path("data"),
        description="Directory for persistent data",
    )
    database_path: Path | None = Field(
        default=None,
        description="Path to SQLite database",
    )
    collection_name: str = Field(
        default=ELIMINATED_COLLECTION,
        min_length=1,
        description="Collection holding eliminated actor ids",
    )

    @property
    def resolved_database_path(self) -> Path:
        """Database file, defaulting to ``data_path/lifesteal.db``."""
        if self.database_path is not None:
            return self.database_path
        return self.data_path / DEFAULT_DATABASE_FILENAME


class DispatchSettings(BaseSettings):
    """Configuration for the per-actor task dispatcher.

    Attributes:
        max_workers: Threads draining per-actor queues.
        shutdown_timeout_seconds: Wait for queued host calls on shutdown.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFESTEAL_DISPATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_workers: int = Field(
        default=DEFAULT_DISPATCH_WORKERS,
        ge=1,
        le=64,
        description="Dispatcher worker threads",
    )
    shutdown_timeout_seconds: float = Field(
        default=DISPATCH_SHUTDOWN_TIMEOUT,
        gt=0,
        le=120,
        description="Seconds to wait for queued work on shutdown",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
        log_file: Optional file that receives a copy of every log line.
        policy: Life economy policy settings.
        storage: Durable storage settings.
        dispatch: Dispatcher settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIFESTEAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="LifeSteal", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    log_file: str | None = Field(default=None, description="Optional log file path")

    policy: PolicySettings = Field(default_factory=PolicySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)

    @property
    def is_production(self) -> bool:
        """True when not in debug mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Hosts call this before re-reading settings on a ``reload`` command.
    """
    get_settings.cache_clear()


__all__ = [
    "PolicySettings",
    "StorageSettings",
    "DispatchSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
