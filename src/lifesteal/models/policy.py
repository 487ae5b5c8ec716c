"""Policy snapshot consumed by the ledger, converter and elimination engine.

A PolicyConfig is immutable. Reloading configuration builds a new snapshot
and swaps it into the PolicyHolder in one step, so an operation that reads
``holder.current`` once sees a consistent set of limits for its whole
duration and never a half-applied reload.

Example:
    >>> holder = PolicyHolder(PolicyConfig(floor=2.0, ceiling_enabled=True, ceiling=40.0))
    >>> holder.current.clamp(50.0)
    40.0
"""

from __future__ import annotations

import threading
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from lifesteal.core.constants import (
    DEFAULT_BALANCE,
    DEFAULT_FLOOR,
    DEFAULT_REVIVAL_BALANCE,
    ELIMINATION_EPSILON,
)
from lifesteal.core.exceptions import ConfigurationError
from lifesteal.core.logging import get_logger
from lifesteal.models.enums import EliminationMode


logger = get_logger(__name__)


class PolicyConfig(BaseModel):
    """Immutable snapshot of the tunable life economy limits.

    Attributes:
        floor: Minimum balance; reaching it triggers elimination when enabled.
        ceiling_enabled: Whether ``ceiling`` is enforced.
        ceiling: Maximum balance, meaningful only when enabled.
        natural_loss: Life points lost on a natural death.
        monster_loss: Life points lost when killed by a non-player.
        kill_loss: Life points the victim loses on a player kill.
        kill_gain: Life points the killer gains on a player kill.
        token_exchange_rate: Life points represented by one token.
        elimination_enabled: Whether reaching the floor eliminates.
        elimination_mode: Consequence applied on elimination.
        revival_balance: Balance set when an actor is revived.
        default_balance: Balance of an actor with no record yet.
        withdraw_enabled: Whether balance may be withdrawn as tokens.
        revival_enabled: Whether revival requests from players are honoured.
        override_keep_inventory: Apply death penalties even in worlds that
            keep inventory on death.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    floor: float = Field(default=DEFAULT_FLOOR, ge=0, description="Minimum balance")
    ceiling_enabled: bool = Field(default=False, description="Enforce the ceiling")
    ceiling: float = Field(default=0.0, ge=0, description="Maximum balance")

    natural_loss: float = Field(default=2.0, ge=0, description="Loss on natural death")
    monster_loss: float = Field(default=2.0, ge=0, description="Loss when killed by a mob")
    kill_loss: float = Field(default=2.0, ge=0, description="Victim loss on a player kill")
    kill_gain: float = Field(default=2.0, ge=0, description="Killer gain on a player kill")

    token_exchange_rate: float = Field(default=2.0, gt=0, description="Life points per token")

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
    default_balance: float = Field(
        default=DEFAULT_BALANCE,
        gt=0,
        description="Balance of an actor with no record",
    )

    withdraw_enabled: bool = Field(default=True, description="Allow withdrawing tokens")
    revival_enabled: bool = Field(default=True, description="Allow player revival requests")
    override_keep_inventory: bool = Field(
        default=False,
        description="Apply penalties when the world keeps inventory",
    )

    def __init__(self, **data: Any) -> None:
        """Build a snapshot, reporting any invalid limit as a ConfigurationError.

        Raises:
            ConfigurationError: If a field is unknown, out of range or
                inconsistent with the others.
        """
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            errors = exc.errors()
            config_key = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
            raise ConfigurationError(
                f"Invalid policy: {errors[0]['msg'] if errors else exc}",
                config_key=config_key,
                details={"error_count": len(errors)},
            ) from exc

    @field_validator("elimination_mode", mode="before")
    @classmethod
    def parse_elimination_mode(cls, value: object) -> object:
        """Accept legacy and mixed-case mode names.

        Args:
            value: Raw configured mode.

        Returns:
            An EliminationMode when the name is recognised, else the raw value.
        """
        if isinstance(value, str):
            return EliminationMode(value)
        return value

    @model_validator(mode="after")
    def validate_limits(self) -> "PolicyConfig":
        """Ensure the ceiling, when enabled, lies above the floor.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If ``ceiling <= floor`` while enabled.
        """
        if self.ceiling_enabled and self.ceiling <= self.floor:
            raise ConfigurationError(
                f"ceiling ({self.ceiling}) must be greater than floor ({self.floor})",
                config_key="ceiling",
            )
        return self

    @property
    def elimination_threshold(self) -> float:
        """Balance at or below which an actor is eliminated."""
        return self.floor + ELIMINATION_EPSILON

    def clamp(self, value: float) -> float:
        """Clamp a candidate balance into ``[floor, ceiling]``.

        Args:
            value: Candidate balance.

        Returns:
            The balance that may actually be stored.
        """
        clamped = max(self.floor, value)
        if self.ceiling_enabled:
            clamped = min(self.ceiling, clamped)
        return clamped

    def tokens_to_life_points(self, token_count: int) -> float:
        """Life points represented by ``token_count`` tokens."""
        return token_count * self.token_exchange_rate


class PolicyHolder:
    """Holds the active PolicyConfig and swaps it atomically on reload.

    Readers take ``current`` once per operation. ``replace`` never mutates
    the old snapshot, so in-flight operations finish under the limits they
    started with.
    """

    def __init__(self, policy: PolicyConfig | None = None) -> None:
        """Initialize the holder.

        Args:
            policy: Initial snapshot; defaults are used when omitted.
        """
        self._policy = policy or PolicyConfig()
        self._lock = threading.Lock()

    @property
    def current(self) -> PolicyConfig:
        """The active policy snapshot."""
        return self._policy

    def replace(self, policy: PolicyConfig) -> PolicyConfig:
        """Install a new snapshot.

        Existing balances are not rebalanced; only later operations see the
        new limits.

        Args:
            policy: The new snapshot.

        Returns:
            The snapshot that was replaced.
        """
        with self._lock:
            previous = self._policy
            self._policy = policy

        logger.info(
            "Policy reloaded",
            floor=policy.floor,
            ceiling=policy.ceiling if policy.ceiling_enabled else None,
            elimination_enabled=policy.elimination_enabled,
            elimination_mode=policy.elimination_mode.value,
        )
        return previous


__all__ = [
    "PolicyConfig",
    "PolicyHolder",
]
