"""Result models returned by ledger, converter and service operations.

Clamping and rejection are ordinary outcomes, so they travel back to the
caller in these models rather than as exceptions. The host uses the
reported amounts (not the requested ones) when composing messages.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from lifesteal.models.enums import DeathCause, RejectionReason, TokenDirection


class TransferResult(BaseModel):
    """Outcome of a two-sided kill transfer.

    Each leg is clamped independently, so one side may be absorbed by a
    limit while the other still applies in full.

    Attributes:
        requested_loss: Loss asked of the loser.
        requested_gain: Gain offered to the gainer.
        actual_loss: Life points the loser actually lost. Negative only when
            a reload moved the floor above the loser's old balance.
        actual_gain: Life points the gainer actually received. Negative only
            when a reload moved the ceiling below the gainer's old balance.
    """

    model_config = ConfigDict(frozen=True)

    requested_loss: float = Field(ge=0)
    requested_gain: float = Field(ge=0)
    actual_loss: float
    actual_gain: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def loss_clamped(self) -> bool:
        """Whether the floor absorbed part of the loss."""
        return self.actual_loss < self.requested_loss

    @computed_field  # type: ignore[prop-decorator]
    @property
    def gain_clamped(self) -> bool:
        """Whether the ceiling absorbed part of the gain."""
        return self.actual_gain < self.requested_gain


class WithdrawResult(BaseModel):
    """Outcome of converting balance into tokens.

    Attributes:
        requested_count: Tokens asked for.
        minted_count: Tokens the host should hand to the actor.
        debited: Life points removed from the balance.
        rejected: True when nothing was minted.
        reason: Why the withdraw was rejected, if it was.
    """

    model_config = ConfigDict(frozen=True)

    requested_count: int = Field(gt=0)
    minted_count: int = Field(default=0, ge=0)
    debited: float = Field(default=0.0, ge=0)
    rejected: bool = False
    reason: RejectionReason | None = None

    @classmethod
    def rejection(cls, requested_count: int, reason: RejectionReason) -> WithdrawResult:
        """Build a rejected result that minted and debited nothing."""
        return cls(requested_count=requested_count, rejected=True, reason=reason)


class DeathOutcome(BaseModel):
    """What a death event did to the victim and killer.

    Attributes:
        victim: The actor who died.
        killer: The killing actor for player kills.
        cause: Resolved cause of death.
        ignored: True when policy skipped the event entirely.
        loss: Life points the victim actually lost.
        gain: Life points the killer actually gained.
        eliminated: True when this event eliminated the victim.
    """

    model_config = ConfigDict(frozen=True)

    victim: str
    killer: str | None = None
    cause: DeathCause
    ignored: bool = False
    loss: float = Field(default=0.0, ge=0)
    gain: float = Field(default=0.0, ge=0)
    eliminated: bool = False


class TokenUseOutcome(BaseModel):
    """What a token-use event did.

    Attributes:
        actor: The actor using tokens.
        direction: Withdraw or deposit.
        token_count: Tokens involved in the request.
        life_points: Balance change actually applied (debit or credit).
        rejected: True when a withdraw minted nothing.
        reason: Rejection reason for a withdraw.
    """

    model_config = ConfigDict(frozen=True)

    actor: str
    direction: TokenDirection
    token_count: int = Field(gt=0)
    life_points: float = Field(default=0.0, ge=0)
    rejected: bool = False
    reason: RejectionReason | None = None


__all__ = [
    "TransferResult",
    "WithdrawResult",
    "DeathOutcome",
    "TokenUseOutcome",
]
