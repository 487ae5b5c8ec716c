"""Pydantic models and enums shared by the LifeSteal engine.

Exports:
    Enums:
        EliminationMode, ActorState, DeathCause, TokenDirection,
        RejectionReason, NotificationKind.

    Identity:
        ActorId, actor_key, lock_order.

    Policy:
        PolicyConfig: Immutable limits snapshot.
        PolicyHolder: Atomic holder for the active snapshot.

    Results:
        TransferResult, WithdrawResult, DeathOutcome, TokenUseOutcome.
"""

from __future__ import annotations

from lifesteal.models.enums import (
    ActorState,
    DeathCause,
    EliminationMode,
    NotificationKind,
    RejectionReason,
    TokenDirection,
)
from lifesteal.models.identity import ActorId, ActorLike, actor_key, lock_order
from lifesteal.models.policy import PolicyConfig, PolicyHolder
from lifesteal.models.results import (
    DeathOutcome,
    TokenUseOutcome,
    TransferResult,
    WithdrawResult,
)


__all__ = [
    # Enums
    "ActorState",
    "DeathCause",
    "EliminationMode",
    "NotificationKind",
    "RejectionReason",
    "TokenDirection",
    # Identity
    "ActorId",
    "ActorLike",
    "actor_key",
    "lock_order",
    # Policy
    "PolicyConfig",
    "PolicyHolder",
    # Results
    "DeathOutcome",
    "TokenUseOutcome",
    "TransferResult",
    "WithdrawResult",
]
