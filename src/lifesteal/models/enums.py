"""Enumeration types for the LifeSteal core.

These enums are the closed vocabularies shared between the engine and the
host: elimination modes, death causes, token directions, rejection reasons
and the notification kinds the host turns into user-visible messages.
"""

from __future__ import annotations

from enum import StrEnum


class EliminationMode(StrEnum):
    """Consequence applied to an actor whose balance reaches the floor.

    The host configuration historically used ``BAN`` and ``SPECTATOR``;
    both spellings are accepted, case-insensitively.
    """

    EXILE = "exile"
    RESTRICT = "restrict"

    @classmethod
    def _missing_(cls, value: object) -> EliminationMode | None:
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        aliases = {"ban": cls.EXILE, "kick": cls.EXILE, "spectator": cls.RESTRICT}
        if normalized in aliases:
            return aliases[normalized]
        for member in cls:
            if member.value == normalized:
                return member
        return None


class ActorState(StrEnum):
    """Elimination state of an actor."""

    ACTIVE = "active"
    ELIMINATED = "eliminated"


class DeathCause(StrEnum):
    """What the host reports as the cause of an actor's death."""

    PLAYER = "player"
    MONSTER = "monster"
    NATURAL = "natural"


class TokenDirection(StrEnum):
    """Direction of a token exchange."""

    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"


class RejectionReason(StrEnum):
    """Why a withdraw minted nothing."""

    INSUFFICIENT_BALANCE = "insufficient_balance"
    DISABLED = "disabled"


class NotificationKind(StrEnum):
    """Event tags passed to the host's notify hook.

    The core only supplies the tag and structured amounts; wording and
    formatting belong to the host.
    """

    # Death and kill events
    KILL_LOSS = "kill_loss"
    KILL_GAIN = "kill_gain"
    NATURAL_LOSS = "natural_loss"
    MONSTER_LOSS = "monster_loss"
    FLOOR_REACHED = "floor_reached"
    CEILING_REACHED = "ceiling_reached"

    # Lifecycle
    ELIMINATED = "eliminated"
    REVIVED = "revived"
    REVIVAL_PERFORMED = "revival_performed"
    REVIVAL_REJECTED = "revival_rejected"

    # Tokens
    TOKENS_WITHDRAWN = "tokens_withdrawn"
    WITHDRAW_REJECTED = "withdraw_rejected"
    TOKENS_DEPOSITED = "tokens_deposited"

    # Administrative changes
    BALANCE_CHANGED = "balance_changed"


__all__ = [
    "EliminationMode",
    "ActorState",
    "DeathCause",
    "TokenDirection",
    "RejectionReason",
    "NotificationKind",
]
