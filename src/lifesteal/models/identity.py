"""Actor identity helpers.

An actor is keyed by an opaque, stable string. Hosts that track players by
UUID may pass the UUID directly; it is normalised to its canonical string
form so the same player always maps to the same ledger and store key.
"""

from __future__ import annotations

from typing import TypeAlias
from uuid import UUID

from lifesteal.core.exceptions import ValidationError


ActorId: TypeAlias = str
ActorLike: TypeAlias = str | UUID


def actor_key(actor: ActorLike) -> ActorId:
    """Normalise an actor reference to its ledger key.

    Args:
        actor: Actor identity as a string or UUID.

    Returns:
        The canonical string key.

    Raises:
        ValidationError: If the identity is empty or of an unsupported type.
    """
    if isinstance(actor, UUID):
        return str(actor)
    if not isinstance(actor, str):
        raise ValidationError(
            "Actor identity must be a string or UUID",
            field_name="actor",
            invalid_value=repr(actor),
        )
    key = actor.strip()
    if not key:
        raise ValidationError("Actor identity cannot be blank", field_name="actor")
    return key


def lock_order(first: ActorId, second: ActorId) -> tuple[ActorId, ...]:
    """Return the distinct keys of two actors in lock acquisition order.

    Args:
        first: First actor key.
        second: Second actor key.

    Returns:
        One key if both are the same actor, otherwise both keys sorted.
    """
    if first == second:
        return (first,)
    return tuple(sorted((first, second)))


__all__ = [
    "ActorId",
    "ActorLike",
    "actor_key",
    "lock_order",
]
