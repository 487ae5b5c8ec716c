"""Host integration seam.

The core never talks to a server, a player list or an inventory directly.
Everything with a side effect outside the ledger goes through a HostHooks
implementation supplied by the embedding host, and every such call is
routed through the HostGateway so it runs on the per-actor dispatcher,
outside any ledger lock.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from lifesteal.core.logging import get_logger
from lifesteal.engine.dispatch import ActorDispatcher
from lifesteal.models.enums import EliminationMode, NotificationKind
from lifesteal.models.identity import ActorId


logger = get_logger(__name__)


@runtime_checkable
class HostHooks(Protocol):
    """Side effects the embedding host performs on the core's behalf.

    Implementations:
    - A game-server adapter (production)
    - NullHostHooks: logs and does nothing (headless use and tests)
    """

    def exile(self, actor: ActorId) -> None:
        """Disconnect the actor and bar reconnection."""
        ...

    def restrict(self, actor: ActorId) -> None:
        """Keep the actor connected but stop them participating."""
        ...

    def restore_participation(self, actor: ActorId) -> None:
        """Undo a restriction for a connected actor."""
        ...

    def is_connected(self, actor: ActorId) -> bool:
        """Whether the actor is currently online."""
        ...

    def mint_tokens(self, actor: ActorId, count: int) -> None:
        """Give the actor ``count`` physical tokens."""
        ...

    def consume_tokens(self, actor: ActorId, count: int) -> None:
        """Take ``count`` physical tokens from the actor."""
        ...

    def notify(
        self,
        actor: ActorId,
        kind: NotificationKind,
        amounts: Mapping[str, float],
        related_actor: ActorId | None = None,
    ) -> None:
        """Show the actor a message for ``kind`` built from ``amounts``."""
        ...


class NullHostHooks:
    """HostHooks that only log. No actor is ever reported as connected."""

    def exile(self, actor: ActorId) -> None:
        logger.debug("exile", actor_id=actor)

    def restrict(self, actor: ActorId) -> None:
        logger.debug("restrict", actor_id=actor)

    def restore_participation(self, actor: ActorId) -> None:
        logger.debug("restore_participation", actor_id=actor)

    def is_connected(self, actor: ActorId) -> bool:
        return False

    def mint_tokens(self, actor: ActorId, count: int) -> None:
        logger.debug("mint_tokens", actor_id=actor, count=count)

    def consume_tokens(self, actor: ActorId, count: int) -> None:
        logger.debug("consume_tokens", actor_id=actor, count=count)

    def notify(
        self,
        actor: ActorId,
        kind: NotificationKind,
        amounts: Mapping[str, float],
        related_actor: ActorId | None = None,
    ) -> None:
        logger.debug(
            "notify",
            actor_id=actor,
            kind=kind.value,
            amounts=dict(amounts),
            related_actor=related_actor,
        )


class HostGateway:
    """Queues HostHooks calls on the dispatcher, one queue per actor.

    Every method returns immediately. The host call runs later on a worker
    thread, after all earlier calls for the same actor.
    """

    def __init__(self, hooks: HostHooks, dispatcher: ActorDispatcher) -> None:
        self.hooks = hooks
        self.dispatcher = dispatcher

    def apply_consequence(self, actor: ActorId, mode: EliminationMode) -> None:
        """Queue the elimination consequence for ``mode``."""
        if mode is EliminationMode.EXILE:
            self.dispatcher.submit(actor, self.hooks.exile, actor)
        elif mode is EliminationMode.RESTRICT:
            self.dispatcher.submit(actor, self.hooks.restrict, actor)
        else:
            raise ValueError(f"Unknown elimination mode: {mode!r}")

    def restore_if_connected(self, actor: ActorId) -> None:
        """Queue restoring participation, skipped if the actor is offline."""
        self.dispatcher.submit(actor, self._restore_if_connected, actor)

    def _restore_if_connected(self, actor: ActorId) -> None:
        if self.hooks.is_connected(actor):
            self.hooks.restore_participation(actor)
        else:
            logger.debug("Revived actor offline, restore skipped", actor_id=actor)

    def mint_tokens(self, actor: ActorId, count: int) -> None:
        self.dispatcher.submit(actor, self.hooks.mint_tokens, actor, count)

    def consume_tokens(self, actor: ActorId, count: int) -> None:
        self.dispatcher.submit(actor, self.hooks.consume_tokens, actor, count)

    def notify(
        self,
        actor: ActorId,
        kind: NotificationKind,
        related_actor: ActorId | None = None,
        **amounts: float,
    ) -> None:
        """Queue a notification carrying ``amounts``."""
        self.dispatcher.submit(actor, self.hooks.notify, actor, kind, amounts, related_actor)


__all__ = [
    "HostHooks",
    "NullHostHooks",
    "HostGateway",
]
