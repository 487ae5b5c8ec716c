"""Elimination and revival state machine.

Each actor is either ACTIVE or ELIMINATED. The transition into ELIMINATED
happens when the balance is at or below ``floor + epsilon`` after a loss
and elimination is enabled; revival is the only way back. Both
transitions are idempotent: applying one to an actor already in the
target state changes nothing and dispatches nothing.

Membership in the EliminationStore is the state. The store is consulted
on every check, so an actor eliminated before a restart is still
eliminated after it.
"""

from __future__ import annotations

from lifesteal.core.exceptions import PersistenceError
from lifesteal.core.logging import get_logger
from lifesteal.engine.hooks import HostGateway
from lifesteal.engine.ledger import LifeLedger
from lifesteal.models.enums import ActorState, NotificationKind
from lifesteal.models.identity import ActorId, ActorLike, actor_key
from lifesteal.models.policy import PolicyConfig
from lifesteal.storage.elimination_store import EliminationStore


logger = get_logger(__name__)


class EliminationEngine:
    """Applies elimination and revival transitions.

    Host consequences (exile, restrict, restore) are dispatched through the
    gateway after the transition is recorded, never while a ledger or
    store lock is held. A failed write to the store is logged; the
    in-memory transition stands for the rest of the process lifetime.
    """

    def __init__(
        self,
        ledger: LifeLedger,
        store: EliminationStore,
        gateway: HostGateway,
    ) -> None:
        """Initialize the engine.

        Args:
            ledger: Ledger read for threshold checks and written on revival.
            store: Durable set of eliminated actors.
            gateway: Dispatch route for host side effects.
        """
        self.ledger = ledger
        self.store = store
        self.gateway = gateway

    # =========================================================================
    # Queries
    # =========================================================================

    def is_eliminated(self, actor: ActorLike) -> bool:
        """Check the durable record for an actor."""
        return self.store.contains(actor)

    def state(self, actor: ActorLike) -> ActorState:
        """Elimination state of an actor."""
        if self.is_eliminated(actor):
            return ActorState.ELIMINATED
        return ActorState.ACTIVE

    def list_eliminated(self) -> frozenset[ActorId]:
        """All currently eliminated actor identities."""
        return self.store.all()

    # =========================================================================
    # Transitions
    # =========================================================================

    def check_and_eliminate(self, actor: ActorLike) -> bool:
        """Eliminate the actor if their balance has reached the threshold.

        Callers invoke this right after any operation that may have lowered
        a balance. A loss fully absorbed by the floor still reaches here,
        since the actor is then sitting on the threshold. The balance check
        and the record write happen under the actor's ledger lock, so a
        concurrent revival cannot slip in between them.

        Args:
            actor: Actor whose balance may have dropped.

        Returns:
            True only if this call moved the actor from ACTIVE to ELIMINATED.
        """
        policy = self.ledger.policy
        if not policy.elimination_enabled:
            return False

        with self.ledger.locked(actor) as key:
            balance = self.ledger.get_balance(key, policy=policy)
            if balance > policy.elimination_threshold:
                return False
            added = self._record_elimination(key)

        if added:
            self._apply_elimination(key, policy, balance)
        return added

    def eliminate(self, actor: ActorLike) -> bool:
        """Eliminate an actor regardless of balance.

        Still requires elimination to be enabled.

        Returns:
            True only if this call moved the actor to ELIMINATED.
        """
        key = actor_key(actor)
        policy = self.ledger.policy
        if not policy.elimination_enabled:
            logger.info("Elimination disabled, request ignored", actor_id=key)
            return False

        with self.ledger.locked(key):
            balance = self.ledger.get_balance(key, policy=policy)
            added = self._record_elimination(key)

        if added:
            self._apply_elimination(key, policy, balance)
        return added

    def _record_elimination(self, key: ActorId) -> bool:
        try:
            return self.store.add(key)
        except PersistenceError:
            # Memory was updated before the write failed
            logger.exception("Elimination not persisted", actor_id=key)
            return True

    def _apply_elimination(self, key: ActorId, policy: PolicyConfig, balance: float) -> None:
        logger.info(
            "Actor eliminated",
            actor_id=key,
            balance=balance,
            mode=policy.elimination_mode.value,
        )
        self.gateway.apply_consequence(key, policy.elimination_mode)
        self.gateway.notify(key, NotificationKind.ELIMINATED, balance=balance)

    def revive(self, actor: ActorLike) -> bool:
        """Return an eliminated actor to play at the revival balance.

        The revival balance replaces whatever balance the actor had. It is
        written before the record is removed, both under the actor's ledger
        lock, so no elimination check can see the actor active at the old
        balance. If the actor is connected, their participation is restored.

        Args:
            actor: Actor to revive.

        Returns:
            True only if this call moved the actor from ELIMINATED to ACTIVE.
        """
        policy = self.ledger.policy
        with self.ledger.locked(actor) as key:
            if not self.store.contains(key):
                return False
            previous = self.ledger.get_balance(key, policy=policy)
            balance = self.ledger.set_balance(key, policy.revival_balance, policy=policy)
            try:
                removed = self.store.remove(key)
            except PersistenceError:
                logger.exception("Revival not persisted", actor_id=key)
                removed = True
            if not removed:
                # Cleared by someone else in the meantime
                self.ledger.set_balance(key, previous, policy=policy)
                return False

        logger.info("Actor revived", actor_id=key, balance=balance)
        self.gateway.restore_if_connected(key)
        self.gateway.notify(key, NotificationKind.REVIVED, balance=balance)
        return True

    def enforce_on_join(self, actor: ActorLike) -> bool:
        """Re-apply the consequence to an eliminated actor who connects.

        The consequence follows the current mode, which may differ from the
        mode in force when the actor was eliminated.

        Returns:
            True if the actor is eliminated and the consequence was queued.
        """
        key = actor_key(actor)
        if not self.store.contains(key):
            return False

        mode = self.ledger.policy.elimination_mode
        logger.info("Eliminated actor joined", actor_id=key, mode=mode.value)
        self.gateway.apply_consequence(key, mode)
        return True

    def clear_all(self) -> int:
        """Forget every elimination record without touching balances.

        Returns:
            Number of records removed.
        """
        removed = len(self.store)
        try:
            removed = self.store.clear()
        except PersistenceError:
            logger.exception("Clearing eliminations not persisted", removed=removed)
        logger.info("Eliminations cleared", removed=removed)
        return removed


__all__ = [
    "EliminationEngine",
]
