"""Authoritative store of actor life-point balances.

The ledger is the only component that mutates balances. Every mutation
clamps the stored value into ``[floor, ceiling]`` taken from a single
PolicyConfig snapshot, so the limits hold at every observable point.

Locking: each actor has its own re-entrant lock, created under a registry
lock on the first write and kept for the life of the ledger. Reads of an
actor that was never written take no lock. Single-actor operations hold
one lock; ``transfer`` takes both actors' locks in lexicographic order
of their identities, so two transfers between the same pair in opposite
roles cannot deadlock.
"""

from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Generator

from lifesteal.core.exceptions import ValidationError
from lifesteal.core.logging import get_logger
from lifesteal.models.identity import ActorId, ActorLike, actor_key, lock_order
from lifesteal.models.policy import PolicyConfig, PolicyHolder
from lifesteal.models.results import TransferResult


logger = get_logger(__name__)


def _require_non_negative(value: float, field_name: str) -> float:
    if value < 0:
        raise ValidationError(
            f"{field_name} cannot be negative",
            field_name=field_name,
            invalid_value=value,
        )
    return float(value)


class LifeLedger:
    """Process-wide mapping from actor identity to life-point balance.

    Clamping is a normal outcome, reported through return values. An actor
    without a record is simply at the default balance.

    Example:
        >>> ledger = LifeLedger(PolicyHolder(PolicyConfig(floor=2.0)))
        >>> ledger.adjust_balance("steve", -100.0)
        -18.0
        >>> ledger.get_balance("steve")
        2.0
    """

    def __init__(self, policy: PolicyHolder) -> None:
        """Initialize an empty ledger.

        Args:
            policy: Holder of the active policy snapshot.
        """
        self._policy = policy
        self._balances: dict[ActorId, float] = {}
        self._locks: dict[ActorId, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @property
    def policy(self) -> PolicyConfig:
        """The active policy snapshot."""
        return self._policy.current

    # =========================================================================
    # Locking
    # =========================================================================

    def _lock_for(self, key: ActorId) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def _locked(self, *keys: ActorId) -> Generator[None, None, None]:
        """Hold the locks of ``keys``, which must already be in lock order."""
        with ExitStack() as stack:
            for key in keys:
                stack.enter_context(self._lock_for(key))
            yield

    @contextmanager
    def locked(self, actor: ActorLike) -> Generator[ActorId, None, None]:
        """Hold an actor's lock across several ledger calls.

        The lock is re-entrant, so ledger methods called inside the block
        for the same actor do not block. Use it to make a balance check and
        the state change it decides atomic for that actor.

        Yields:
            The actor's ledger key.
        """
        key = actor_key(actor)
        with self._locked(key):
            yield key

    def _peek_lock(self, key: ActorId) -> threading.RLock | None:
        with self._registry_lock:
            return self._locks.get(key)

    def _read(self, key: ActorId, policy: PolicyConfig) -> float:
        """Current balance of ``key``. Caller holds the actor's lock."""
        balance = self._balances.get(key)
        if balance is None:
            return policy.clamp(policy.default_balance)
        return balance

    # =========================================================================
    # Single-actor operations
    # =========================================================================

    def get_balance(self, actor: ActorLike, *, policy: PolicyConfig | None = None) -> float:
        """Return an actor's balance without side effects.

        Args:
            actor: Actor identity.
            policy: Snapshot to evaluate the default under; the active one
                when omitted.

        Returns:
            The stored balance, or the default balance if no record exists.
        """
        key = actor_key(actor)
        snapshot = policy or self.policy
        lock = self._peek_lock(key)
        if lock is None:
            # Never written, so nothing to serialize against
            return self._read(key, snapshot)
        with lock:
            return self._read(key, snapshot)

    def has_record(self, actor: ActorLike) -> bool:
        """Whether the actor's balance has ever been written."""
        key = actor_key(actor)
        lock = self._peek_lock(key)
        if lock is None:
            return False
        with lock:
            return key in self._balances

    def set_balance(
        self,
        actor: ActorLike,
        target: float,
        *,
        policy: PolicyConfig | None = None,
    ) -> float:
        """Store a clamped balance for an actor.

        Args:
            actor: Actor identity.
            target: Requested balance.
            policy: Snapshot to clamp against; the active one when omitted.

        Returns:
            The value actually stored after clamping.
        """
        key = actor_key(actor)
        snapshot = policy or self.policy
        with self._locked(key):
            previous = self._read(key, snapshot)
            applied = snapshot.clamp(float(target))
            self._balances[key] = applied

        logger.debug(
            "Balance set",
            actor_id=key,
            previous=previous,
            requested=target,
            applied=applied,
        )
        return applied

    def adjust_balance(
        self,
        actor: ActorLike,
        delta: float,
        *,
        policy: PolicyConfig | None = None,
    ) -> float:
        """Add ``delta`` to an actor's balance, clamped to the limits.

        Args:
            actor: Actor identity.
            delta: Requested change; negative for a loss.
            policy: Snapshot to clamp against; the active one when omitted.

        Returns:
            The change actually applied. Smaller in magnitude than ``delta``
            when clamped, and exactly 0 when the actor already sat on the
            limit in the direction of ``delta``.
        """
        key = actor_key(actor)
        snapshot = policy or self.policy
        with self._locked(key):
            previous = self._read(key, snapshot)
            applied = snapshot.clamp(previous + float(delta))
            self._balances[key] = applied

        applied_delta = applied - previous
        logger.debug(
            "Balance adjusted",
            actor_id=key,
            previous=previous,
            requested_delta=delta,
            applied_delta=applied_delta,
        )
        return applied_delta

    def debit_exact(
        self,
        actor: ActorLike,
        amount: float,
        *,
        policy: PolicyConfig | None = None,
    ) -> float | None:
        """Debit ``amount`` only if the balance stays at or above the floor.

        The floor check and the write happen under the actor's lock, so no
        other mutation can slip in between them.

        Args:
            actor: Actor identity.
            amount: Life points to remove.
            policy: Snapshot to check against; the active one when omitted.

        Returns:
            The amount debited, or None if the debit was refused and the
            balance left untouched.
        """
        key = actor_key(actor)
        amount = _require_non_negative(amount, "amount")
        snapshot = policy or self.policy
        with self._locked(key):
            previous = self._read(key, snapshot)
            if previous - amount < snapshot.floor:
                return None
            applied = snapshot.clamp(previous - amount)
            self._balances[key] = applied

        logger.debug("Balance debited", actor_id=key, previous=previous, debited=previous - applied)
        return previous - applied

    def forget(self, actor: ActorLike) -> bool:
        """Drop an actor's record so it reads as the default again.

        The actor's lock stays registered, since other threads may be
        waiting on it.

        Returns:
            True if a record existed.
        """
        key = actor_key(actor)
        if self._peek_lock(key) is None:
            return False
        with self._locked(key):
            existed = self._balances.pop(key, None) is not None
        if existed:
            logger.info("Ledger record removed", actor_id=key)
        return existed

    def balances(self) -> dict[ActorId, float]:
        """Snapshot of every stored balance."""
        with self._registry_lock:
            keys = list(self._locks)
        snapshot: dict[ActorId, float] = {}
        for key in keys:
            with self._locked(key):
                if key in self._balances:
                    snapshot[key] = self._balances[key]
        return snapshot

    # =========================================================================
    # Dual-actor operations
    # =========================================================================

    def transfer(
        self,
        loser: ActorLike,
        gainer: ActorLike,
        loser_loss: float,
        gainer_gain: float,
        *,
        policy: PolicyConfig | None = None,
    ) -> TransferResult:
        """Move life points from a loser to a gainer atomically.

        Both balances are read and written while both actors' locks are
        held, so no other operation observes one leg without the other. The
        legs are clamped independently: a gainer at the ceiling receives
        nothing without blocking the loser's loss, and a loser at the floor
        loses nothing without blocking the gainer's gain.

        Args:
            loser: Actor losing life points.
            gainer: Actor gaining life points.
            loser_loss: Requested loss, non-negative.
            gainer_gain: Requested gain, non-negative.
            policy: Snapshot to clamp against; the active one when omitted.

        Returns:
            The requested and actually applied amounts of both legs.

        Raises:
            ValidationError: If either amount is negative.
        """
        loser_key = actor_key(loser)
        gainer_key = actor_key(gainer)
        loss = _require_non_negative(loser_loss, "loser_loss")
        gain = _require_non_negative(gainer_gain, "gainer_gain")
        snapshot = policy or self.policy

        with self._locked(*lock_order(loser_key, gainer_key)):
            loser_before = self._read(loser_key, snapshot)
            loser_after = snapshot.clamp(loser_before - loss)
            self._balances[loser_key] = loser_after

            # Read after the loser leg so a self-transfer sees its own loss
            gainer_before = self._read(gainer_key, snapshot)
            gainer_after = snapshot.clamp(gainer_before + gain)
            self._balances[gainer_key] = gainer_after

        result = TransferResult(
            requested_loss=loss,
            requested_gain=gain,
            actual_loss=loser_before - loser_after,
            actual_gain=gainer_after - gainer_before,
        )
        logger.info(
            "Transfer applied",
            loser=loser_key,
            gainer=gainer_key,
            actual_loss=result.actual_loss,
            actual_gain=result.actual_gain,
            loss_clamped=result.loss_clamped,
            gain_clamped=result.gain_clamped,
        )
        return result


__all__ = [
    "LifeLedger",
]
