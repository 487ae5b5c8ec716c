"""Host-facing entry points.

The host translates its own events (a player died, a token was used, a
player joined, an admin typed a command) into calls on LifeStealService.
Each call runs the ledger, converter and elimination engine synchronously
and queues any host side effects; by the time it returns, balances and
elimination state already reflect the event.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar

from lifesteal.core.exceptions import ValidationError
from lifesteal.core.logging import get_logger, log_context
from lifesteal.engine.elimination import EliminationEngine
from lifesteal.engine.hooks import HostGateway
from lifesteal.engine.ledger import LifeLedger
from lifesteal.engine.tokens import TokenConverter
from lifesteal.models.enums import DeathCause, NotificationKind, TokenDirection
from lifesteal.models.identity import ActorId, ActorLike, actor_key
from lifesteal.models.policy import PolicyConfig, PolicyHolder
from lifesteal.models.results import DeathOutcome, TokenUseOutcome


logger = get_logger(__name__)

E = TypeVar("E", bound=StrEnum)


def _parse_enum(enum_cls: type[E], value: E | str, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown {field_name}: {value!r}",
            field_name=field_name,
            invalid_value=value,
        ) from exc


class LifeStealService:
    """Event and command handlers over the ledger and elimination engine.

    Attributes:
        policy_holder: Holder swapped on configuration reload.
        ledger: Balance store.
        converter: Token conversion.
        engine: Elimination state machine.
        gateway: Dispatch route for host side effects.
    """

    def __init__(
        self,
        policy_holder: PolicyHolder,
        ledger: LifeLedger,
        converter: TokenConverter,
        engine: EliminationEngine,
        gateway: HostGateway,
    ) -> None:
        self.policy_holder = policy_holder
        self.ledger = ledger
        self.converter = converter
        self.engine = engine
        self.gateway = gateway

    # =========================================================================
    # Queries
    # =========================================================================

    def balance(self, actor: ActorLike) -> float:
        """Current balance of an actor."""
        return self.ledger.get_balance(actor)

    def is_eliminated(self, actor: ActorLike) -> bool:
        """Whether an actor is eliminated."""
        return self.engine.is_eliminated(actor)

    def list_eliminated(self) -> frozenset[ActorId]:
        """All eliminated actor identities."""
        return self.engine.list_eliminated()

    # =========================================================================
    # Host events
    # =========================================================================

    def handle_death(
        self,
        victim: ActorLike,
        killer: ActorLike | None = None,
        cause: DeathCause | str | None = None,
        *,
        keep_inventory: bool = False,
    ) -> DeathOutcome:
        """Apply the life-point consequences of a death.

        A player kill transfers life points from victim to killer. Any other
        death costs the victim the natural or monster loss. A player kill
        without a distinct killer is treated as a natural death. In either
        case the victim is checked for elimination right after the loss.

        Args:
            victim: Actor who died.
            killer: Killing actor, for player kills.
            cause: Cause reported by the host. Inferred from ``killer`` when
                omitted.
            keep_inventory: The world keeps inventory on death. Such deaths
                are ignored unless policy overrides it.

        Returns:
            The applied loss, gain and whether the victim was eliminated.
        """
        victim_key = actor_key(victim)
        killer_key = actor_key(killer) if killer is not None else None
        resolved = self._resolve_cause(victim_key, killer_key, cause)
        if resolved is not DeathCause.PLAYER:
            killer_key = None
        policy = self.policy_holder.current

        if keep_inventory and not policy.override_keep_inventory:
            logger.debug("Death ignored, inventory kept", victim=victim_key, cause=resolved.value)
            return DeathOutcome(victim=victim_key, killer=killer_key, cause=resolved, ignored=True)

        with log_context(host_event="death", cause=resolved.value):
            if killer_key is not None:
                return self._handle_kill(victim_key, killer_key, policy)
            return self._handle_loss(victim_key, resolved, policy)

    def handle_natural_death(self, actor: ActorLike, *, keep_inventory: bool = False) -> DeathOutcome:
        """Apply the natural-cause loss to an actor."""
        return self.handle_death(actor, cause=DeathCause.NATURAL, keep_inventory=keep_inventory)

    @staticmethod
    def _resolve_cause(
        victim: ActorId,
        killer: ActorId | None,
        cause: DeathCause | str | None,
    ) -> DeathCause:
        if cause is None:
            resolved = DeathCause.PLAYER if killer is not None else DeathCause.NATURAL
        else:
            resolved = _parse_enum(DeathCause, cause, "cause")
        if resolved is DeathCause.PLAYER and (killer is None or killer == victim):
            return DeathCause.NATURAL
        return resolved

    def _handle_kill(self, victim: ActorId, killer: ActorId, policy: PolicyConfig) -> DeathOutcome:
        result = self.ledger.transfer(
            victim,
            killer,
            policy.kill_loss,
            policy.kill_gain,
            policy=policy,
        )
        loss = max(result.actual_loss, 0.0)
        gain = max(result.actual_gain, 0.0)

        if loss > 0:
            self.gateway.notify(
                victim,
                NotificationKind.KILL_LOSS,
                related_actor=killer,
                amount=loss,
                balance=self.ledger.get_balance(victim, policy=policy),
            )
        if result.loss_clamped:
            self.gateway.notify(victim, NotificationKind.FLOOR_REACHED, floor=policy.floor)
        if gain > 0:
            self.gateway.notify(
                killer,
                NotificationKind.KILL_GAIN,
                related_actor=victim,
                amount=gain,
                balance=self.ledger.get_balance(killer, policy=policy),
            )
        if result.gain_clamped and policy.ceiling_enabled:
            self.gateway.notify(killer, NotificationKind.CEILING_REACHED, ceiling=policy.ceiling)

        eliminated = self.engine.check_and_eliminate(victim)
        return DeathOutcome(
            victim=victim,
            killer=killer,
            cause=DeathCause.PLAYER,
            loss=loss,
            gain=gain,
            eliminated=eliminated,
        )

    def _handle_loss(self, victim: ActorId, cause: DeathCause, policy: PolicyConfig) -> DeathOutcome:
        if cause is DeathCause.MONSTER:
            requested, kind = policy.monster_loss, NotificationKind.MONSTER_LOSS
        else:
            requested, kind = policy.natural_loss, NotificationKind.NATURAL_LOSS

        loss = max(-self.ledger.adjust_balance(victim, -requested, policy=policy), 0.0)
        if loss > 0:
            self.gateway.notify(
                victim,
                kind,
                amount=loss,
                balance=self.ledger.get_balance(victim, policy=policy),
            )
        if loss < requested:
            self.gateway.notify(victim, NotificationKind.FLOOR_REACHED, floor=policy.floor)

        eliminated = self.engine.check_and_eliminate(victim)
        return DeathOutcome(victim=victim, cause=cause, loss=loss, eliminated=eliminated)

    def handle_token_use(
        self,
        actor: ActorLike,
        token_count: int,
        direction: TokenDirection | str,
        *,
        initiator: ActorLike | None = None,
    ) -> TokenUseOutcome:
        """Withdraw balance as tokens, or deposit tokens as balance.

        An admin may withdraw on another actor's behalf by passing
        ``initiator``. The tokens still go to ``actor``; the initiator hears
        about the outcome and the actor is told who withdrew.

        Args:
            actor: Actor whose balance and tokens are used.
            token_count: Tokens to mint or consume.
            direction: ``withdraw`` or ``deposit``.
            initiator: Actor issuing a withdraw on ``actor``'s behalf.

        Returns:
            The life points moved, or the withdraw rejection.

        Raises:
            ValidationError: If ``token_count`` is not a positive integer,
                or ``initiator`` is given for a deposit.
        """
        key = actor_key(actor)
        initiator_key = actor_key(initiator) if initiator is not None else key
        resolved = _parse_enum(TokenDirection, direction, "direction")
        if resolved is TokenDirection.DEPOSIT and initiator_key != key:
            raise ValidationError(
                "Deposits cannot be made on another actor's behalf",
                field_name="initiator",
                invalid_value=initiator_key,
            )

        with log_context(host_event="token_use", direction=resolved.value):
            if resolved is TokenDirection.WITHDRAW:
                return self._withdraw(key, token_count, initiator_key)
            return self._deposit(key, token_count)

    def _withdraw(self, actor: ActorId, token_count: int, initiator: ActorId) -> TokenUseOutcome:
        on_behalf = initiator != actor
        result = self.converter.withdraw(actor, token_count)
        if result.rejected:
            self.gateway.notify(
                initiator,
                NotificationKind.WITHDRAW_REJECTED,
                related_actor=actor if on_behalf else None,
                tokens=token_count,
                balance=self.ledger.get_balance(actor),
            )
            return TokenUseOutcome(
                actor=actor,
                direction=TokenDirection.WITHDRAW,
                token_count=token_count,
                rejected=True,
                reason=result.reason,
            )

        self.gateway.mint_tokens(actor, result.minted_count)
        balance = self.ledger.get_balance(actor)
        self.gateway.notify(
            initiator,
            NotificationKind.TOKENS_WITHDRAWN,
            related_actor=actor if on_behalf else None,
            tokens=result.minted_count,
            amount=result.debited,
            balance=balance,
        )
        if on_behalf:
            self.gateway.notify(
                actor,
                NotificationKind.TOKENS_WITHDRAWN,
                related_actor=initiator,
                tokens=result.minted_count,
                amount=result.debited,
                balance=balance,
            )
        return TokenUseOutcome(
            actor=actor,
            direction=TokenDirection.WITHDRAW,
            token_count=token_count,
            life_points=result.debited,
        )

    def _deposit(self, actor: ActorId, token_count: int) -> TokenUseOutcome:
        value = self.converter.token_value(token_count)
        gained = max(self.converter.deposit(actor, token_count), 0.0)

        self.gateway.consume_tokens(actor, token_count)
        self.gateway.notify(
            actor,
            NotificationKind.TOKENS_DEPOSITED,
            tokens=token_count,
            amount=gained,
            balance=self.ledger.get_balance(actor),
        )
        policy = self.policy_holder.current
        at_ceiling = policy.ceiling_enabled and self.ledger.get_balance(actor) >= policy.ceiling
        if at_ceiling and gained < value:
            self.gateway.notify(actor, NotificationKind.CEILING_REACHED, ceiling=policy.ceiling)
        return TokenUseOutcome(
            actor=actor,
            direction=TokenDirection.DEPOSIT,
            token_count=token_count,
            life_points=gained,
        )

    def handle_join(self, actor: ActorLike) -> bool:
        """Re-apply the elimination consequence to a joining actor.

        Returns:
            True if the actor is eliminated.
        """
        return self.engine.enforce_on_join(actor)

    def handle_revival_request(self, initiator: ActorLike, target: ActorLike) -> bool:
        """Revive ``target`` on behalf of a player.

        Honoured only when revival is enabled and the target is eliminated.

        Returns:
            True if the target was revived.
        """
        initiator_key = actor_key(initiator)
        target_key = actor_key(target)
        policy = self.policy_holder.current

        revived = policy.revival_enabled and self.engine.revive(target_key)
        if not revived:
            logger.info(
                "Revival rejected",
                initiator=initiator_key,
                target=target_key,
                revival_enabled=policy.revival_enabled,
            )
            self.gateway.notify(
                initiator_key,
                NotificationKind.REVIVAL_REJECTED,
                related_actor=target_key,
            )
            return False

        self.gateway.notify(
            initiator_key,
            NotificationKind.REVIVAL_PERFORMED,
            related_actor=target_key,
            balance=self.ledger.get_balance(target_key),
        )
        return True

    # =========================================================================
    # Administrative commands
    # =========================================================================

    def admin_set_balance(self, actor: ActorLike, value: float) -> float:
        """Set an actor's balance, clamped to the limits.

        Lowering a balance to the threshold eliminates the actor.

        Returns:
            The balance actually stored.
        """
        key = actor_key(actor)
        previous = self.ledger.get_balance(key)
        applied = self.ledger.set_balance(key, value)
        logger.info("Balance set by admin", actor_id=key, previous=previous, balance=applied)
        self.gateway.notify(key, NotificationKind.BALANCE_CHANGED, previous=previous, balance=applied)
        if float(value) < previous:
            self.engine.check_and_eliminate(key)
        return applied

    def admin_adjust_balance(self, actor: ActorLike, delta: float) -> float:
        """Add ``delta`` to an actor's balance, clamped to the limits.

        Returns:
            The change actually applied.
        """
        key = actor_key(actor)
        applied = self.ledger.adjust_balance(key, delta)
        balance = self.ledger.get_balance(key)
        logger.info("Balance adjusted by admin", actor_id=key, applied_delta=applied, balance=balance)
        self.gateway.notify(
            key,
            NotificationKind.BALANCE_CHANGED,
            previous=balance - applied,
            balance=balance,
        )
        if delta < 0:
            self.engine.check_and_eliminate(key)
        return applied

    def admin_eliminate(self, actor: ActorLike) -> bool:
        """Eliminate an actor regardless of balance."""
        return self.engine.eliminate(actor)

    def admin_revive(self, actor: ActorLike) -> bool:
        """Revive an actor even when player revivals are disabled."""
        return self.engine.revive(actor)

    def admin_clear_eliminations(self) -> int:
        """Forget every elimination record."""
        return self.engine.clear_all()

    def reload_policy(self, policy: PolicyConfig) -> PolicyConfig:
        """Install a new policy snapshot.

        Existing balances are left as they are; eliminated actors stay
        eliminated.

        Returns:
            The snapshot that was replaced.
        """
        return self.policy_holder.replace(policy)


__all__ = [
    "LifeStealService",
]
