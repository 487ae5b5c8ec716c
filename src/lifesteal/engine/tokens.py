"""Conversion between life points and transferable tokens.

A withdraw is all-or-nothing: either the full ``count * rate`` is debited
and ``count`` tokens are minted, or nothing changes. A deposit always
consumes its tokens and credits whatever the ceiling allows.
"""

from __future__ import annotations

from lifesteal.core.exceptions import ValidationError
from lifesteal.core.logging import get_logger
from lifesteal.engine.ledger import LifeLedger
from lifesteal.models.enums import RejectionReason
from lifesteal.models.identity import ActorLike, actor_key
from lifesteal.models.policy import PolicyConfig
from lifesteal.models.results import WithdrawResult


logger = get_logger(__name__)


def _require_token_count(token_count: int) -> int:
    if isinstance(token_count, bool) or not isinstance(token_count, int) or token_count <= 0:
        raise ValidationError(
            "Token count must be a positive integer",
            field_name="token_count",
            invalid_value=token_count,
        )
    return token_count


class TokenConverter:
    """Turns balance into tokens and tokens back into balance.

    Example:
        >>> converter = TokenConverter(ledger)
        >>> converter.withdraw("steve", 2).minted_count
        2
    """

    def __init__(self, ledger: LifeLedger) -> None:
        """Initialize the converter.

        Args:
            ledger: Ledger holding the balances to convert.
        """
        self.ledger = ledger

    def token_value(self, token_count: int, *, policy: PolicyConfig | None = None) -> float:
        """Life points represented by ``token_count`` tokens."""
        snapshot = policy or self.ledger.policy
        return snapshot.tokens_to_life_points(_require_token_count(token_count))

    def withdraw(self, actor: ActorLike, token_count: int) -> WithdrawResult:
        """Convert part of an actor's balance into tokens.

        The balance may end exactly on the floor but never below it; a
        request that would cross the floor is rejected without touching the
        balance. A withdraw does not trigger elimination.

        Args:
            actor: Actor withdrawing.
            token_count: Tokens requested, at least 1.

        Returns:
            The minted count and debited life points, or a rejection.

        Raises:
            ValidationError: If ``token_count`` is not a positive integer.
        """
        key = actor_key(actor)
        count = _require_token_count(token_count)
        policy = self.ledger.policy

        if not policy.withdraw_enabled:
            logger.info("Withdraw rejected", actor_id=key, reason=RejectionReason.DISABLED.value)
            return WithdrawResult.rejection(count, RejectionReason.DISABLED)

        required = policy.tokens_to_life_points(count)
        debited = self.ledger.debit_exact(key, required, policy=policy)
        if debited is None:
            logger.info(
                "Withdraw rejected",
                actor_id=key,
                reason=RejectionReason.INSUFFICIENT_BALANCE.value,
                required=required,
            )
            return WithdrawResult.rejection(count, RejectionReason.INSUFFICIENT_BALANCE)

        logger.info("Tokens withdrawn", actor_id=key, token_count=count, debited=debited)
        return WithdrawResult(requested_count=count, minted_count=count, debited=debited)

    def deposit(self, actor: ActorLike, token_count: int) -> float:
        """Credit an actor for tokens they hand in.

        The tokens are always consumed. If the ceiling absorbs part of the
        value, the excess is lost.

        Args:
            actor: Actor depositing.
            token_count: Tokens consumed, at least 1.

        Returns:
            The life points actually credited.

        Raises:
            ValidationError: If ``token_count`` is not a positive integer.
        """
        key = actor_key(actor)
        count = _require_token_count(token_count)
        policy = self.ledger.policy
        value = policy.tokens_to_life_points(count)
        gained = self.ledger.adjust_balance(key, value, policy=policy)

        logger.info(
            "Tokens deposited",
            actor_id=key,
            token_count=count,
            value=value,
            credited=gained,
        )
        return gained


__all__ = [
    "TokenConverter",
]
