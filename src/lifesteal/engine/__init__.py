"""Life-point engine for the LifeSteal core.

This module provides the balance ledger, token conversion, the
elimination state machine, per-actor dispatch of host side effects and
the host-facing service that ties them together.

Submodules:
    ledger: Clamped, per-actor locked balance store
    tokens: Withdraw and deposit between balance and tokens
    elimination: ACTIVE/ELIMINATED transitions and join enforcement
    dispatch: Per-actor serial queues on a worker pool
    hooks: Host integration protocol and gateway
    service: Death, token, join, revival and admin handlers
    runtime: Composition root

Example:
    >>> from lifesteal.engine import LifeStealRuntime
    >>>
    >>> with LifeStealRuntime.create() as runtime:
    ...     outcome = runtime.service.handle_death("alex", killer="steve")
    ...     outcome.gain
    2.0
"""

from __future__ import annotations

# =============================================================================
# Ledger and Tokens
# =============================================================================
from lifesteal.engine.ledger import LifeLedger
from lifesteal.engine.tokens import TokenConverter

# =============================================================================
# Host Integration
# =============================================================================
from lifesteal.engine.dispatch import ActorDispatcher
from lifesteal.engine.hooks import HostGateway, HostHooks, NullHostHooks

# =============================================================================
# Elimination and Service
# =============================================================================
from lifesteal.engine.elimination import EliminationEngine
from lifesteal.engine.service import LifeStealService
from lifesteal.engine.runtime import LifeStealRuntime


__all__ = [
    # Ledger and Tokens
    "LifeLedger",
    "TokenConverter",
    # Host Integration
    "ActorDispatcher",
    "HostGateway",
    "HostHooks",
    "NullHostHooks",
    # Elimination and Service
    "EliminationEngine",
    "LifeStealService",
    "LifeStealRuntime",
]
