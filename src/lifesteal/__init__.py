"""LifeSteal - Life-Point Ledger & Elimination Engine.

Players carry a life-point balance. Killing another player transfers life
points from victim to killer, any other death costs life points, and a
player whose balance reaches the floor is eliminated until revived.
Balances can be withdrawn as physical tokens and deposited back.

The core is host-agnostic: the embedding game server reports events to
LifeStealService and performs side effects through a HostHooks
implementation.

Example:
    >>> from lifesteal import LifeStealRuntime, PolicyConfig
    >>>
    >>> policy = PolicyConfig(floor=1.0, elimination_enabled=True)
    >>> with LifeStealRuntime.create(policy=policy) as runtime:
    ...     runtime.service.handle_death("alex", killer="steve")
    ...     runtime.service.balance("steve")
    22.0

Modules:
    core: Configuration, logging, and base exceptions.
    models: Policy snapshot, enums and result models.
    engine: Ledger, token conversion, elimination and host dispatch.
    storage: SQLite record of eliminated actors.
"""

from __future__ import annotations

# Core
from lifesteal.core.config import Settings, get_settings
from lifesteal.core.exceptions import (
    ConfigurationError,
    LifeStealError,
    PersistenceError,
    ValidationError,
)
from lifesteal.core.logging import configure_logging, get_logger

# Models
from lifesteal.models import (
    ActorState,
    DeathCause,
    DeathOutcome,
    EliminationMode,
    NotificationKind,
    PolicyConfig,
    PolicyHolder,
    RejectionReason,
    TokenDirection,
    TokenUseOutcome,
    TransferResult,
    WithdrawResult,
)

# Engine
from lifesteal.engine import (
    ActorDispatcher,
    EliminationEngine,
    HostGateway,
    HostHooks,
    LifeLedger,
    LifeStealRuntime,
    LifeStealService,
    NullHostHooks,
    TokenConverter,
)

# Storage
from lifesteal.storage import EliminationStore


__version__ = "0.1.0"

__all__ = [
    # Core
    "Settings",
    "get_settings",
    "LifeStealError",
    "ConfigurationError",
    "ValidationError",
    "PersistenceError",
    "configure_logging",
    "get_logger",
    # Models
    "ActorState",
    "DeathCause",
    "DeathOutcome",
    "EliminationMode",
    "NotificationKind",
    "PolicyConfig",
    "PolicyHolder",
    "RejectionReason",
    "TokenDirection",
    "TokenUseOutcome",
    "TransferResult",
    "WithdrawResult",
    # Engine
    "ActorDispatcher",
    "EliminationEngine",
    "HostGateway",
    "HostHooks",
    "LifeLedger",
    "LifeStealRuntime",
    "LifeStealService",
    "NullHostHooks",
    "TokenConverter",
    # Storage
    "EliminationStore",
    # Version
    "__version__",
]
