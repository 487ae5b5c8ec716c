"""Application-wide constants for the LifeSteal core.

Balances are measured in life points. How a host renders them (hearts,
bars, numbers) is the host's business.
"""

from __future__ import annotations

# =============================================================================
# Balance Constants
# =============================================================================

ELIMINATION_EPSILON = 0.01
"""Tolerance for the floor comparison that triggers elimination."""

DEFAULT_BALANCE = 20.0
"""Balance reported for an actor with no ledger record."""

DEFAULT_FLOOR = 1.0
"""Default minimum balance."""

DEFAULT_REVIVAL_BALANCE = 10.0
"""Balance restored on revival when not configured."""

# =============================================================================
# Storage Constants
# =============================================================================

ELIMINATED_COLLECTION = "eliminated-players"
"""Collection name holding the eliminated actor identities."""

DEFAULT_DATABASE_FILENAME = "lifesteal.db"
"""File name of the SQLite database under the data directory."""

# =============================================================================
# Dispatch Constants
# =============================================================================

DEFAULT_DISPATCH_WORKERS = 4
"""Worker threads draining per-actor task queues."""

DISPATCH_SHUTDOWN_TIMEOUT = 5.0
"""Seconds to wait for queued host calls on shutdown."""


__all__ = [
    "ELIMINATION_EPSILON",
    "DEFAULT_BALANCE",
    "DEFAULT_FLOOR",
    "DEFAULT_REVIVAL_BALANCE",
    "ELIMINATED_COLLECTION",
    "DEFAULT_DATABASE_FILENAME",
    "DEFAULT_DISPATCH_WORKERS",
    "DISPATCH_SHUTDOWN_TIMEOUT",
]
