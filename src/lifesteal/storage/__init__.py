"""Storage module for LifeSteal persistence.

Provides SQLite-based storage for the durable set of eliminated actors.
"""

from lifesteal.storage.elimination_store import (
    CollectionRecord,
    EliminationStore,
)

__all__ = [
    "CollectionRecord",
    "EliminationStore",
]
