"""SQLite persistence for the set of eliminated actors.

The store is the single source of truth for "who is eliminated": actors
may stay disconnected for as long as they like and their state must still
be known when they come back. Every mutation writes through to disk
immediately.

Layout: one row per collection in the ``collections`` table, holding the
ordered JSON list of actor identity strings.

Storage location: ``data/lifesteal.db`` unless configured otherwise.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator
from uuid import UUID

from lifesteal.core.constants import DEFAULT_DATABASE_FILENAME, ELIMINATED_COLLECTION
from lifesteal.core.exceptions import PersistenceError
from lifesteal.core.logging import get_logger
from lifesteal.models.identity import ActorId, ActorLike, actor_key

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CollectionRecord:
    """Row of the ``collections`` table.

    Attributes:
        name: Collection key.
        members: Ordered actor identities.
        updated_at: When the row was last written.
    """

    name: str
    members: list[str]
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> CollectionRecord:
        """Create from database row."""
        return cls(
            name=row[0],
            members=json.loads(row[1]),
            updated_at=datetime.fromisoformat(row[2]),
        )


# =============================================================================
# Store
# =============================================================================


class EliminationStore:
    """Durable, write-through set of eliminated actor identities.

    Membership checks are served from memory. ``add``, ``remove`` and
    ``clear`` update memory first and then persist; if the write fails the
    in-memory change stands and PersistenceError is raised so the caller
    can log it. The store has its own lock, independent of the ledger's.
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        collection: str = ELIMINATED_COLLECTION,
    ) -> None:
        """Initialize the store and load the collection from disk.

        Args:
            db_path: Path to database file. If None, uses the default location.
            collection: Name of the collection holding eliminated ids.

        Raises:
            PersistenceError: If the database cannot be created or read.
        """
        self.db_path = Path(db_path) if db_path is not None else self._get_default_path()
        self.collection = collection
        self._members: list[ActorId] = []
        self._index: set[ActorId] = set()
        self._lock = threading.RLock()

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(
                "Could not initialize elimination store",
                collection=collection,
                path=str(self.db_path),
            ) from exc

        self.reload()
        logger.info(
            "Elimination store initialized",
            path=str(self.db_path),
            collection=collection,
            eliminated=len(self._members),
        )

    @staticmethod
    def _get_default_path() -> Path:
        """Get default database path."""
        return Path("data") / DEFAULT_DATABASE_FILENAME

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS collections (
                    name TEXT PRIMARY KEY,
                    members_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Reads
    # =========================================================================

    def contains(self, actor: ActorLike) -> bool:
        """Check whether an actor is recorded as eliminated.

        Args:
            actor: Actor identity.

        Returns:
            True if the actor is in the collection.
        """
        key = actor_key(actor)
        with self._lock:
            return key in self._index

    def __contains__(self, actor: object) -> bool:
        if not isinstance(actor, (str, UUID)):
            return False
        return self.contains(actor)

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)

    def all(self) -> frozenset[ActorId]:
        """Snapshot of all eliminated actor identities."""
        with self._lock:
            return frozenset(self._index)

    def ordered(self) -> list[ActorId]:
        """Eliminated actor identities in the order they were recorded."""
        with self._lock:
            return list(self._members)

    # =========================================================================
    # Writes
    # =========================================================================

    def add(self, actor: ActorLike) -> bool:
        """Record an actor as eliminated.

        Args:
            actor: Actor identity.

        Returns:
            True if the actor was newly added, False if already present.

        Raises:
            PersistenceError: If the write fails. The in-memory record is kept.
        """
        key = actor_key(actor)
        with self._lock:
            if key in self._index:
                return False
            self._members.append(key)
            self._index.add(key)
            self._persist()

        logger.info("Elimination recorded", actor_id=key, collection=self.collection)
        return True

    def remove(self, actor: ActorLike) -> bool:
        """Remove an actor from the eliminated collection.

        Args:
            actor: Actor identity.

        Returns:
            True if the actor was present and removed.

        Raises:
            PersistenceError: If the write fails. The in-memory removal is kept.
        """
        key = actor_key(actor)
        with self._lock:
            if key not in self._index:
                return False
            self._members.remove(key)
            self._index.discard(key)
            self._persist()

        logger.info("Elimination record removed", actor_id=key, collection=self.collection)
        return True

    def clear(self) -> int:
        """Remove every record.

        Returns:
            Number of records removed.

        Raises:
            PersistenceError: If the write fails. The in-memory clear is kept.
        """
        with self._lock:
            removed = len(self._members)
            self._members = []
            self._index = set()
            self._persist()

        logger.info("Elimination records cleared", removed=removed, collection=self.collection)
        return removed

    def reload(self) -> None:
        """Replace the in-memory collection with what is on disk.

        Used after the database was edited externally. This is a full
        replace, not a merge. Blank or non-string entries are skipped.

        Raises:
            PersistenceError: If the database cannot be read or parsed; the
                in-memory collection is left untouched.
        """
        try:
            record = self._read_record()
        except (sqlite3.Error, ValueError, TypeError) as exc:
            raise PersistenceError(
                "Could not reload elimination store",
                collection=self.collection,
                path=str(self.db_path),
            ) from exc

        members: list[ActorId] = []
        seen: set[ActorId] = set()
        for raw in record.members if record else []:
            if not isinstance(raw, str) or not raw.strip():
                logger.warning(
                    "Invalid actor id in elimination store",
                    value=repr(raw),
                    collection=self.collection,
                )
                continue
            key = raw.strip()
            if key not in seen:
                seen.add(key)
                members.append(key)

        with self._lock:
            self._members = members
            self._index = seen

        logger.debug("Elimination store reloaded", eliminated=len(members))

    # =========================================================================
    # Persistence
    # =========================================================================

    def _read_record(self) -> CollectionRecord | None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT name, members_json, updated_at
                FROM collections WHERE name = ?
            """, (self.collection,))
            row = cursor.fetchone()

        if row is None:
            return None
        record = CollectionRecord.from_row(tuple(row))
        if not isinstance(record.members, list):
            raise ValueError(f"collection {self.collection!r} is not a list")
        return record

    def _persist(self) -> None:
        """Write the current collection. Caller holds ``_lock``."""
        members_json = json.dumps(self._members)
        now = datetime.now()
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT OR REPLACE INTO collections (name, members_json, updated_at)
                    VALUES (?, ?, ?)
                """, (self.collection, members_json, now.isoformat()))
        except sqlite3.Error as exc:
            raise PersistenceError(
                "Could not save elimination store",
                collection=self.collection,
                path=str(self.db_path),
            ) from exc


__all__ = [
    "CollectionRecord",
    "EliminationStore",
]
