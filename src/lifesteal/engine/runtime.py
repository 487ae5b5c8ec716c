"""Composition root wiring the core's components together.

The host builds one LifeStealRuntime at startup and shuts it down on exit.
Nothing in the core is a module-level singleton: every component receives
its collaborators here, so tests can build as many isolated runtimes as
they like.

Example:
    >>> with LifeStealRuntime.create(hooks=MyServerHooks()) as runtime:
    ...     runtime.service.handle_death("alex", killer="steve")
"""

from __future__ import annotations

from pathlib import Path

from lifesteal.core.config import Settings, clear_settings_cache, get_settings
from lifesteal.core.logging import configure_logging, get_logger
from lifesteal.engine.dispatch import ActorDispatcher
from lifesteal.engine.elimination import EliminationEngine
from lifesteal.engine.hooks import HostGateway, HostHooks, NullHostHooks
from lifesteal.engine.ledger import LifeLedger
from lifesteal.engine.service import LifeStealService
from lifesteal.engine.tokens import TokenConverter
from lifesteal.models.policy import PolicyConfig, PolicyHolder
from lifesteal.storage.elimination_store import EliminationStore


logger = get_logger(__name__)


class LifeStealRuntime:
    """Owns the ledger, store, dispatcher and service of one host process.

    Attributes:
        settings: Settings the runtime was built from.
        policy_holder: Active policy snapshot holder.
        ledger: Balance store.
        store: Durable elimination record.
        dispatcher: Per-actor host call queues.
        gateway: Host side-effect route.
        converter: Token conversion.
        engine: Elimination state machine.
        service: Host-facing entry points.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        hooks: HostHooks | None = None,
        policy: PolicyConfig | None = None,
        database_path: str | Path | None = None,
    ) -> None:
        """Build every component from settings.

        Args:
            settings: Application settings.
            hooks: Host integration; NullHostHooks when omitted.
            policy: Policy snapshot overriding ``settings.policy``.
            database_path: Database file overriding ``settings.storage``.

        Raises:
            PersistenceError: If the elimination store cannot be opened.
        """
        self.settings = settings
        self.policy_holder = PolicyHolder(policy or settings.policy.to_policy())
        self.ledger = LifeLedger(self.policy_holder)
        self.store = EliminationStore(
            database_path or settings.storage.resolved_database_path,
            collection=settings.storage.collection_name,
        )
        self.dispatcher = ActorDispatcher(settings.dispatch.max_workers)
        self.gateway = HostGateway(hooks or NullHostHooks(), self.dispatcher)
        self.converter = TokenConverter(self.ledger)
        self.engine = EliminationEngine(self.ledger, self.store, self.gateway)
        self.service = LifeStealService(
            self.policy_holder,
            self.ledger,
            self.converter,
            self.engine,
            self.gateway,
        )

        logger.info(
            "LifeSteal runtime started",
            version=settings.app_version,
            database=str(self.store.db_path),
            eliminated=len(self.store),
        )

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        hooks: HostHooks | None = None,
        policy: PolicyConfig | None = None,
        database_path: str | Path | None = None,
        setup_logging: bool = False,
    ) -> LifeStealRuntime:
        """Build a runtime, reading settings from the environment if needed.

        Args:
            settings: Application settings; ``get_settings()`` when omitted.
            hooks: Host integration.
            policy: Policy snapshot overriding the settings.
            database_path: Database file overriding the settings.
            setup_logging: Configure structlog from the settings first.

        Returns:
            A started runtime.
        """
        settings = settings or get_settings()
        if setup_logging:
            configure_logging(
                level=settings.log_level,
                json_format=settings.json_logs,
                log_file=settings.log_file,
            )
        return cls(settings, hooks=hooks, policy=policy, database_path=database_path)

    def reload(self) -> PolicyConfig:
        """Re-read settings and the elimination record from their sources.

        Settings always come from the environment, so a ``settings`` or
        ``policy`` passed to the constructor is replaced by what the
        environment now says; ``self.settings`` is updated to match. The
        database path stays as built. Balances are not rebalanced against
        the new limits.

        Returns:
            The newly installed policy snapshot.

        Raises:
            ConfigurationError: If the new settings are invalid; the old
                settings and policy stay active.
            PersistenceError: If the store cannot be read; the in-memory
                record stays as it was.
        """
        clear_settings_cache()
        settings = get_settings()
        policy = settings.policy.to_policy()
        self.service.reload_policy(policy)
        self.settings = settings
        logger.info("Settings reloaded", version=settings.app_version)
        self.store.reload()
        return policy

    def shutdown(self, timeout: float | None = None) -> bool:
        """Drain queued host calls and stop the dispatcher.

        Args:
            timeout: Seconds to wait; the configured default when omitted.

        Returns:
            True if every queued call finished.
        """
        if timeout is None:
            timeout = self.settings.dispatch.shutdown_timeout_seconds
        drained = self.dispatcher.shutdown(timeout)
        logger.info("LifeSteal runtime stopped", drained=drained)
        return drained

    def __enter__(self) -> LifeStealRuntime:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = [
    "LifeStealRuntime",
]
