"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the LifeSteal core test suite.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import pytest

from lifesteal.core.config import Settings
from lifesteal.engine.dispatch import ActorDispatcher
from lifesteal.engine.elimination import EliminationEngine
from lifesteal.engine.hooks import HostGateway
from lifesteal.engine.ledger import LifeLedger
from lifesteal.engine.service import LifeStealService
from lifesteal.engine.tokens import TokenConverter
from lifesteal.models.enums import EliminationMode, NotificationKind
from lifesteal.models.policy import PolicyConfig, PolicyHolder
from lifesteal.storage.elimination_store import EliminationStore


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


# =============================================================================
# Host Double
# =============================================================================


class RecordingHost:
    """HostHooks that records every call in order.

    Attributes:
        calls: ``(method, actor, *args)`` tuples in call order.
        connected: Actors reported as online.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.connected: set[str] = set()
        self._lock = threading.Lock()

    def _record(self, *entry: Any) -> None:
        with self._lock:
            self.calls.append(entry)

    def exile(self, actor: str) -> None:
        self._record("exile", actor)

    def restrict(self, actor: str) -> None:
        self._record("restrict", actor)

    def restore_participation(self, actor: str) -> None:
        self._record("restore_participation", actor)

    def is_connected(self, actor: str) -> bool:
        return actor in self.connected

    def mint_tokens(self, actor: str, count: int) -> None:
        self._record("mint_tokens", actor, count)

    def consume_tokens(self, actor: str, count: int) -> None:
        self._record("consume_tokens", actor, count)

    def notify(
        self,
        actor: str,
        kind: NotificationKind,
        amounts: Mapping[str, float],
        related_actor: str | None = None,
    ) -> None:
        self._record("notify", actor, kind, dict(amounts), related_actor)

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        """Recorded calls of one hook method."""
        with self._lock:
            return [call for call in self.calls if call[0] == method]

    def notifications(self, actor: str | None = None) -> list[NotificationKind]:
        """Notification kinds sent, optionally to one actor."""
        return [
            call[2]
            for call in self.calls_to("notify")
            if actor is None or call[1] == actor
        ]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from lifesteal.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "LIFESTEAL_DEBUG": "true",
        "LIFESTEAL_LOG_LEVEL": "DEBUG",
        "LIFESTEAL_POLICY_MIN_BALANCE": "2",
        "LIFESTEAL_POLICY_MAX_BALANCE": "40",
        "LIFESTEAL_POLICY_ELIMINATION_ENABLED": "true",
        "LIFESTEAL_POLICY_ELIMINATION_MODE": "BAN",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Policy Fixtures
# =============================================================================


@pytest.fixture
def policy() -> PolicyConfig:
    """Provide a policy with elimination on and a ceiling of 40.

    Returns:
        PolicyConfig with floor 1, ceiling 40, losses and gains of 2.
    """
    return PolicyConfig(
        floor=1.0,
        ceiling_enabled=True,
        ceiling=40.0,
        natural_loss=2.0,
        monster_loss=3.0,
        kill_loss=2.0,
        kill_gain=2.0,
        token_exchange_rate=2.0,
        elimination_enabled=True,
        elimination_mode=EliminationMode.RESTRICT,
        revival_balance=10.0,
        default_balance=20.0,
    )


@pytest.fixture
def policy_holder(policy: PolicyConfig) -> PolicyHolder:
    """Holder seeded with the ``policy`` fixture."""
    return PolicyHolder(policy)


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def ledger(policy_holder: PolicyHolder) -> LifeLedger:
    """Create an empty ledger on the shared policy holder."""
    return LifeLedger(policy_holder)


@pytest.fixture
def store(tmp_path: Path) -> EliminationStore:
    """Create an elimination store in a temporary database."""
    return EliminationStore(tmp_path / "data" / "lifesteal.db")


@pytest.fixture
def host() -> RecordingHost:
    """Create a recording host double."""
    return RecordingHost()


@pytest.fixture
def dispatcher() -> Generator[ActorDispatcher, None, None]:
    """Create a dispatcher and shut it down after the test."""
    dispatcher = ActorDispatcher(max_workers=2)
    yield dispatcher
    dispatcher.shutdown(timeout=5.0)


@pytest.fixture
def gateway(host: RecordingHost, dispatcher: ActorDispatcher) -> HostGateway:
    """Route host calls from the engine to the recording host."""
    return HostGateway(host, dispatcher)


@pytest.fixture
def converter(ledger: LifeLedger) -> TokenConverter:
    """Create a token converter over the ledger."""
    return TokenConverter(ledger)


@pytest.fixture
def engine(
    ledger: LifeLedger,
    store: EliminationStore,
    gateway: HostGateway,
) -> EliminationEngine:
    """Create an elimination engine over the ledger and store."""
    return EliminationEngine(ledger, store, gateway)


@pytest.fixture
def service(
    policy_holder: PolicyHolder,
    ledger: LifeLedger,
    converter: TokenConverter,
    engine: EliminationEngine,
    gateway: HostGateway,
) -> LifeStealService:
    """Create the host-facing service from the engine fixtures."""
    return LifeStealService(policy_holder, ledger, converter, engine, gateway)


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Create settings that store data under a temporary directory.

    Args:
        tmp_path: Pytest temporary path fixture.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        Settings instance.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LIFESTEAL_STORAGE_DATA_PATH", str(tmp_path / "data"))
    return Settings()
