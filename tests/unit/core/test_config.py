"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from lifesteal.core.config import (
    DispatchSettings,
    PolicySettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from lifesteal.core.exceptions import ConfigurationError
from lifesteal.models.enums import EliminationMode
from lifesteal.models.policy import PolicyConfig


class TestPolicySettings:
    """Tests for PolicySettings configuration."""

    def test_default_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default policy settings."""
        monkeypatch.chdir(tmp_path)

        settings = PolicySettings()

        assert settings.min_balance == 1.0
        assert settings.max_balance == 0.0
        assert settings.ceiling_enabled is False
        assert settings.starting_balance == 20.0
        assert settings.elimination_enabled is False
        assert settings.elimination_mode == EliminationMode.RESTRICT

    def test_reads_environment(self, tmp_path: Path, mock_env_vars: dict[str, str], monkeypatch: pytest.MonkeyPatch) -> None:
        """Test policy values are read from prefixed environment variables."""
        monkeypatch.chdir(tmp_path)

        settings = PolicySettings()

        assert settings.min_balance == 2.0
        assert settings.max_balance == 40.0
        assert settings.elimination_enabled is True
        assert settings.elimination_mode == EliminationMode.EXILE

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("ban", EliminationMode.EXILE),
            ("SPECTATOR", EliminationMode.RESTRICT),
            ("Exile", EliminationMode.EXILE),
        ],
    )
    def test_legacy_mode_names(self, raw: str, expected: EliminationMode) -> None:
        """Test legacy and mixed-case mode names are accepted."""
        settings = PolicySettings(elimination_mode=raw)

        assert settings.elimination_mode == expected

    def test_ceiling_must_exceed_floor(self) -> None:
        """Test that an enabled ceiling must lie above the floor."""
        with pytest.raises(ConfigurationError) as exc_info:
            PolicySettings(min_balance=10.0, max_balance=5.0)

        assert "max_balance" in str(exc_info.value)

    def test_non_positive_ceiling_disables_it(self) -> None:
        """Test that a zero or negative ceiling is treated as disabled."""
        settings = PolicySettings(min_balance=10.0, max_balance=-1.0)

        assert settings.ceiling_enabled is False

    def test_to_policy(self) -> None:
        """Test conversion into an immutable policy snapshot."""
        settings = PolicySettings(
            min_balance=2.0,
            max_balance=40.0,
            pvp_victim_loses=3.0,
            pvp_killer_gains=1.0,
            token_value=4.0,
            elimination_enabled=True,
        )

        policy = settings.to_policy()

        assert isinstance(policy, PolicyConfig)
        assert policy.floor == 2.0
        assert policy.ceiling_enabled is True
        assert policy.ceiling == 40.0
        assert policy.kill_loss == 3.0
        assert policy.kill_gain == 1.0
        assert policy.token_exchange_rate == 4.0
        assert policy.elimination_enabled is True

    def test_to_policy_without_ceiling(self) -> None:
        """Test a disabled ceiling carries over to the snapshot."""
        policy = PolicySettings(max_balance=0.0).to_policy()

        assert policy.ceiling_enabled is False
        assert policy.clamp(1000.0) == 1000.0


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_database_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the database defaults to data/lifesteal.db."""
        monkeypatch.chdir(tmp_path)

        settings = StorageSettings()

        assert settings.resolved_database_path == Path("data") / "lifesteal.db"
        assert settings.collection_name == "eliminated-players"

    def test_explicit_database_path(self, tmp_path: Path) -> None:
        """Test an explicit database path wins over the data directory."""
        db_path = tmp_path / "custom.db"

        settings = StorageSettings(data_path=tmp_path / "ignored", database_path=db_path)

        assert settings.resolved_database_path == db_path


class TestDispatchSettings:
    """Tests for DispatchSettings configuration."""

    def test_default_values(self) -> None:
        """Test default dispatcher settings."""
        settings = DispatchSettings()

        assert settings.max_workers == 4
        assert settings.shutdown_timeout_seconds == 5.0

    def test_worker_bounds(self) -> None:
        """Test that the worker count must be positive."""
        with pytest.raises(ValueError):
            DispatchSettings(max_workers=0)


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "LifeSteal"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.policy, PolicySettings)

    def test_debug_mode(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test debug mode setting."""
        monkeypatch.setenv("LIFESTEAL_DEBUG", "true")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.is_production is False

    def test_is_production_property(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test is_production property."""
        monkeypatch.setenv("LIFESTEAL_DEBUG", "false")
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.is_production is True


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_returns_settings_instance(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that get_settings returns a Settings instance."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings = get_settings()

        assert isinstance(settings, Settings)

    def test_caching(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings are cached."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2

    def test_cache_clear(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that cache can be cleared."""
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_invalid_environment_raises_configuration_error(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that invalid values surface as ConfigurationError."""
        monkeypatch.setenv("LIFESTEAL_LOG_LEVEL", "LOUD")
        monkeypatch.chdir(tmp_path)
        clear_settings_cache()

        with pytest.raises(ConfigurationError):
            get_settings()
