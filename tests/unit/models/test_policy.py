"""Tests for the policy snapshot and its holder."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from lifesteal.core.exceptions import ConfigurationError
from lifesteal.models.enums import EliminationMode
from lifesteal.models.policy import PolicyConfig, PolicyHolder


class TestPolicyConfig:
    """Tests for PolicyConfig."""

    def test_defaults(self) -> None:
        """Test default limits."""
        policy = PolicyConfig()

        assert policy.floor == 1.0
        assert policy.ceiling_enabled is False
        assert policy.default_balance == 20.0
        assert policy.withdraw_enabled is True
        assert policy.revival_enabled is True

    def test_is_frozen(self) -> None:
        """Test that a snapshot cannot be mutated in place."""
        policy = PolicyConfig()

        with pytest.raises(PydanticValidationError):
            policy.floor = 5.0  # type: ignore[misc]

    def test_rejects_unknown_fields(self) -> None:
        """Test that misspelled limits are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            PolicyConfig(flor=2.0)  # type: ignore[call-arg]

        assert exc_info.value.details["config_key"] == "flor"
        assert isinstance(exc_info.value.__cause__, PydanticValidationError)

    def test_ceiling_must_exceed_floor(self) -> None:
        """Test that an enabled ceiling at or below the floor is invalid."""
        with pytest.raises(ConfigurationError) as exc_info:
            PolicyConfig(floor=5.0, ceiling_enabled=True, ceiling=5.0)

        assert exc_info.value.details["config_key"] == "ceiling"

    def test_disabled_ceiling_is_not_validated(self) -> None:
        """Test that a disabled ceiling may hold any value."""
        policy = PolicyConfig(floor=5.0, ceiling_enabled=False, ceiling=0.0)

        assert policy.clamp(500.0) == 500.0

    def test_exchange_rate_must_be_positive(self) -> None:
        """Test that a zero token rate is invalid."""
        with pytest.raises(ConfigurationError) as exc_info:
            PolicyConfig(token_exchange_rate=0.0)

        assert exc_info.value.details["config_key"] == "token_exchange_rate"

    def test_negative_loss_is_invalid(self) -> None:
        """Test that a negative loss is a configuration error."""
        with pytest.raises(ConfigurationError):
            PolicyConfig(natural_loss=-1.0)

    def test_unknown_mode_is_invalid(self) -> None:
        """Test that an unrecognised elimination mode is rejected."""
        with pytest.raises(ConfigurationError):
            PolicyConfig(elimination_mode="smite")

    def test_mode_aliases(self) -> None:
        """Test legacy mode names are parsed."""
        assert PolicyConfig(elimination_mode="BAN").elimination_mode == EliminationMode.EXILE
        assert PolicyConfig(elimination_mode="spectator").elimination_mode == EliminationMode.RESTRICT

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (-10.0, 2.0),
            (2.0, 2.0),
            (15.0, 15.0),
            (40.0, 40.0),
            (41.0, 40.0),
        ],
    )
    def test_clamp(self, value: float, expected: float) -> None:
        """Test clamping into [floor, ceiling]."""
        policy = PolicyConfig(floor=2.0, ceiling_enabled=True, ceiling=40.0)

        assert policy.clamp(value) == expected

    def test_elimination_threshold(self) -> None:
        """Test the threshold sits a small epsilon above the floor."""
        policy = PolicyConfig(floor=2.0)

        assert policy.elimination_threshold == pytest.approx(2.01)

    def test_tokens_to_life_points(self) -> None:
        """Test token value conversion."""
        policy = PolicyConfig(token_exchange_rate=2.5)

        assert policy.tokens_to_life_points(4) == 10.0


class TestPolicyHolder:
    """Tests for PolicyHolder."""

    def test_default_snapshot(self) -> None:
        """Test the holder starts with defaults when not seeded."""
        holder = PolicyHolder()

        assert holder.current == PolicyConfig()

    def test_replace_returns_previous(self) -> None:
        """Test that replace swaps snapshots and returns the old one."""
        old = PolicyConfig(floor=1.0)
        new = PolicyConfig(floor=3.0)
        holder = PolicyHolder(old)

        previous = holder.replace(new)

        assert previous is old
        assert holder.current is new

    def test_old_snapshot_unchanged(self) -> None:
        """Test that a snapshot taken before a reload keeps its limits."""
        holder = PolicyHolder(PolicyConfig(floor=1.0))
        snapshot = holder.current

        holder.replace(PolicyConfig(floor=3.0))

        assert snapshot.floor == 1.0
