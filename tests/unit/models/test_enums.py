"""Tests for enumeration types."""

from __future__ import annotations

import pytest

from lifesteal.models.enums import (
    DeathCause,
    EliminationMode,
    NotificationKind,
    TokenDirection,
)


class TestEliminationMode:
    """Tests for EliminationMode parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("exile", EliminationMode.EXILE),
            ("EXILE", EliminationMode.EXILE),
            ("BAN", EliminationMode.EXILE),
            ("kick", EliminationMode.EXILE),
            ("restrict", EliminationMode.RESTRICT),
            (" Spectator ", EliminationMode.RESTRICT),
        ],
    )
    def test_accepted_names(self, raw: str, expected: EliminationMode) -> None:
        """Test canonical, legacy and mixed-case names."""
        assert EliminationMode(raw) is expected

    def test_unknown_name(self) -> None:
        """Test that an unknown mode is rejected."""
        with pytest.raises(ValueError):
            EliminationMode("vaporize")

    def test_non_string(self) -> None:
        """Test that non-string values are rejected."""
        with pytest.raises(ValueError):
            EliminationMode(1)


class TestStringEnums:
    """Tests for the string values seen by hosts."""

    def test_values(self) -> None:
        """Test enum members compare equal to their wire values."""
        assert DeathCause.PLAYER == "player"
        assert TokenDirection.DEPOSIT == "deposit"
        assert NotificationKind.ELIMINATED == "eliminated"
