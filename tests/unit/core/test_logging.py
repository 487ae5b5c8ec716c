"""Tests for the logging helpers."""

from __future__ import annotations

import io
import json
import logging
import threading
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from lifesteal.core.exceptions import ConfigurationError
from lifesteal.core.logging import (
    LOGGER_NAME,
    add_app_context,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    log_context,
)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None, None, None]:
    """Start and end each test with no bound context."""
    clear_context()
    yield
    clear_context()


class TestContextBinding:
    """Tests for bind_context and clear_context."""

    def test_bind_context(self) -> None:
        """Test bound values appear in the context."""
        bind_context(host_event="death", victim="alex")
        assert structlog.contextvars.get_contextvars() == {
            "host_event": "death",
            "victim": "alex",
        }

    def test_clear_context(self) -> None:
        """Test clearing removes every bound value."""
        bind_context(host_event="death")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}


class TestLogContext:
    """Tests for the log_context block."""

    def test_binds_inside_block(self) -> None:
        """Test values are bound only inside the block."""
        with log_context(host_event="token_use"):
            assert structlog.contextvars.get_contextvars()["host_event"] == "token_use"
        assert "host_event" not in structlog.contextvars.get_contextvars()

    def test_keeps_outer_context(self) -> None:
        """Test values bound by the host survive the block."""
        bind_context(server="survival")
        with log_context(host_event="death"):
            assert structlog.contextvars.get_contextvars() == {
                "server": "survival",
                "host_event": "death",
            }
        assert structlog.contextvars.get_contextvars() == {"server": "survival"}

    def test_restores_on_error(self) -> None:
        """Test the context is restored when the block raises."""
        with pytest.raises(RuntimeError), log_context(host_event="death"):
            raise RuntimeError("boom")
        assert structlog.contextvars.get_contextvars() == {}


class TestProcessors:
    """Tests for custom processors and logger lookup."""

    def test_add_app_context(self) -> None:
        """Test the app name and thread are added to every event."""
        event = add_app_context(None, "info", {"event": "x"})
        assert event == {
            "event": "x",
            "app": "lifesteal",
            "thread": threading.current_thread().name,
        }

    def test_get_logger(self) -> None:
        """Test a logger can be obtained and bound."""
        logger = get_logger(__name__)
        assert logger.bind(actor_id="a1") is not None


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo configure_logging after a test."""
    package_logger = logging.getLogger(LOGGER_NAME)
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    saved_propagate = package_logger.propagate
    yield
    structlog.reset_defaults()
    for handler in list(package_logger.handlers):
        if handler not in saved_handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(saved_level)
    package_logger.propagate = saved_propagate


@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    """Tests for routing events to the package logger."""

    def test_json_events(self) -> None:
        """Test events are rendered as JSON lines with app context."""
        buffer = io.StringIO()
        configure_logging(level="DEBUG", json_format=True, stream=buffer)

        with log_context(host_event="death"):
            structlog.get_logger("lifesteal.tests").info("Balance adjusted", actor_id="a1")

        record = json.loads(buffer.getvalue().strip().splitlines()[-1])
        assert record["event"] == "Balance adjusted"
        assert record["actor_id"] == "a1"
        assert record["host_event"] == "death"
        assert record["app"] == "lifesteal"
        assert record["level"] == "info"
        assert record["thread"] == threading.current_thread().name

    def test_level_filters(self) -> None:
        """Test events below the configured level are dropped."""
        buffer = io.StringIO()
        configure_logging(level="WARNING", json_format=True, stream=buffer)

        structlog.get_logger("lifesteal.tests").info("quiet")
        structlog.get_logger("lifesteal.tests").warning("loud")

        assert "quiet" not in buffer.getvalue()
        assert "loud" in buffer.getvalue()

    def test_reconfigure_replaces_own_handlers(self) -> None:
        """Test a second call does not stack handlers or drop the host's."""
        package_logger = logging.getLogger(LOGGER_NAME)
        host_handler = logging.NullHandler()
        package_logger.addHandler(host_handler)

        configure_logging(stream=io.StringIO())
        configure_logging(stream=io.StringIO())

        assert host_handler in package_logger.handlers
        assert len(package_logger.handlers) == 2
        assert package_logger.propagate is False

    def test_log_file(self, tmp_path: Path) -> None:
        """Test a log file receives a copy of each line."""
        log_file = tmp_path / "lifesteal.log"
        configure_logging(json_format=True, log_file=str(log_file), stream=io.StringIO())

        structlog.get_logger("lifesteal.tests").info("Runtime started")
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()

        assert "Runtime started" in log_file.read_text(encoding="utf-8")

    def test_unknown_level(self) -> None:
        """Test an unknown level name is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            configure_logging(level="LOUD")

        assert exc_info.value.details["config_key"] == "log_level"
