"""Structured logging for the LifeSteal core.

The core runs inside a host game server that already owns the root logger.
Events are therefore rendered by structlog but delivered through the
standard library ``lifesteal`` logger, so the host decides where they go
and the core never reconfigures anything outside its own namespace.

Every event carries the emitting thread: ledger mutations run on the
host's threads and hook calls on dispatcher workers, and the thread name is
what tells the two apart in a log.

Example:
    >>> from lifesteal.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Balance adjusted", actor_id="a1", applied_delta=-2.0)
"""

from __future__ import annotations

import logging
import sys
import threading
from contextlib import contextmanager
from typing import IO, TYPE_CHECKING, Any, Iterator

import structlog
from structlog.types import Processor

from lifesteal.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


LOGGER_NAME = "lifesteal"
_HANDLER_PREFIX = "lifesteal-core"


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag an event with the application and the emitting thread.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with ``app`` and ``thread`` set.
    """
    event_dict.setdefault("app", LOGGER_NAME)
    event_dict["thread"] = threading.current_thread().name
    return event_dict


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ConfigurationError(f"Unknown log level: {level!r}", config_key="log_level")
    return resolved


def _build_formatter(json_format: bool, colors: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
        tail: list[Processor] = [structlog.processors.format_exc_info, renderer]
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=structlog.dev.plain_traceback,
        )
        tail = [renderer]

    return structlog.stdlib.ProcessorFormatter(
        # Records logged through plain logging.getLogger("lifesteal...")
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
        ],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *tail],
    )


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Route the core's structured events to the ``lifesteal`` logger.

    Calling this again replaces the handlers installed by the previous
    call; handlers the host attached itself are left alone.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of console output.
        log_file: Optional file that receives a copy of every line.
        stream: Console stream; ``sys.stderr`` when omitted.

    Returns:
        The configured ``lifesteal`` stdlib logger.

    Raises:
        ConfigurationError: If ``level`` is not a logging level name.
    """
    numeric_level = _resolve_level(level)
    target = stream if stream is not None else sys.stderr

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_app_context,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        if (handler.get_name() or "").startswith(_HANDLER_PREFIX):
            package_logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(target)
    console.set_name(f"{_HANDLER_PREFIX}-console")
    console.setFormatter(_build_formatter(json_format, colors=target.isatty()))
    package_logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.set_name(f"{_HANDLER_PREFIX}-file")
        file_handler.setFormatter(_build_formatter(json_format, colors=False))
        package_logger.addHandler(file_handler)

    package_logger.setLevel(numeric_level)
    package_logger.propagate = False
    return package_logger


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger for a core module.

    Args:
        name: Dotted module name, normally ``__name__``.

    Returns:
        A structlog bound logger.
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values to every event logged afterwards in this context.

    Hosts use it to tag a whole tick or command, e.g.
    ``bind_context(server="survival-1")``.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind values for the duration of a with block.

    Unlike ``clear_context``, leaves whatever the host bound untouched.
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
