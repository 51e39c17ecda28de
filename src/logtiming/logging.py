# src/logtiming/logging.py
"""structlog setup for applications that write operation events.

Operations only produce events; where they end up is decided here. Both
structlog loggers and plain stdlib loggers are sent to one handler whose
ProcessorFormatter renders JSON or console lines, so timing events and the
rest of an application's logging share a format.

The stdlib root level set here is also what StructlogSink.is_enabled()
consults, which in turn decides whether operation_at() hands out live or
inert operations.

Scope properties (OperationId, result properties) reach every event through
merge_contextvars in the shared chain.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

from logtiming.enums import LogLevel

if TYPE_CHECKING:
    from logtiming.config import LoggingSettings

# Held at WARNING or above so DEBUG timing output is not buried
DEFAULT_QUIET_LOGGERS: tuple[str, ...] = (
    "asyncio",
    "urllib3",
    "httpx",
    "httpcore",
)


def _level_number(level: str | int) -> int:
    if isinstance(level, str):
        name = level.strip().upper()
        if name not in LogLevel.__members__:
            raise ValueError(f"Unknown log level: {level!r}")
        return int(LogLevel[name])
    return int(level)


def _strip_formatter_keys(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    # Always present on records handled by ProcessorFormatter
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _drop_message_template(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Console lines already show the rendered text; the raw template is noise there."""
    event_dict.pop("message_template", None)
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str | int = "INFO",
    quiet_loggers: Iterable[str] = DEFAULT_QUIET_LOGGERS,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one formatted handler.

    Args:
        json_output: One JSON object per line instead of console output.
            JSON keeps every operation property, message_template included.
        level: Root level, by name or number. Operation factories whose
            levels are both below it become inert.
        quiet_loggers: Loggers held at WARNING or above regardless of level
        stream: Destination, sys.stdout when omitted

    Raises:
        ValueError: If level is an unknown name
    """
    log_level = _level_number(level)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer_processors: list[Any]
    if json_output:
        renderer_processors = [
            _strip_formatter_keys,
            structlog.processors.format_exc_info,
            # Exceptions and arbitrary template arguments fall back to str()
            structlog.processors.JSONRenderer(default=str),
        ]
    else:
        renderer_processors = [
            _strip_formatter_keys,
            _drop_message_template,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=renderer_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    quiet_level = max(log_level, logging.WARNING)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(quiet_level)


def configure_from_settings(settings: LoggingSettings, *, stream: TextIO | None = None) -> None:
    """configure_logging() driven by a LoggingSettings section."""
    configure_logging(json_output=settings.json_output, level=int(settings.level), stream=stream)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger ``name``, as used by StructlogSink."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
