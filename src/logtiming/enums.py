# src/logtiming/enums.py
"""Levels, modes and labels shared by operations, factories and sinks.

LogLevel reuses the stdlib ``logging`` numbering so a level can be passed
straight through to stdlib and structlog loggers without translation.
"""

from enum import IntEnum, StrEnum


class LogLevel(IntEnum):
    """Severity of an emitted operation event.

    Ordered: a higher value is more severe.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class CompletionBehavior(StrEnum):
    """What an operation does when its ``with`` block exits.

    SILENT is also the terminal state: once an event has been written (or the
    operation cancelled) every further transition is a no-op.
    """

    SILENT = "silent"
    COMPLETE = "complete"
    ABANDON = "abandon"


class Outcome(StrEnum):
    """Outcome label attached to the emitted event."""

    COMPLETED = "completed"
    ABANDONED = "abandoned"


class OperationProperty(StrEnum):
    """Property names attached to events by operations."""

    ELAPSED = "Elapsed"
    OUTCOME = "Outcome"
    OPERATION_ID = "OperationId"
