# src/logtiming/extensions.py
"""Entry points for starting timed operations on a sink.

time_operation() and begin_operation() use the default levels: INFO for
completion, WARNING for abandonment. Use operation_at() for anything else.
"""

from __future__ import annotations

from typing import Any

from logtiming.clock import DEFAULT_CLOCK, Clock
from logtiming.enums import CompletionBehavior, LogLevel
from logtiming.errors import OperationArgumentError
from logtiming.operation import Operation
from logtiming.protocols import LoggerSink, ScopedOperation

__all__ = [
    "DEFAULT_ABANDONMENT_LEVEL",
    "DEFAULT_COMPLETION_LEVEL",
    "begin_operation",
    "time_operation",
]

DEFAULT_COMPLETION_LEVEL = LogLevel.INFO
DEFAULT_ABANDONMENT_LEVEL = LogLevel.WARNING


def time_operation(
    sink: LoggerSink,
    message_template: str,
    *args: Any,
    clock: Clock = DEFAULT_CLOCK,
) -> ScopedOperation:
    """Start an operation that completes when its ``with`` block exits.

    Args are stored and only rendered when the operation ends, so do not
    pass values that are mutated during the operation.

    Raises:
        OperationArgumentError: If sink or message_template is None
    """
    if sink is None:
        raise OperationArgumentError("sink")
    return Operation(
        sink,
        message_template,
        args,
        CompletionBehavior.COMPLETE,
        DEFAULT_COMPLETION_LEVEL,
        DEFAULT_ABANDONMENT_LEVEL,
        clock=clock,
    )


def begin_operation(
    sink: LoggerSink,
    message_template: str,
    *args: Any,
    clock: Clock = DEFAULT_CLOCK,
) -> Operation:
    """Start an operation that must be completed with Operation.complete().

    Leaving the ``with`` block without completing records abandonment.

    Raises:
        OperationArgumentError: If sink or message_template is None
    """
    if sink is None:
        raise OperationArgumentError("sink")
    return Operation(
        sink,
        message_template,
        args,
        CompletionBehavior.ABANDON,
        DEFAULT_COMPLETION_LEVEL,
        DEFAULT_ABANDONMENT_LEVEL,
        clock=clock,
    )
