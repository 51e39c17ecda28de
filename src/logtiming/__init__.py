# src/logtiming/__init__.py
"""Timed operations for structured logging.

Brackets a unit of work and writes a single event when it ends, carrying
the outcome and elapsed time:

    from logtiming import begin_operation, operation_at, time_operation, LogLevel
    from logtiming.sinks import get_sink

    sink = get_sink(__name__)

    # Completed when the block exits, however it exits
    with time_operation(sink, "Loading {Path}", path):
        load(path)

    # Abandoned unless complete() is called before the block exits
    with begin_operation(sink, "Charging {CustomerId}", customer_id) as op:
        charge(customer_id)
        op.complete()

    # Custom levels; slow operations escalate to WARNING
    with operation_at(sink, LogLevel.DEBUG, warning_threshold=timedelta(seconds=1)).time("Poll"):
        poll()

Components:
- operation: Operation (live) and NullOperation (inert)
- leveled: LeveledOperation gated factory and operation_at()
- extensions: time_operation()/begin_operation() at default levels
- protocols: LoggerSink, ScopeHandle, ScopedOperation
- sinks: StructlogSink adapter and NullSink
- templates: message template parsing and rendering
- clock: Clock protocol, SystemClock, MockClock
- config: pydantic settings loaded through Dynaconf
- logging: structlog configuration
"""

from logtiming.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from logtiming.enums import CompletionBehavior, LogLevel, OperationProperty, Outcome
from logtiming.errors import OperationArgumentError
from logtiming.extensions import begin_operation, time_operation
from logtiming.leveled import LeveledOperation, operation_at
from logtiming.operation import NULL_OPERATION, NullOperation, Operation, TimedOperation
from logtiming.protocols import LoggerSink, ScopedOperation, ScopeHandle

__all__ = [
    "DEFAULT_CLOCK",
    "NULL_OPERATION",
    "Clock",
    "CompletionBehavior",
    "LeveledOperation",
    "LogLevel",
    "LoggerSink",
    "MockClock",
    "NullOperation",
    "Operation",
    "OperationArgumentError",
    "OperationProperty",
    "Outcome",
    "ScopeHandle",
    "ScopedOperation",
    "SystemClock",
    "TimedOperation",
    "begin_operation",
    "operation_at",
    "time_operation",
]
