# src/logtiming/leveled.py
"""Level-gated operation factory.

LeveledOperation decides once, at creation, whether any event it could
produce would be observed by the sink. If not, it hands out the shared
NULL_OPERATION from begin()/time(), skipping identifier generation, scope
setup and clock reads entirely. Call sites never branch on this themselves.

Usage:
    timings = operation_at(sink, LogLevel.DEBUG, LogLevel.ERROR, timedelta(milliseconds=500))

    with timings.time("Rebuilding index {Name}", name):
        rebuild(name)
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, ClassVar

import structlog

from logtiming.clock import DEFAULT_CLOCK, Clock
from logtiming.enums import CompletionBehavior, LogLevel
from logtiming.errors import OperationArgumentError
from logtiming.operation import NULL_OPERATION, NullOperation, Operation, TimedOperation
from logtiming.protocols import LoggerSink

logger = structlog.get_logger(__name__)


class LeveledOperation:
    """Starts operations at fixed completion and abandonment levels.

    Instances are immutable. Obtain one with operation_at(); the inert
    instance is LeveledOperation.NONE.
    """

    NONE: ClassVar[LeveledOperation]

    def __init__(
        self,
        sink: LoggerSink | None,
        completion_level: LogLevel,
        abandonment_level: LogLevel,
        warning_threshold: timedelta | None = None,
        *,
        clock: Clock = DEFAULT_CLOCK,
        cached_result: NullOperation | None = None,
    ) -> None:
        if sink is None and cached_result is None:
            raise OperationArgumentError("sink")
        self._sink = sink
        self._completion_level = completion_level
        self._abandonment_level = abandonment_level
        self._warning_threshold = warning_threshold
        self._clock = clock
        self._cached_result = cached_result

    @property
    def enabled(self) -> bool:
        """Whether begin()/time() produce real operations."""
        return self._cached_result is None

    @property
    def completion_level(self) -> LogLevel:
        return self._completion_level

    @property
    def abandonment_level(self) -> LogLevel:
        return self._abandonment_level

    @property
    def warning_threshold(self) -> timedelta | None:
        return self._warning_threshold

    def begin(self, message_template: str, *args: Any) -> TimedOperation:
        """Start an operation that must be completed explicitly.

        Leaving the ``with`` block without calling complete() (including
        leaving it through an exception) records the operation as abandoned.
        """
        return self._start(message_template, args, CompletionBehavior.ABANDON)

    def time(self, message_template: str, *args: Any) -> TimedOperation:
        """Start an operation that is completed by leaving its ``with`` block.

        Leaving the block by any route, an exception included, records
        completion. There is no abandoned outcome for timed blocks.
        """
        return self._start(message_template, args, CompletionBehavior.COMPLETE)

    def _start(
        self,
        message_template: str,
        args: tuple[Any, ...],
        behavior: CompletionBehavior,
    ) -> TimedOperation:
        if self._cached_result is not None:
            return self._cached_result
        assert self._sink is not None
        return Operation(
            self._sink,
            message_template,
            args,
            behavior,
            self._completion_level,
            self._abandonment_level,
            self._warning_threshold,
            clock=self._clock,
        )

    def __repr__(self) -> str:
        if not self.enabled:
            return "LeveledOperation.NONE"
        return (
            f"LeveledOperation(completion={self._completion_level.name}, "
            f"abandonment={self._abandonment_level.name}, "
            f"warning_threshold={self._warning_threshold!r})"
        )


LeveledOperation.NONE = LeveledOperation(
    None,
    LogLevel.CRITICAL,
    LogLevel.CRITICAL,
    cached_result=NULL_OPERATION,
)


def operation_at(
    sink: LoggerSink,
    completion: LogLevel,
    abandonment: LogLevel | None = None,
    warning_threshold: timedelta | None = None,
    *,
    clock: Clock = DEFAULT_CLOCK,
) -> LeveledOperation:
    """Configure the levels used for completion and abandonment events.

    Args:
        sink: Sink the operations write through
        completion: Level of the event written on completion
        abandonment: Level of the event written on abandonment; defaults to
            ``completion``
        warning_threshold: Events for operations that run longer than this
            are raised to WARNING when their level is below it
        clock: Monotonic clock used for timing

    Returns:
        A LeveledOperation, or LeveledOperation.NONE if neither level is
        enabled on the sink at the time of the call.

    Raises:
        OperationArgumentError: If sink is None
    """
    if sink is None:
        raise OperationArgumentError("sink")

    applied_abandonment = abandonment if abandonment is not None else completion
    if not sink.is_enabled(completion) and (
        applied_abandonment == completion or not sink.is_enabled(applied_abandonment)
    ):
        logger.debug(
            "operation_levels_disabled",
            completion=completion.name,
            abandonment=applied_abandonment.name,
        )
        return LeveledOperation.NONE

    return LeveledOperation(sink, completion, applied_abandonment, warning_threshold, clock=clock)
