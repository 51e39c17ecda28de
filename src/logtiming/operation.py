# src/logtiming/operation.py
"""Timed operations.

An Operation brackets a unit of work and writes exactly one event when it
ends, carrying the outcome (completed/abandoned) and the elapsed time:

    with begin_operation(sink, "Charging {CustomerId}", customer_id) as op:
        charge(customer_id)
        op.complete()
    # -> "Charging 42 completed in 12.3 ms"

Lifecycle:
    1. Construction opens a correlation scope (OperationId) on the sink and
       then starts the timer, so scope setup is not counted as latency.
    2. The owner calls complete(), abandon() or cancel(), or simply leaves
       the ``with`` block, which completes or abandons according to the
       operation's CompletionBehavior.
    3. The first terminal transition stops the timer, switches the operation
       to SILENT, writes the event and releases the scope. Every later
       transition is a no-op.

Thread Safety:
    None. An operation belongs to one call path (a thread, or one task in an
    asyncio chain). Racing terminal calls from several threads can write
    twice.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import timedelta
from types import TracebackType
from typing import Any, Final, Literal, TypeAlias

from logtiming.clock import DEFAULT_CLOCK, Clock
from logtiming.enums import CompletionBehavior, LogLevel, OperationProperty, Outcome
from logtiming.errors import OperationArgumentError
from logtiming.protocols import LoggerSink, ScopeHandle

__all__ = [
    "NULL_OPERATION",
    "NullOperation",
    "Operation",
    "TimedOperation",
]

OPERATION_ID_TEMPLATE: Final = f"{OperationProperty.OPERATION_ID}: {{{OperationProperty.OPERATION_ID}}}"
_EVENT_SUFFIX: Final = f" {{{OperationProperty.OUTCOME}}} in {{{OperationProperty.ELAPSED}:0.0}} ms"

# Distinguishes complete() from complete(None), which is an error
_NO_RESULT: Any = object()


class Operation:
    """Records the timing and outcome of one unit of work through a LoggerSink.

    Normally created through LeveledOperation.begin()/time() or the
    begin_operation()/time_operation() helpers rather than directly.

    Args are stored at construction and only rendered when the event is
    written, so do not pass values that are mutated during the operation.
    """

    def __init__(
        self,
        sink: LoggerSink,
        message_template: str,
        args: Sequence[Any],
        completion_behavior: CompletionBehavior,
        completion_level: LogLevel,
        abandonment_level: LogLevel,
        warning_threshold: timedelta | None = None,
        *,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        """Open the operation's scope and start timing.

        Raises:
            OperationArgumentError: If sink, message_template or args is None
        """
        if sink is None:
            raise OperationArgumentError("sink")
        if message_template is None:
            raise OperationArgumentError("message_template")
        if args is None:
            raise OperationArgumentError("args")

        self._sink = sink
        self._message_template = message_template
        self._args = tuple(args)
        self._completion_behavior = completion_behavior
        self._completion_level = completion_level
        self._abandonment_level = abandonment_level
        self._warning_threshold = warning_threshold
        self._clock = clock
        self._exception: BaseException | None = None
        self._stop: float | None = None

        self._operation_id = str(uuid.uuid4())
        self._scope: ScopeHandle | None = sink.begin_scope(OPERATION_ID_TEMPLATE, self._operation_id)
        # Last, so opening the scope is not timed
        self._start = clock.monotonic()

    @property
    def operation_id(self) -> str:
        """Correlation identifier pushed into the sink's scope."""
        return self._operation_id

    @property
    def completion_behavior(self) -> CompletionBehavior:
        return self._completion_behavior

    @property
    def exception(self) -> BaseException | None:
        return self._exception

    @property
    def elapsed(self) -> timedelta:
        """Time since the operation started.

        Keeps growing while the operation is active and is frozen by the first
        terminal transition. Never negative: if the clock reports a stop tick
        earlier than the start tick, zero is returned.
        """
        stop = self._stop if self._stop is not None else self._clock.monotonic()
        seconds = stop - self._start
        if seconds < 0:
            return timedelta(0)
        return timedelta(seconds=seconds)

    def complete(self, result_template: str = _NO_RESULT, *result_args: Any) -> None:
        """Write the completion event.

        Args:
            result_template: Optional message template describing the result,
                e.g. "Rows: {RowCount}". Its properties are attached to the
                completion event only.
            result_args: Values for result_template's holes

        Raises:
            OperationArgumentError: If result_template is passed as None
        """
        if result_template is None:
            raise OperationArgumentError("result_template")

        if self._completion_behavior is CompletionBehavior.SILENT:
            return

        if result_template is _NO_RESULT:
            self._write(self._completion_level, Outcome.COMPLETED)
        else:
            self._write(self._completion_level, Outcome.COMPLETED, (result_template, result_args))

    def abandon(self, exception: BaseException | None = None) -> None:
        """Write the abandonment event, optionally attaching ``exception``."""
        if exception is not None:
            self.set_exception(exception)

        if self._completion_behavior is CompletionBehavior.SILENT:
            return

        self._write(self._abandonment_level, Outcome.ABANDONED)

    def cancel(self) -> None:
        """Stop the operation without writing anything, now or on block exit."""
        self._completion_behavior = CompletionBehavior.SILENT
        self._release_scope()

    def set_exception(self, exception: BaseException) -> Operation:
        """Attach ``exception`` to the event written when the operation ends.

        Has no effect on an event that has already been written.

        Raises:
            OperationArgumentError: If exception is None
        """
        if exception is None:
            raise OperationArgumentError("exception")
        self._exception = exception
        return self

    def set_exception_and_continue(self, exception: BaseException) -> Literal[False]:
        """Attach ``exception`` and return False.

        For enriching an error without handling it:

            with begin_operation(sink, "Sync") as op:
                try:
                    sync()
                    op.complete()
                except SyncError as e:
                    if not op.set_exception_and_continue(e):
                        raise
        """
        self.set_exception(exception)
        return False

    def close(self) -> None:
        """End the operation as if its ``with`` block had exited."""
        try:
            match self._completion_behavior:
                case CompletionBehavior.SILENT:
                    pass
                case CompletionBehavior.ABANDON:
                    self._write(self._abandonment_level, Outcome.ABANDONED)
                case CompletionBehavior.COMPLETE:
                    self._write(self._completion_level, Outcome.COMPLETED)
        finally:
            self._release_scope()

    def __enter__(self) -> Operation:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> Operation:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Operation(message_template={self._message_template!r}, "
            f"behavior={self._completion_behavior.value}, operation_id={self._operation_id!r})"
        )

    def _write(
        self,
        level: LogLevel,
        outcome: Outcome,
        result: tuple[str, Sequence[Any]] | None = None,
    ) -> None:
        if self._stop is None:
            self._stop = self._clock.monotonic()
        self._completion_behavior = CompletionBehavior.SILENT

        try:
            result_scope = self._sink.begin_scope(result[0], *result[1]) if result is not None else None
            try:
                elapsed_ms = self.elapsed / timedelta(milliseconds=1)

                if (
                    self._warning_threshold is not None
                    and elapsed_ms > self._warning_threshold / timedelta(milliseconds=1)
                    and level < LogLevel.WARNING
                ):
                    level = LogLevel.WARNING

                self._sink.write(
                    level,
                    self._exception,
                    self._message_template + _EVENT_SUFFIX,
                    (*self._args, outcome.value, elapsed_ms),
                )
            finally:
                if result_scope is not None:
                    result_scope.release()
        finally:
            self._release_scope()

    def _release_scope(self) -> None:
        scope, self._scope = self._scope, None
        if scope is not None:
            scope.release()


class NullOperation:
    """Inert operation returned when none of its levels would be logged.

    Never reads the clock, never opens a scope and never touches a sink.
    Argument validation still applies so call sites behave the same whether
    or not logging is enabled.
    """

    @property
    def operation_id(self) -> None:
        return None

    @property
    def completion_behavior(self) -> CompletionBehavior:
        return CompletionBehavior.SILENT

    @property
    def exception(self) -> None:
        return None

    @property
    def elapsed(self) -> timedelta:
        return timedelta(0)

    def complete(self, result_template: str = _NO_RESULT, *result_args: Any) -> None:
        if result_template is None:
            raise OperationArgumentError("result_template")

    def abandon(self, exception: BaseException | None = None) -> None:
        pass

    def cancel(self) -> None:
        pass

    def set_exception(self, exception: BaseException) -> NullOperation:
        if exception is None:
            raise OperationArgumentError("exception")
        return self

    def set_exception_and_continue(self, exception: BaseException) -> Literal[False]:
        self.set_exception(exception)
        return False

    def close(self) -> None:
        pass

    def __enter__(self) -> NullOperation:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        pass

    async def __aenter__(self) -> NullOperation:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        pass

    def __repr__(self) -> str:
        return "NullOperation()"


# Shared by every gated-off factory; stateless, so safe across threads
NULL_OPERATION: Final = NullOperation()

TimedOperation: TypeAlias = Operation | NullOperation
