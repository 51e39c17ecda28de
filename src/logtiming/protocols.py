# src/logtiming/protocols.py
"""Protocol definitions for the logging sink consumed by operations.

The sink owns level enablement, message rendering and correlation-context
storage. Operations only ever talk to it through LoggerSink, so any logging
backend can be adapted (see logtiming.sinks.StructlogSink).
"""

from __future__ import annotations

from collections.abc import Sequence
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

from logtiming.enums import LogLevel


@runtime_checkable
class ScopeHandle(Protocol):
    """Releasable correlation-context token returned by begin_scope().

    release() MUST be idempotent.
    """

    def release(self) -> None: ...


@runtime_checkable
class LoggerSink(Protocol):
    """Structured logging sink that operations write through.

    Error handling:
        - is_enabled() and begin_scope() are expected not to raise
        - write() may raise; the error propagates to the caller of the
          terminal transition that triggered it
    """

    def is_enabled(self, level: LogLevel) -> bool:
        """Whether an event at ``level`` would be observed."""
        ...

    def write(
        self,
        level: LogLevel,
        exception: BaseException | None,
        message_template: str,
        args: Sequence[Any],
    ) -> None:
        """Write one event.

        Args:
            level: Effective severity of the event
            exception: Exception to attach, if any
            message_template: Template with named holes, e.g. "Saved {Id}"
            args: Values bound positionally to the template's holes
        """
        ...

    def begin_scope(self, message_template: str, *values: Any) -> ScopeHandle:
        """Push template properties into the ambient logging context.

        The properties stay attached to every event written until the
        returned handle is released.
        """
        ...


class ScopedOperation(Protocol):
    """Context-manager surface of an operation started with ``time()``.

    Exiting the block always records completion; cancel() suppresses it.
    """

    def __enter__(self) -> ScopedOperation: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    def cancel(self) -> None: ...
