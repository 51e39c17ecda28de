# src/logtiming/sinks.py
"""LoggerSink implementations.

StructlogSink adapts a structlog stdlib BoundLogger to the LoggerSink
protocol:

- level checks go to the underlying stdlib logger
- templates are rendered into the event text, and each hole is also kept as
  a structured key on the event
- scopes are bound into structlog.contextvars. Releasing a scope removes only
  what it contributed: every key it bound is recomputed from the scopes that
  are still open, so operations may end in any order, and a scope may be
  released from a task other than the one that opened it.

Usage:
    from logtiming import begin_operation
    from logtiming.logging import configure_logging
    from logtiming.sinks import get_sink

    configure_logging(json_output=True)
    sink = get_sink(__name__)

    with begin_operation(sink, "Importing {File}", path) as op:
        load(path)
        op.complete()
"""

from __future__ import annotations

import contextvars
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from logtiming.enums import LogLevel
from logtiming.logging import get_logger
from logtiming.protocols import ScopeHandle
from logtiming.templates import MessageTemplate

__all__ = [
    "SCOPES_KEY",
    "ContextScope",
    "NullSink",
    "StructlogSink",
    "get_sink",
]

# Rendered text of every open scope, outermost first
SCOPES_KEY = "scopes"

# Event keys owned by structlog or by write(); template holes with these
# names are stored with a trailing underscore instead.
_RESERVED_KEYS = frozenset({"event", "level", "logger", "timestamp", "exc_info", "message_template", SCOPES_KEY})

_UNSET: Any = object()

# Scopes opened and not yet released in the current context, outermost first
_open_scopes: contextvars.ContextVar[tuple[ContextScope, ...]] = contextvars.ContextVar(
    "logtiming_open_scopes", default=()
)


class ContextScope:
    """Scope handle for properties bound into structlog.contextvars.

    ``previous`` holds, per key, the value the key had before any open scope
    bound it, so it can be put back once the last scope binding it goes away.
    """

    def __init__(self, text: str, properties: Mapping[str, Any], previous: Mapping[str, Any]) -> None:
        self._text = text
        self._properties = dict(properties)
        self._previous = dict(previous)
        self._released = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def properties(self) -> Mapping[str, Any]:
        return self._properties

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True

        stack = _open_scopes.get()
        if not any(scope is self for scope in stack):
            # Opened in a context that this one did not inherit
            return
        remaining = tuple(scope for scope in stack if scope is not self)
        _open_scopes.set(remaining)

        rebind: dict[str, Any] = {}
        unbind: list[str] = []
        for key in self._properties:
            owners = [scope for scope in remaining if key in scope.properties]
            if owners:
                rebind[key] = owners[-1].properties[key]
            elif self._previous[key] is _UNSET:
                unbind.append(key)
            else:
                rebind[key] = self._previous[key]

        if remaining:
            rebind[SCOPES_KEY] = tuple(scope.text for scope in remaining)
        else:
            unbind.append(SCOPES_KEY)

        structlog.contextvars.unbind_contextvars(*unbind)
        structlog.contextvars.bind_contextvars(**rebind)


class _NullScope:
    def release(self) -> None:
        pass


_NULL_SCOPE = _NullScope()


def _safe_key(name: str) -> str:
    return f"{name}_" if name in _RESERVED_KEYS else name


def _open_scope(text: str, properties: Mapping[str, Any]) -> ContextScope:
    stack = _open_scopes.get()
    current = structlog.contextvars.get_contextvars()

    previous: dict[str, Any] = {}
    for key in properties:
        owners = [scope for scope in stack if key in scope.properties]
        # The value under the oldest owner is what the key held outside any scope
        previous[key] = owners[0]._previous[key] if owners else current.get(key, _UNSET)

    scope = ContextScope(text, properties, previous)
    _open_scopes.set((*stack, scope))
    structlog.contextvars.bind_contextvars(
        **properties,
        **{SCOPES_KEY: tuple(open_scope.text for open_scope in (*stack, scope))},
    )
    return scope


class StructlogSink:
    """LoggerSink over a structlog stdlib BoundLogger.

    The logger must be backed by stdlib logging (structlog.stdlib.LoggerFactory
    with the structlog.stdlib.BoundLogger wrapper), which is what
    logtiming.logging.configure_logging() sets up.
    """

    def __init__(self, logger: Any) -> None:
        self._logger = logger

    @property
    def logger(self) -> Any:
        return self._logger

    def is_enabled(self, level: LogLevel) -> bool:
        return bool(self._logger.isEnabledFor(int(level)))

    def write(
        self,
        level: LogLevel,
        exception: BaseException | None,
        message_template: str,
        args: Sequence[Any],
    ) -> None:
        template = MessageTemplate.parse(message_template)
        fields = {_safe_key(name): value for name, value in template.bind(args).items()}
        fields["message_template"] = message_template
        if exception is not None:
            fields["exc_info"] = exception
        self._logger.log(int(level), template.render(args), **fields)

    def begin_scope(self, message_template: str, *values: Any) -> ScopeHandle:
        template = MessageTemplate.parse(message_template)
        properties = {_safe_key(name): value for name, value in template.bind(values).items()}
        return _open_scope(template.render(values), properties)


class NullSink:
    """Sink that is never enabled and discards everything."""

    def is_enabled(self, level: LogLevel) -> bool:
        return False

    def write(
        self,
        level: LogLevel,
        exception: BaseException | None,
        message_template: str,
        args: Sequence[Any],
    ) -> None:
        pass

    def begin_scope(self, message_template: str, *values: Any) -> ScopeHandle:
        return _NULL_SCOPE


def get_sink(name: str) -> StructlogSink:
    """Get a StructlogSink over the structlog logger ``name``."""
    return StructlogSink(get_logger(name))
