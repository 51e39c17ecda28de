# src/logtiming/clock.py
"""Monotonic clock abstraction for operation timing.

Operations read start and stop ticks from a Clock. Production code uses
SystemClock; tests inject MockClock to control elapsed time without sleeping,
including moving time backwards to exercise clamping of negative deltas.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic ticks, in seconds."""

    def monotonic(self) -> float:
        """Return monotonic time in seconds.

        Only differences between two readings are meaningful.
        """
        ...


class SystemClock:
    """Production clock backed by time.monotonic()."""

    def monotonic(self) -> float:
        return time.monotonic()


class MockClock:
    """Controllable clock for deterministic tests.

    Example:
        clock = MockClock(start=10.0)
        op = Operation(sink, "Work", (), CompletionBehavior.ABANDON,
                       LogLevel.INFO, LogLevel.WARNING, clock=clock)
        clock.advance(0.25)
        assert op.elapsed == timedelta(milliseconds=250)
    """

    def __init__(self, start: float = 0.0) -> None:
        self._current = start

    def monotonic(self) -> float:
        return self._current

    def advance(self, seconds: float) -> None:
        """Move time forward.

        Raises:
            ValueError: If seconds is negative. Use set() to go backwards.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds

    def set(self, value: float) -> None:
        """Set time to an absolute value, which may be earlier than now.

        Real monotonic sources occasionally report a stop tick before the
        start tick on some hardware; setting an earlier value reproduces that.
        """
        self._current = value


DEFAULT_CLOCK: Clock = SystemClock()
