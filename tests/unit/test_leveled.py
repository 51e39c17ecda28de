# tests/unit/test_leveled.py
"""Tests for LeveledOperation gating and operation_at()."""

from datetime import timedelta

import pytest

from logtiming.clock import MockClock
from logtiming.enums import CompletionBehavior, LogLevel
from logtiming.errors import OperationArgumentError
from logtiming.leveled import LeveledOperation, operation_at
from logtiming.operation import NULL_OPERATION, NullOperation, Operation
from tests.helpers.sinks import ExplodingClock, RecordingSink


class TestOperationAtGating:
    def test_none_sink_raises(self) -> None:
        with pytest.raises(OperationArgumentError) as exc_info:
            operation_at(None, LogLevel.INFO)  # type: ignore[arg-type]
        assert exc_info.value.argument_name == "sink"

    def test_both_levels_disabled_returns_none_factory(self) -> None:
        sink = RecordingSink(min_level=LogLevel.CRITICAL)
        result = operation_at(sink, LogLevel.DEBUG, LogLevel.INFO)

        assert result is LeveledOperation.NONE
        assert not result.enabled

    def test_single_disabled_level_returns_none_factory(self) -> None:
        sink = RecordingSink(min_level=LogLevel.CRITICAL)
        assert operation_at(sink, LogLevel.DEBUG) is LeveledOperation.NONE

    def test_equal_levels_checked_once(self) -> None:
        sink = RecordingSink(min_level=LogLevel.CRITICAL)
        operation_at(sink, LogLevel.DEBUG, LogLevel.DEBUG)

        assert sink.enabled_checks == [LogLevel.DEBUG]

    def test_only_abandonment_enabled_returns_live_factory(self) -> None:
        sink = RecordingSink(min_level=LogLevel.ERROR)
        result = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL)

        assert result.enabled
        assert result.completion_level == LogLevel.DEBUG
        assert result.abandonment_level == LogLevel.CRITICAL

    def test_only_completion_enabled_returns_live_factory(self) -> None:
        sink = RecordingSink(min_level=LogLevel.INFO)
        result = operation_at(sink, LogLevel.ERROR, LogLevel.DEBUG)

        assert result.enabled
        assert sink.enabled_checks == [LogLevel.ERROR]

    def test_abandonment_defaults_to_completion(self, sink: RecordingSink) -> None:
        result = operation_at(sink, LogLevel.ERROR)

        assert result.abandonment_level == LogLevel.ERROR

    def test_warning_threshold_is_kept(self, sink: RecordingSink) -> None:
        threshold = timedelta(milliseconds=250)
        result = operation_at(sink, LogLevel.DEBUG, warning_threshold=threshold)

        assert result.warning_threshold == threshold

    def test_none_factory_is_shared(self) -> None:
        first = operation_at(RecordingSink(min_level=LogLevel.CRITICAL), LogLevel.DEBUG)
        second = operation_at(RecordingSink(min_level=LogLevel.ERROR), LogLevel.INFO, LogLevel.DEBUG)

        assert first is second


class TestNoneFactory:
    def test_begin_returns_shared_null_operation(self) -> None:
        assert LeveledOperation.NONE.begin("Op") is NULL_OPERATION
        assert LeveledOperation.NONE.time("Op {X}", 1) is NULL_OPERATION

    def test_none_factory_does_no_work(self) -> None:
        sink = RecordingSink(min_level=LogLevel.CRITICAL)
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.DEBUG, clock=ExplodingClock())

        with factory.begin("Op") as op:
            op.complete()
            op.complete("Rows: {Count}", 1)
            op.abandon(ValueError("x"))
            op.set_exception(ValueError("y"))
        with factory.time("Op"):
            pass

        assert sink.events == []
        assert sink.scopes == []

    def test_none_factory_tolerates_exceptions_in_block(self) -> None:
        with pytest.raises(RuntimeError), LeveledOperation.NONE.begin("Op"):
            raise RuntimeError("boom")

    def test_repr(self) -> None:
        assert repr(LeveledOperation.NONE) == "LeveledOperation.NONE"


class TestLiveFactory:
    def test_begin_returns_operation_that_abandons_on_exit(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL, clock=clock)
        op = factory.begin("Op")

        assert isinstance(op, Operation)
        assert op.completion_behavior is CompletionBehavior.ABANDON
        with op:
            pass

        assert sink.events[0].level == LogLevel.CRITICAL
        assert sink.events[0].outcome == "abandoned"

    def test_time_returns_operation_that_completes_on_exit(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL, clock=clock)
        op = factory.time("Op")

        assert isinstance(op, Operation)
        assert op.completion_behavior is CompletionBehavior.COMPLETE
        with op:
            pass

        assert sink.events[0].level == LogLevel.DEBUG
        assert sink.events[0].outcome == "completed"

    def test_begin_returns_fresh_operations(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.INFO, clock=clock)
        assert factory.begin("Op") is not factory.begin("Op")

    def test_specified_level_when_completed(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL, timedelta(seconds=1), clock=clock)
        with factory.begin("Long Op!") as op:
            op.complete()

        assert len(sink.events) == 1
        assert sink.events[0].level == LogLevel.DEBUG

    def test_specified_level_when_abandoned(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL, timedelta(seconds=1), clock=clock)
        with factory.begin("Long Op!") as op:
            op.abandon()

        assert len(sink.events) == 1
        assert sink.events[0].level == LogLevel.CRITICAL

    def test_threshold_escalation_per_event_only(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.DEBUG, LogLevel.CRITICAL, timedelta(milliseconds=1), clock=clock)

        with factory.time("Slow"):
            clock.advance(0.02)
        with factory.time("Fast"):
            pass

        assert [event.level for event in sink.events] == [LogLevel.WARNING, LogLevel.DEBUG]
        assert factory.completion_level == LogLevel.DEBUG

    def test_template_args_are_passed_through(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.INFO, clock=clock)
        with factory.time("Processing {Batch} of {Total}", 2, 5):
            pass

        assert sink.events[0].message == "Processing 2 of 5 completed in 0.0 ms"

    def test_none_template_raises(self, sink: RecordingSink, clock: MockClock) -> None:
        factory = operation_at(sink, LogLevel.INFO, clock=clock)
        with pytest.raises(OperationArgumentError):
            factory.begin(None)  # type: ignore[arg-type]


class TestNullOperation:
    def test_elapsed_is_zero(self) -> None:
        assert NULL_OPERATION.elapsed == timedelta(0)

    def test_is_always_silent(self) -> None:
        assert NULL_OPERATION.completion_behavior is CompletionBehavior.SILENT
        assert NULL_OPERATION.operation_id is None

    def test_set_exception_returns_self_without_storing(self) -> None:
        assert NULL_OPERATION.set_exception(ValueError()) is NULL_OPERATION
        assert NULL_OPERATION.exception is None

    def test_set_exception_and_continue_returns_false(self) -> None:
        assert NULL_OPERATION.set_exception_and_continue(ValueError()) is False

    def test_argument_validation_still_applies(self) -> None:
        with pytest.raises(OperationArgumentError):
            NULL_OPERATION.set_exception(None)  # type: ignore[arg-type]
        with pytest.raises(OperationArgumentError):
            NULL_OPERATION.complete(None)  # type: ignore[arg-type]

    async def test_async_with(self) -> None:
        async with NullOperation() as op:
            op.complete()
