"""
重试执行器单元测试
"""

import asyncio

import pytest

from fleetpulse.config import ExecutorConfig
from fleetpulse.core.errors import ErrorCode, ErrorSeverity, OperationError
from fleetpulse.core.execution import (
    Failure,
    RetryableOperationExecutor,
    Success,
    backoff_delay_ms,
)


def make_executor(max_attempts=3, timeout_ms=100, enable_logging=False):
    return RetryableOperationExecutor(
        ExecutorConfig(
            max_attempts=max_attempts,
            per_attempt_timeout_ms=timeout_ms,
            enable_logging=enable_logging,
        ),
        origin="test",
    )


class TestExecutorConfig:
    """ExecutorConfig 测试"""

    def test_defaults(self):
        config = ExecutorConfig()
        assert config.max_attempts == 3
        assert config.per_attempt_timeout_ms == 5000
        assert config.enable_logging is True

    @pytest.mark.parametrize("attempts", [0, -1, 1.5, True])
    def test_rejects_invalid_attempts(self, attempts):
        with pytest.raises(ValueError):
            ExecutorConfig(max_attempts=attempts)

    @pytest.mark.parametrize("timeout", [0, -100])
    def test_rejects_invalid_timeout(self, timeout):
        with pytest.raises(ValueError):
            ExecutorConfig(per_attempt_timeout_ms=timeout)

    def test_is_immutable(self):
        config = ExecutorConfig()
        with pytest.raises(Exception):
            config.max_attempts = 5


class TestBackoff:
    def test_exponential_without_jitter(self):
        assert backoff_delay_ms(1) == 200
        assert backoff_delay_ms(2) == 400
        assert backoff_delay_ms(3) == 800


class TestExecute:
    """execute 行为测试"""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        calls = []

        async def op():
            calls.append(1)
            await asyncio.sleep(0.01)
            return "ok"

        outcome = await make_executor(max_attempts=3, timeout_ms=100).execute(op, "fetch")

        assert isinstance(outcome, Success)
        assert outcome.is_ok() is True
        assert outcome.value == "ok"
        assert outcome.attempts == 1
        assert outcome.elapsed_ms >= 10
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_on_every_attempt(self):
        async def slow():
            await asyncio.sleep(0.2)
            return "late"

        outcome = await make_executor(max_attempts=2, timeout_ms=50).execute(slow, "slow_op")

        assert isinstance(outcome, Failure)
        assert outcome.attempts == 2
        assert outcome.error.code == "TIMEOUT"
        assert outcome.error.severity == ErrorSeverity.HIGH
        assert outcome.error.context["operation"] == "slow_op"
        assert outcome.error.context["timeout_ms"] == 50
        # two 50ms windows plus one 200ms backoff
        assert outcome.elapsed_ms >= 280

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise RuntimeError("boom")
            return 42

        outcome = await make_executor(max_attempts=3).execute(flaky, "flaky")

        assert isinstance(outcome, Success)
        assert outcome.value == 42
        assert outcome.attempts == 3
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_exhaustion_returns_last_error(self):
        calls = []

        async def always_fails():
            calls.append(1)
            raise ValueError(f"fail {len(calls)}")

        outcome = await make_executor(max_attempts=3).execute(always_fails, "doomed")

        assert isinstance(outcome, Failure)
        assert outcome.attempts == 3
        assert len(calls) == 3
        assert outcome.error.code == ErrorCode.OPERATION_FAILED
        assert outcome.error.severity == ErrorSeverity.MEDIUM
        assert outcome.error.message == "fail 3"
        assert outcome.error.origin == "test"
        assert outcome.error.context["attempt"] == 3
        assert outcome.error.context["error_type"] == "ValueError"
        assert isinstance(outcome.error.context["original_error"], ValueError)

    @pytest.mark.asyncio
    async def test_backoff_delays_accumulate(self):
        async def always_fails():
            raise RuntimeError("nope")

        outcome = await make_executor(max_attempts=3).execute(always_fails, "doomed")

        assert isinstance(outcome, Failure)
        assert outcome.elapsed_ms >= 600

    @pytest.mark.asyncio
    async def test_single_attempt_has_no_delay(self):
        async def always_fails():
            raise RuntimeError("nope")

        outcome = await make_executor(max_attempts=1).execute(always_fails, "once")

        assert isinstance(outcome, Failure)
        assert outcome.attempts == 1
        assert outcome.elapsed_ms < 150

    @pytest.mark.asyncio
    async def test_timeout_on_final_attempt_keeps_timeout_code(self):
        calls = []

        async def op():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first")
            await asyncio.sleep(0.2)

        outcome = await make_executor(max_attempts=2, timeout_ms=50).execute(op, "mixed")

        assert isinstance(outcome, Failure)
        assert outcome.error.code == "TIMEOUT"
        assert outcome.error.context["attempt"] == 2

    @pytest.mark.asyncio
    async def test_synchronous_raise_does_not_escape(self):
        def explodes():
            raise KeyError("sync")

        outcome = await make_executor(max_attempts=2).execute(explodes, "sync")

        assert isinstance(outcome, Failure)
        assert outcome.attempts == 2
        assert outcome.error.code == "OPERATION_FAILED"

    @pytest.mark.asyncio
    async def test_plain_return_value_is_success(self):
        outcome = await make_executor().execute(lambda: {"id": 1}, "plain")

        assert isinstance(outcome, Success)
        assert outcome.value == {"id": 1}

    @pytest.mark.asyncio
    async def test_operation_error_is_wrapped(self):
        original = OperationError.database("db down")

        async def op():
            raise original

        outcome = await make_executor(max_attempts=1).execute(op, "db")

        assert outcome.error.code == "OPERATION_FAILED"
        assert outcome.error.context["original_error"] is original

    @pytest.mark.asyncio
    async def test_cancelled_operation_is_failure(self):
        async def op():
            raise asyncio.CancelledError()

        outcome = await make_executor(max_attempts=1).execute(op, "cancelled")

        assert isinstance(outcome, Failure)
        assert outcome.error.code == "OPERATION_FAILED"

    @pytest.mark.asyncio
    async def test_synchronous_cancel_does_not_escape(self):
        calls = []

        def op():
            calls.append(1)
            raise asyncio.CancelledError()

        outcome = await make_executor(max_attempts=2).execute(op, "sync_cancel")

        assert isinstance(outcome, Failure)
        assert outcome.error.code == "OPERATION_FAILED"
        assert outcome.error.context["error_type"] == "CancelledError"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self):
        executor = make_executor(max_attempts=2)
        calls = {"a": 0, "b": 0}

        async def op_a():
            calls["a"] += 1
            return "a"

        async def op_b():
            calls["b"] += 1
            if calls["b"] == 1:
                raise RuntimeError("b failed once")
            return "b"

        out_a, out_b = await asyncio.gather(
            executor.execute(op_a, "a"),
            executor.execute(op_b, "b"),
        )

        assert (out_a.value, out_a.attempts) == ("a", 1)
        assert (out_b.value, out_b.attempts) == ("b", 2)

    @pytest.mark.asyncio
    async def test_outcome_converts_to_result(self):
        async def fails():
            raise RuntimeError("x")

        ok = await make_executor().execute(lambda: 7, "seven")
        err = await make_executor(max_attempts=1).execute(fails, "x")

        assert ok.to_result().unwrap() == 7
        assert err.to_result().is_err() is True
        assert err.to_dict()["error"]["code"] == "OPERATION_FAILED"


class TestExecutorLogging:
    """日志仅用于观测"""

    @pytest.mark.asyncio
    async def test_logs_attempt_failures_and_final_outcome(self, log_records):
        async def fails():
            raise RuntimeError("bad")

        await make_executor(max_attempts=2, enable_logging=True).execute(fails, "logged_op")

        levels = [r["level"].name for r in log_records if r["extra"].get("service") == "test"]
        assert levels.count("WARNING") == 2
        assert levels[-1] == "ERROR"
        final = [r for r in log_records if r["level"].name == "ERROR"][-1]
        assert final["extra"]["context"]["operation"] == "logged_op"
        assert final["extra"]["context"]["attempts"] == 2

    @pytest.mark.asyncio
    async def test_disabled_logging_emits_nothing(self, log_records):
        outcome = await make_executor(enable_logging=False).execute(lambda: "quiet", "quiet_op")

        assert outcome.value == "quiet"
        assert [r for r in log_records if r["extra"].get("service") == "test"] == []

    @pytest.mark.asyncio
    async def test_broken_logger_does_not_affect_outcome(self, log_records):
        class BrokenLogger:
            def log(self, level, message, context=None):
                raise RuntimeError("sink unavailable")

        executor = RetryableOperationExecutor(
            ExecutorConfig(max_attempts=1, per_attempt_timeout_ms=100),
            origin="broken",
            logger=BrokenLogger(),
        )
        outcome = await executor.execute(lambda: "still ok", "broken_logger_op")

        assert isinstance(outcome, Success)
        assert outcome.value == "still ok"
        fallback = [r for r in log_records if r["message"] == "Structured log emission failed for broken"]
        assert fallback
        assert fallback[0]["level"].name == "DEBUG"
        assert fallback[0]["exception"].type is RuntimeError
