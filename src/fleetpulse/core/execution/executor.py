"""
Retryable Operation Executor

Wraps an async operation with:
- a fresh per-attempt timeout
- bounded retries with exponential backoff (2**attempt * 100 ms, no jitter)
- a uniform OperationOutcome instead of raised exceptions

A timed-out attempt is abandoned, not cancelled: the underlying awaitable may
keep running in the background. Callers that need real cancellation must
thread their own signal into the operation.
"""

from __future__ import annotations

import asyncio
import inspect
from time import perf_counter
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from loguru import logger as _root_logger

from fleetpulse.config.settings import ExecutorConfig
from fleetpulse.core.errors import OperationError
from fleetpulse.core.execution.outcome import Failure, OperationOutcome, Success
from fleetpulse.infrastructure.logging import StructuredLogger, create_logger

BACKOFF_BASE_MS = 100

Operation = Callable[[], Union[Awaitable[Any], Any]]


def backoff_delay_ms(attempt: int) -> int:
    return (2 ** attempt) * BACKOFF_BASE_MS


def _discard_abandoned(task: "asyncio.Future[Any]") -> None:
    # 只取走异常，避免事件循环报告 "exception was never retrieved"
    if not task.cancelled():
        task.exception()


class RetryableOperationExecutor:
    """
    重试执行器

    只持有只读配置，同一实例上的并发 execute 调用互不影响。
    """

    def __init__(
        self,
        config: Optional[ExecutorConfig] = None,
        *,
        origin: str = "executor",
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config or ExecutorConfig()
        self.origin = origin
        self.logger = logger or create_logger(origin, enabled=self.config.enable_logging)

    async def execute(self, operation: Operation, operation_name: str) -> OperationOutcome:
        """
        执行 operation，直到成功或用尽 max_attempts。

        Returns:
            Success(value, elapsed_ms, attempts) 或 Failure(error, elapsed_ms, attempts)
        """
        max_attempts = self.config.max_attempts
        start = perf_counter()
        last_error: Optional[OperationError] = None

        for attempt in range(1, max_attempts + 1):
            attempt_start = perf_counter()
            self._log("debug", "Attempt started", {"operation": operation_name, "attempt": attempt})

            ok, payload = await self._run_attempt(operation, operation_name, attempt)
            attempt_ms = (perf_counter() - attempt_start) * 1000

            if ok:
                elapsed_ms = (perf_counter() - start) * 1000
                self._log("info", "Operation succeeded", {
                    "operation": operation_name,
                    "attempt": attempt,
                    "duration_ms": round(elapsed_ms, 2),
                })
                return Success(value=payload, elapsed_ms=elapsed_ms, attempts=attempt)

            last_error = payload
            self._log("warn", "Attempt failed", {
                "operation": operation_name,
                "attempt": attempt,
                "duration_ms": round(attempt_ms, 2),
                "error": str(last_error),
            })

            if attempt < max_attempts:
                await asyncio.sleep(backoff_delay_ms(attempt) / 1000)

        elapsed_ms = (perf_counter() - start) * 1000
        self._log("error", "Operation failed after all attempts", {
            "operation": operation_name,
            "attempts": max_attempts,
            "duration_ms": round(elapsed_ms, 2),
            "error": str(last_error),
        })
        return Failure(error=last_error, elapsed_ms=elapsed_ms, attempts=max_attempts)

    async def _run_attempt(
        self,
        operation: Operation,
        operation_name: str,
        attempt: int,
    ) -> Tuple[bool, Any]:
        try:
            awaitable = operation()
        except (Exception, asyncio.CancelledError) as e:
            return False, self._wrap_failure(e, operation_name, attempt)

        if not inspect.isawaitable(awaitable):
            return True, awaitable

        try:
            task = asyncio.ensure_future(awaitable)
        except Exception as e:
            return False, self._wrap_failure(e, operation_name, attempt)

        timeout_ms = self.config.per_attempt_timeout_ms
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            # 调用方取消了 execute 本身
            task.cancel()
            raise

        if task not in done:
            task.add_done_callback(_discard_abandoned)
            return False, OperationError.timeout(
                f"Operation '{operation_name}' timed out after {timeout_ms}ms",
                origin=self.origin,
                context={"operation": operation_name, "timeout_ms": timeout_ms, "attempt": attempt},
            )

        if task.cancelled():
            return False, OperationError.operation_failed(
                f"Operation '{operation_name}' was cancelled",
                origin=self.origin,
                context={"operation": operation_name, "attempt": attempt},
            )

        exc = task.exception()
        if exc is not None:
            return False, self._wrap_failure(exc, operation_name, attempt)
        return True, task.result()

    def _wrap_failure(self, error: BaseException, operation_name: str, attempt: int) -> OperationError:
        return OperationError.operation_failed(
            str(error) or type(error).__name__,
            origin=self.origin,
            context={
                "operation": operation_name,
                "attempt": attempt,
                "original_error": error,
                "error_type": type(error).__name__,
            },
        )

    def _log(self, level: str, message: str, context: dict) -> None:
        if not self.config.enable_logging:
            return
        try:
            self.logger.log(level, message, context)
        except Exception:
            # 日志仅用于观测，不能影响结果
            _root_logger.opt(exception=True).debug("Structured log emission failed for {}", self.origin)
