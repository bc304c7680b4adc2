"""
执行层：重试执行器与结果类型。
"""

from .outcome import Success, Failure, OperationOutcome
from .executor import RetryableOperationExecutor, backoff_delay_ms

__all__ = [
    "Success",
    "Failure",
    "OperationOutcome",
    "RetryableOperationExecutor",
    "backoff_delay_ms",
]
