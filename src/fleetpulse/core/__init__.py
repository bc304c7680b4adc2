"""
核心层：错误处理、重试执行器、依赖注入。
"""

from .errors import (
    ErrorSeverity,
    ErrorCode,
    OperationError,
    Result,
    combine_results,
    chain,
)
from .execution import (
    Success,
    Failure,
    OperationOutcome,
    RetryableOperationExecutor,
)
from .di import Container

__all__ = [
    # 错误处理
    "ErrorSeverity",
    "ErrorCode",
    "OperationError",
    "Result",
    "combine_results",
    "chain",
    # 执行
    "Success",
    "Failure",
    "OperationOutcome",
    "RetryableOperationExecutor",
    # 依赖注入
    "Container",
]
