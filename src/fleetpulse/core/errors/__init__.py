"""
统一错误模块。
"""

from .errors import (
    ErrorSeverity,
    ErrorCode,
    OperationError,
    Result,
    combine_results,
    chain,
)

__all__ = [
    "ErrorSeverity",
    "ErrorCode",
    "OperationError",
    "Result",
    "combine_results",
    "chain",
]
