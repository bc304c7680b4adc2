"""
统一错误与 Result 封装，服务层以值的形式返回失败，而不是抛出异常。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar, Union, cast


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    TIMEOUT = "TIMEOUT"
    OPERATION_FAILED = "OPERATION_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    DATABASE_ERROR = "DATABASE_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


_PRIMITIVES = (str, int, float, bool, type(None))


@dataclass
class OperationError(Exception):
    """
    统一错误结构。severity 只用于日志优先级，不参与控制流。
    """

    message: str
    code: str = "UNKNOWN_ERROR"
    origin: str = "application"
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if isinstance(self.code, ErrorCode):
            self.code = self.code.value

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        context = {
            k: (v if isinstance(v, _PRIMITIVES) else repr(v))
            for k, v in (self.context or {}).items()
        }
        return {
            "message": self.message,
            "code": self.code,
            "origin": self.origin,
            "severity": self.severity.value,
            "context": context,
        }

    @classmethod
    def timeout(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.TIMEOUT, origin, ErrorSeverity.HIGH, context)

    @classmethod
    def operation_failed(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.OPERATION_FAILED, origin, ErrorSeverity.MEDIUM, context)

    @classmethod
    def validation(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.VALIDATION_ERROR, origin, ErrorSeverity.MEDIUM, context)

    @classmethod
    def not_found(cls, resource: str, id: str, origin: str = "application") -> "OperationError":
        return cls(
            f"{resource} not found",
            ErrorCode.NOT_FOUND,
            origin,
            ErrorSeverity.MEDIUM,
            {"resource": resource, "id": id},
        )

    @classmethod
    def unauthorized(cls, action: str, origin: str = "application") -> "OperationError":
        return cls(
            f"Unauthorized: {action}",
            ErrorCode.UNAUTHORIZED,
            origin,
            ErrorSeverity.HIGH,
            {"action": action},
        )

    @classmethod
    def rate_limited(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.RATE_LIMIT_EXCEEDED, origin, ErrorSeverity.HIGH, context)

    @classmethod
    def database(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.DATABASE_ERROR, origin, ErrorSeverity.CRITICAL, context)

    @classmethod
    def network(cls, message: str, origin: str = "application", context: Optional[Dict[str, Any]] = None) -> "OperationError":
        return cls(message, ErrorCode.NETWORK_ERROR, origin, ErrorSeverity.HIGH, context)


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


@dataclass
class Result(Generic[T, E]):
    """函数式结果封装，避免散落的 success/error 字典。"""

    _value: Union[T, E]
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(_value=value, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        return cls(_value=error, _is_ok=False)

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        return not self._is_ok

    def unwrap(self) -> T:
        if not self._is_ok:
            raise cast(E, self._value)
        return cast(T, self._value)

    def unwrap_err(self) -> E:
        if self._is_ok:
            raise ValueError("called unwrap_err on an ok result")
        return cast(E, self._value)

    def unwrap_or(self, default: T) -> T:
        return cast(T, self._value) if self._is_ok else default

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        return cast(T, self._value) if self._is_ok else fn(cast(E, self._value))

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        if self._is_ok:
            return Result.ok(fn(cast(T, self._value)))
        return cast("Result[U, E]", self)

    def map_err(self, fn: Callable[[E], Exception]) -> "Result[T, Exception]":
        if self._is_ok:
            return cast("Result[T, Exception]", self)
        return Result.err(fn(cast(E, self._value)))

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        if self._is_ok:
            return fn(cast(T, self._value))
        return cast("Result[U, E]", self)


def combine_results(results: Sequence[Result[Any, Any]]) -> Result[List[Any], OperationError]:
    """全部成功时返回值列表，否则返回第一个错误。"""
    values: List[Any] = []
    for result in results:
        if result.is_err():
            first = result.unwrap_err()
            if not isinstance(first, OperationError):
                first = OperationError(str(first), code="UNKNOWN_ERROR")
            return Result.err(first)
        values.append(result.unwrap())
    return Result.ok(values)


def chain(result: Result[Any, E], *operations: Callable[[Any], Result[Any, E]]) -> Result[Any, E]:
    for operation in operations:
        result = result.and_then(operation)
    return result
