"""
执行结果：Success / Failure 标签联合，附带耗时与尝试次数。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar, Union

from fleetpulse.core.errors import OperationError, Result

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    elapsed_ms: float
    attempts: int

    def is_ok(self) -> bool:
        return True

    def to_result(self) -> Result[T, OperationError]:
        return Result.ok(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "elapsed_ms": self.elapsed_ms, "attempts": self.attempts}


@dataclass(frozen=True)
class Failure:
    error: OperationError
    elapsed_ms: float
    attempts: int

    def is_ok(self) -> bool:
        return False

    def to_result(self) -> Result[Any, OperationError]:
        return Result.err(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "elapsed_ms": self.elapsed_ms,
            "attempts": self.attempts,
            "error": self.error.to_dict(),
        }


OperationOutcome = Union[Success[T], Failure]
