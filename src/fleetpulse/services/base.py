# src/fleetpulse/services/base.py
"""
服务基类，统一配置、日志、错误构造与重试执行。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional

from fleetpulse import __version__
from fleetpulse.config.settings import ExecutorConfig
from fleetpulse.core.di import Container
from fleetpulse.core.errors import ErrorCode, OperationError, Result
from fleetpulse.core.execution import Failure, OperationOutcome, RetryableOperationExecutor
from fleetpulse.core.execution.executor import Operation
from fleetpulse.infrastructure.functions import EdgeFunctionClient, FunctionResponse
from fleetpulse.infrastructure.logging import StructuredLogger, create_logger


@dataclass(frozen=True)
class ServiceMetadata:
    """服务调用元数据，用于观测"""
    timestamp: datetime
    version: str
    service: str
    request_id: Optional[str] = None


class AbstractService(ABC):
    """
    所有服务的基类。

    子类只需声明 service_name，并通过 execute_with_retry 调用外部依赖；
    失败以 OperationOutcome / Result 返回，不抛出异常。
    """

    def __init__(
        self,
        config: Optional[ExecutorConfig] = None,
        *,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config or ExecutorConfig()
        self.logger = logger or create_logger(self.service_name, enabled=self.config.enable_logging)
        self.executor = RetryableOperationExecutor(
            self.config,
            origin=self.service_name,
            logger=self.logger,
        )

    @property
    @abstractmethod
    def service_name(self) -> str:
        ...

    def log(self, level: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        if self.config.enable_logging:
            self.logger.log(level, message, context)

    def create_error(
        self,
        message: str,
        code: str | ErrorCode,
        context: Optional[Dict[str, Any]] = None,
    ) -> OperationError:
        return OperationError(message, code=code, origin=self.service_name, context=context)

    def create_metadata(self, request_id: Optional[str] = None) -> ServiceMetadata:
        return ServiceMetadata(
            timestamp=datetime.now(timezone.utc),
            version=__version__,
            service=self.service_name,
            request_id=request_id,
        )

    async def execute_with_retry(self, operation: Operation, operation_name: str) -> OperationOutcome:
        return await self.executor.execute(operation, operation_name)


class FunctionBackedService(AbstractService):
    """通过 Serverless 函数网关工作的服务；未显式传入客户端时从容器解析。"""

    def __init__(
        self,
        client: Optional[EdgeFunctionClient] = None,
        config: Optional[ExecutorConfig] = None,
        *,
        logger: Optional[StructuredLogger] = None,
    ):
        super().__init__(config, logger=logger)
        self.client = client or Container.instance().resolve(EdgeFunctionClient)

    # 网关返回这些错误时重试无意义，直接交还给调用方
    non_retryable_codes: FrozenSet[str] = frozenset({
        ErrorCode.UNAUTHORIZED.value,
        ErrorCode.NOT_FOUND.value,
        ErrorCode.VALIDATION_ERROR.value,
    })

    async def _invoke(
        self,
        function: str,
        body: Dict[str, Any],
        operation_name: str,
    ) -> Result[FunctionResponse, OperationError]:
        """
        带重试地调用函数。

        网关抛出的 OperationError 按原样返回（保留 code/severity），
        不可重试的错误只尝试一次；其余异常才使用执行器包装后的错误。
        """

        async def attempt():
            try:
                return await self.client.invoke(function, body)
            except OperationError as e:
                if e.code in self.non_retryable_codes:
                    return e
                raise

        outcome = await self.execute_with_retry(attempt, operation_name)
        if isinstance(outcome, Failure):
            original = (outcome.error.context or {}).get("original_error")
            if isinstance(original, OperationError):
                return Result.err(original)
            return Result.err(outcome.error)

        if isinstance(outcome.value, OperationError):
            return Result.err(outcome.value)
        return Result.ok(outcome.value)
