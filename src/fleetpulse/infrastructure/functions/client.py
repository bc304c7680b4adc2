"""
Serverless 函数网关客户端
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout
from loguru import logger

from fleetpulse.core.errors import ErrorCode, ErrorSeverity, OperationError

ORIGIN = "EdgeFunctionClient"


@dataclass
class FunctionResponse:
    """函数返回体：至少包含 success，可选 message / error"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "FunctionResponse":
        if not isinstance(payload, dict):
            return cls(success=False, error="Malformed function response", data={"raw": payload})
        return cls(
            success=bool(payload.get("success", False)),
            message=payload.get("message"),
            error=payload.get("error"),
            data=payload,
        )


def _error_message(text: str) -> str:
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict) and parsed.get("error"):
        return str(parsed["error"])
    return f"{text[:100]}..." if len(text) > 100 else text


def _status_error(status: int, message: str, name: str) -> OperationError:
    context = {"function": name, "status": status}
    if status in (401, 403):
        return OperationError(
            message or f"Unauthorized: invoke {name}",
            code=ErrorCode.UNAUTHORIZED,
            origin=ORIGIN,
            severity=ErrorSeverity.HIGH,
            context=context,
        )
    if status == 404:
        return OperationError(
            message or f"Function {name} not found",
            code=ErrorCode.NOT_FOUND,
            origin=ORIGIN,
            context=context,
        )
    if status == 429:
        return OperationError.rate_limited(message or "Rate limit exceeded", origin=ORIGIN, context=context)
    return OperationError.network(message or f"Function error: {status}", origin=ORIGIN, context=context)


class EdgeFunctionClient:
    """通用异步 Serverless 函数客户端"""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "User-Agent": "FleetPulse/1.0"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self._headers())
            self._owns_session = True
        return self._session

    def function_url(self, name: str) -> str:
        return f"{self.base_url}/functions/v1/{name.strip('/')}"

    async def invoke(self, name: str, body: Optional[Dict[str, Any]] = None) -> FunctionResponse:
        """调用函数；非 2xx 响应抛出 OperationError"""
        url = self.function_url(name)
        session = await self._get_session()

        async with session.post(url, json=body or {}, headers=self._headers()) as response:
            text = await response.text()
            if response.status < 200 or response.status >= 300:
                logger.error(f"Function {name} returned {response.status}: {text[:200]}")
                raise _status_error(response.status, _error_message(text), name)

            try:
                payload = json.loads(text) if text else {}
            except ValueError:
                raise OperationError.network(
                    f"Function {name} returned a non-JSON body",
                    origin=ORIGIN,
                    context={"function": name, "status": response.status},
                )
            return FunctionResponse.from_payload(payload)

    async def close(self):
        """关闭 session（仅关闭自己创建的）"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
