"""
设备监控服务：手动触发一次 device-monitor 巡检。
"""

from __future__ import annotations

from datetime import datetime, timezone

from fleetpulse.core.errors import OperationError, Result
from fleetpulse.infrastructure.functions import FunctionResponse

from .base import FunctionBackedService

MONITOR_FUNCTION = "device-monitor"


class DeviceMonitorService(FunctionBackedService):
    service_name = "DeviceMonitorService"

    async def trigger_device_monitoring(self) -> Result[FunctionResponse, OperationError]:
        body = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": "manual_trigger",
        }
        self.log("info", "Triggering device monitoring")

        invoked = await self._invoke(MONITOR_FUNCTION, body, "trigger_device_monitoring")
        if invoked.is_err():
            return invoked

        response = invoked.unwrap()
        if not response.success:
            return Result.err(OperationError.operation_failed(
                response.error or response.message or "Device monitoring failed",
                origin=self.service_name,
                context={"function": MONITOR_FUNCTION},
            ))
        return Result.ok(response)
