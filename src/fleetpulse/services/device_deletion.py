"""
设备删除服务
"""

from __future__ import annotations

from fleetpulse.core.errors import OperationError, Result

from .base import FunctionBackedService

DELETE_FUNCTION = "delete-device"


class DeviceDeletionService(FunctionBackedService):
    service_name = "DeviceDeletionService"

    async def delete_device(self, device_id: str) -> Result[str, OperationError]:
        """删除设备及其全部关联数据，成功时返回函数给出的提示信息。"""
        if not isinstance(device_id, str) or not device_id.strip():
            return Result.err(OperationError.validation(
                "Device ID is required",
                origin=self.service_name,
                context={"device_id": device_id},
            ))

        device_id = device_id.strip()
        invoked = await self._invoke(DELETE_FUNCTION, {"deviceId": device_id}, "delete_device")
        if invoked.is_err():
            return invoked

        response = invoked.unwrap()
        if response.success:
            return Result.ok(response.message or f"Device {device_id} has been deleted")

        reason = response.message or response.error or "Failed to delete device"
        if "not found" in reason.lower():
            return Result.err(OperationError.not_found("Device", device_id, origin=self.service_name))
        return Result.err(OperationError.database(reason, origin=self.service_name, context={"device_id": device_id}))
