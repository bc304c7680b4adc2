"""
设备分组服务：校验 ID 后通过 assign-device-to-group 函数完成分配。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Tuple

from fleetpulse.core.errors import OperationError, Result

from .base import FunctionBackedService

ASSIGN_FUNCTION = "assign-device-to-group"
_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def is_valid_uuid(value: Any) -> bool:
    """仅接受 8-4-4-4-12 的带连字符形式；花括号、urn 前缀或无连字符的写法都不合法。"""
    return isinstance(value, str) and _UUID_RE.match(value) is not None


@dataclass(frozen=True)
class AssignmentResult:
    success: bool
    message: str
    already_exists: bool = False


class DeviceAssignmentService(FunctionBackedService):
    service_name = "DeviceAssignmentService"

    def _validate_assignment_request(self, device_id: str, group_id: str) -> Result[Tuple[str, str], OperationError]:
        if not is_valid_uuid(device_id):
            return Result.err(OperationError.validation(
                "Device ID must be a valid UUID",
                origin=self.service_name,
                context={"device_id": device_id},
            ))
        if not is_valid_uuid(group_id):
            return Result.err(OperationError.validation(
                "Group ID must be a valid UUID",
                origin=self.service_name,
                context={"group_id": group_id},
            ))
        return Result.ok((device_id.lower(), group_id.lower()))

    async def assign_device_to_group(self, device_id: str, group_id: str) -> Result[AssignmentResult, OperationError]:
        validation = self._validate_assignment_request(device_id, group_id)
        if validation.is_err():
            return validation

        valid_device_id, valid_group_id = validation.unwrap()
        self.log("info", "Starting device assignment", {"device_id": device_id, "group_id": group_id})

        invoked = await self._invoke(
            ASSIGN_FUNCTION,
            {"deviceId": valid_device_id, "groupId": valid_group_id},
            "assign_device_to_group",
        )
        if invoked.is_err():
            return invoked

        response = invoked.unwrap()
        if not response.success:
            return Result.err(OperationError.network(
                response.error or response.message or "Assignment failed",
                origin=self.service_name,
                context={"device_id": device_id, "group_id": group_id},
            ))

        return Result.ok(AssignmentResult(
            success=True,
            message=response.message or "Device assigned to group successfully",
            already_exists=bool(response.data.get("alreadyExists", False)),
        ))

    def filter_available_devices(
        self,
        all_devices: Sequence[Mapping[str, Any]],
        assigned_devices: Sequence[Mapping[str, Any]],
    ) -> List[Mapping[str, Any]]:
        """返回尚未分配到该组、且 ID 为合法 UUID 的设备。"""
        assigned_ids = {
            device["id"].lower() for device in assigned_devices if isinstance(device.get("id"), str)
        }
        available: List[Mapping[str, Any]] = []
        for device in all_devices:
            if not is_valid_uuid(device.get("id")):
                self.log("warn", "Device has invalid UUID", {
                    "id": device.get("id"),
                    "android_id": device.get("android_id"),
                    "name": device.get("name"),
                })
                continue
            if device["id"].lower() not in assigned_ids:
                available.append(device)
        return available
