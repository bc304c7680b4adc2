"""
服务层。
"""

from .base import AbstractService, FunctionBackedService, ServiceMetadata
from .device_assignment import AssignmentResult, DeviceAssignmentService, is_valid_uuid
from .device_deletion import DeviceDeletionService
from .device_monitor import DeviceMonitorService
from .notification_tracker import NotificationCooldownTracker
from .notifications import NotificationService

__all__ = [
    "AbstractService",
    "FunctionBackedService",
    "ServiceMetadata",
    "AssignmentResult",
    "DeviceAssignmentService",
    "is_valid_uuid",
    "DeviceDeletionService",
    "DeviceMonitorService",
    "NotificationCooldownTracker",
    "NotificationService",
]
