"""
服务注册：把配置、函数网关客户端与各服务注册进 DI 容器。
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from fleetpulse.config.settings import Settings
from fleetpulse.core.di import Container
from fleetpulse.infrastructure.functions import EdgeFunctionClient
from fleetpulse.services import (
    DeviceAssignmentService,
    DeviceDeletionService,
    DeviceMonitorService,
    NotificationCooldownTracker,
    NotificationService,
)


def bootstrap_dependencies(settings: Optional[Settings] = None, container: Optional[Container] = None) -> Container:
    settings = settings or Settings()
    container = container or Container.instance()

    container.register(Settings, lambda: settings, singleton=True)
    container.register(
        EdgeFunctionClient,
        lambda: EdgeFunctionClient(
            settings.functions.base_url,
            api_key=settings.functions.api_key,
            timeout=settings.functions.timeout,
        ),
        singleton=True,
    )

    container.register(NotificationCooldownTracker, NotificationCooldownTracker, singleton=True)
    container.register(
        NotificationService,
        lambda: NotificationService(
            container.resolve(EdgeFunctionClient),
            settings.executor,
            tracker=container.resolve(NotificationCooldownTracker),
        ),
        singleton=True,
    )

    for service_cls in (DeviceAssignmentService, DeviceDeletionService, DeviceMonitorService):
        container.register(
            service_cls,
            lambda cls=service_cls: cls(container.resolve(EdgeFunctionClient), settings.executor),
            singleton=True,
        )

    logger.info("Core services registered: {}", [cls.__name__ for cls in (
        EdgeFunctionClient, DeviceAssignmentService, DeviceDeletionService, DeviceMonitorService, NotificationService,
    )])
    return container
