"""
通知服务：Telegram 与邮件通知的分发。
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fleetpulse.config.settings import ExecutorConfig
from fleetpulse.core.errors import ErrorCode, ErrorSeverity, OperationError, Result
from fleetpulse.infrastructure.functions import EdgeFunctionClient, FunctionResponse
from fleetpulse.infrastructure.logging import StructuredLogger

from .base import FunctionBackedService
from .notification_tracker import NotificationCooldownTracker

TELEGRAM_FUNCTION = "send-notification"
EMAIL_FUNCTION = "send-email-notification"
TEST_MESSAGE = "This is a test notification from Device Telemetry"


class NotificationService(FunctionBackedService):
    service_name = "NotificationService"

    def __init__(
        self,
        client: Optional[EdgeFunctionClient] = None,
        config: Optional[ExecutorConfig] = None,
        *,
        logger: Optional[StructuredLogger] = None,
        tracker: Optional[NotificationCooldownTracker] = None,
    ):
        super().__init__(client, config, logger=logger)
        self.tracker = tracker or NotificationCooldownTracker()

    async def _dispatch(self, function: str, body: dict, operation_name: str) -> Result[FunctionResponse, OperationError]:
        invoked = await self._invoke(function, body, operation_name)
        if invoked.is_err():
            return invoked

        response = invoked.unwrap()
        if not response.success:
            return Result.err(OperationError.operation_failed(
                response.error or response.message or f"{function} failed",
                origin=self.service_name,
                context={"function": function},
            ))
        return Result.ok(response)

    async def send_telegram(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        message: str,
        type: str = "test",
    ) -> Result[FunctionResponse, OperationError]:
        if not bot_token or not chat_id:
            return Result.err(OperationError.validation(
                "Telegram bot token and chat ID are required",
                origin=self.service_name,
            ))

        result = await self._dispatch(
            TELEGRAM_FUNCTION,
            {"botToken": bot_token, "chatId": chat_id, "message": message, "type": type},
            "send_telegram",
        )
        return result.and_then(self._check_telegram_channel)

    def _check_telegram_channel(self, response: FunctionResponse) -> Result[FunctionResponse, OperationError]:
        channels = response.data.get("results") or []
        telegram = next(
            (r for r in channels if isinstance(r, dict) and r.get("channel") == "telegram"),
            None,
        )
        if telegram is None or not telegram.get("success"):
            error = (telegram or {}).get("error") or "Telegram notification failed"
            return Result.err(OperationError.operation_failed(
                error,
                origin=self.service_name,
                context={"function": TELEGRAM_FUNCTION},
            ))
        return Result.ok(response)

    async def send_test_notification(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
    ) -> Result[FunctionResponse, OperationError]:
        return await self.send_telegram(bot_token, chat_id, TEST_MESSAGE, type="test")

    async def send_email(
        self,
        device_id: str,
        device_name: str,
        message: str,
        type: str = "alert",
        last_seen: Optional[datetime] = None,
    ) -> Result[FunctionResponse, OperationError]:
        """
        发送设备邮件通知。

        同一设备同一类型 30 分钟内只发送一次；last_seen 超过 24 小时的设备直接跳过。
        被跳过时返回 RATE_LIMIT_EXCEEDED（冷却中）或 OPERATION_FAILED（设备离线），严重级别为 LOW。
        """
        if not message:
            return Result.err(OperationError.validation(
                "Notification message is required",
                origin=self.service_name,
                context={"device_id": device_id},
            ))

        context = {"device_id": device_id, "type": type}
        if self.tracker.is_stale(last_seen):
            return Result.err(OperationError(
                f"Device {device_id} has been offline for too long, notification skipped",
                code=ErrorCode.OPERATION_FAILED,
                origin=self.service_name,
                severity=ErrorSeverity.LOW,
                context={**context, "last_seen": last_seen.isoformat()},
            ))
        if not self.tracker.can_send(device_id, type, last_seen):
            remaining = self.tracker.remaining_cooldown(device_id, type)
            return Result.err(OperationError(
                f"Notification '{type}' for device {device_id} is in cooldown",
                code=ErrorCode.RATE_LIMIT_EXCEEDED,
                origin=self.service_name,
                severity=ErrorSeverity.LOW,
                context={**context, "retry_after_s": int(remaining.total_seconds())},
            ))

        result = await self._dispatch(
            EMAIL_FUNCTION,
            {"deviceId": device_id, "deviceName": device_name, "message": message, "type": type},
            "send_email",
        )
        if result.is_ok():
            self.tracker.mark_sent(device_id, type)
        return result
