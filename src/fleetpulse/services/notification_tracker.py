"""
通知冷却记录：同一设备、同一类型的通知在冷却期内只发送一次，
长时间离线的设备不再发送通知。

状态只保存在进程内存中，重启后清空。
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from loguru import logger

NOTIFICATION_COOLDOWN = timedelta(minutes=30)
STALE_DEVICE_THRESHOLD = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationCooldownTracker:
    def __init__(
        self,
        cooldown: timedelta = NOTIFICATION_COOLDOWN,
        stale_after: timedelta = STALE_DEVICE_THRESHOLD,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.cooldown = cooldown
        self.stale_after = stale_after
        self._clock = clock
        self._sent: Dict[Tuple[str, str], datetime] = {}

    def is_stale(self, last_seen: Optional[datetime]) -> bool:
        """没有遥测记录时不视为离线。"""
        if last_seen is None:
            return False
        return self._clock() - last_seen > self.stale_after

    def remaining_cooldown(self, device_id: str, notification_type: str) -> timedelta:
        sent_at = self._sent.get((device_id, notification_type))
        if sent_at is None:
            return timedelta(0)
        return max(self.cooldown - (self._clock() - sent_at), timedelta(0))

    def can_send(
        self,
        device_id: str,
        notification_type: str,
        last_seen: Optional[datetime] = None,
    ) -> bool:
        if self.is_stale(last_seen):
            logger.debug(f"Device {device_id} offline since {last_seen.isoformat()}, skipping {notification_type}")
            return False
        if self.remaining_cooldown(device_id, notification_type) > timedelta(0):
            logger.debug(f"Notification {notification_type} for {device_id} still in cooldown")
            return False
        return True

    def mark_sent(self, device_id: str, notification_type: str) -> None:
        self._sent[(device_id, notification_type)] = self._clock()

    def clear(self) -> None:
        self._sent.clear()
