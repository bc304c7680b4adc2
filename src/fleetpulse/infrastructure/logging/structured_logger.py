"""
Structured Logger - leveled, context-carrying log records on top of loguru.

Provides:
- Per-service loggers with a default context
- Child loggers that extend the context
- A per-instance on/off switch (no global toggle)
- Sink configuration from LoggingConfig
"""

from __future__ import annotations

import sys
import uuid
from typing import Any, Dict, Optional

from loguru import logger

from fleetpulse.config.settings import LoggingConfig

LogContext = Dict[str, Any]

_LEVELS = ("debug", "info", "warn", "error", "fatal")
_LOGURU_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
    "fatal": "CRITICAL",
}


def _format_error(error: BaseException) -> Dict[str, Any]:
    return {"name": type(error).__name__, "message": str(error)}


class StructuredLogger:
    """
    Service-scoped logger.

    Every record is emitted through loguru with ``service``, ``trace_id`` and
    ``context`` bound into ``record["extra"]``.
    """

    def __init__(
        self,
        service: str,
        default_context: Optional[LogContext] = None,
        min_level: str = "info",
        enabled: bool = True,
    ):
        if min_level not in _LEVELS:
            raise ValueError(f"unknown log level: {min_level}")
        self.service = service
        self.default_context: LogContext = dict(default_context or {})
        self.min_level = min_level
        self.enabled = enabled

    def _should_log(self, level: str) -> bool:
        return self.enabled and _LEVELS.index(level) >= _LEVELS.index(self.min_level)

    def _log(
        self,
        level: str,
        message: str,
        context: Optional[LogContext] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if not self._should_log(level):
            return

        merged = {**self.default_context, **(context or {})}
        extra: Dict[str, Any] = {
            "service": self.service,
            "trace_id": uuid.uuid4().hex[:13],
            "context": merged,
        }
        if error is not None:
            extra["error"] = _format_error(error)

        logger.bind(**extra).log(_LOGURU_LEVELS[level], f"[{self.service}] {message}")

    def debug(self, message: str, context: Optional[LogContext] = None) -> None:
        self._log("debug", message, context)

    def info(self, message: str, context: Optional[LogContext] = None) -> None:
        self._log("info", message, context)

    def warn(self, message: str, context: Optional[LogContext] = None) -> None:
        self._log("warn", message, context)

    def error(self, message: str, error: Optional[BaseException] = None, context: Optional[LogContext] = None) -> None:
        self._log("error", message, context, error)

    def fatal(self, message: str, error: Optional[BaseException] = None, context: Optional[LogContext] = None) -> None:
        self._log("fatal", message, context, error)

    def log(self, level: str, message: str, context: Optional[LogContext] = None) -> None:
        """Dispatch by level name (debug|info|warn|error|fatal)."""
        self._log(level, message, context)

    def child(self, default_context: LogContext) -> "StructuredLogger":
        return StructuredLogger(
            self.service,
            {**self.default_context, **default_context},
            self.min_level,
            self.enabled,
        )


def create_logger(service: str, context: Optional[LogContext] = None, *, enabled: bool = True) -> StructuredLogger:
    """Factory for service-specific loggers."""
    return StructuredLogger(service, context, enabled=enabled)


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Replace loguru sinks according to LoggingConfig."""
    config = config or LoggingConfig()
    logger.remove()
    logger.add(sys.stderr, level=config.level, serialize=config.serialize)
    if config.file:
        logger.add(
            config.file,
            level=config.level,
            rotation=config.max_size,
            retention=config.backup_count,
            serialize=config.serialize,
            encoding="utf-8",
        )
