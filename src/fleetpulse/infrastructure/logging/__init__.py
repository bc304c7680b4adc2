"""
Structured Logging Infrastructure
"""

from .structured_logger import StructuredLogger, create_logger, configure_logging

__all__ = ["StructuredLogger", "create_logger", "configure_logging"]
