from .settings import ExecutorConfig, LoggingConfig, FunctionsConfig, Settings
from .validated_settings import load_validated_settings

__all__ = [
    "ExecutorConfig",
    "LoggingConfig",
    "FunctionsConfig",
    "Settings",
    "load_validated_settings",
]
