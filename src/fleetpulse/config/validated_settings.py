"""
基于 pydantic 的配置校验与对象化加载。

提供 SettingsModel（可忽略多余字段），并转换为 dataclass Settings。
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
import yaml

from .settings import (
    ExecutorConfig,
    LoggingConfig,
    FunctionsConfig,
    Settings,
)


class ExecutorConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_attempts: int = Field(default=3, ge=1)
    per_attempt_timeout_ms: int = Field(default=5000, gt=0)
    enable_logging: bool = True


class LoggingConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: str = "INFO"
    file: Optional[str] = None
    max_size: int = 10485760
    backup_count: int = 5
    serialize: bool = False


class FunctionsConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    base_url: str = ""
    api_key: Optional[str] = None
    timeout: int = Field(default=30, gt=0)


class SettingsModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    executor: ExecutorConfigModel = ExecutorConfigModel()
    logging: LoggingConfigModel = LoggingConfigModel()
    functions: FunctionsConfigModel = FunctionsConfigModel()

    def to_dataclass(self) -> Settings:
        s = Settings()
        s.executor = ExecutorConfig(**self.executor.model_dump())
        s.logging = LoggingConfig(**self.logging.model_dump())
        s.functions = FunctionsConfig(**self.functions.model_dump())
        return s


def load_validated_settings(config_path: Optional[str] = None) -> Settings:
    """使用 pydantic 校验后返回 Settings dataclass。"""
    cfg_file = Path(config_path) if config_path else Path(__file__).parent / "config.yaml"
    data = {}
    if cfg_file.exists():
        data = yaml.safe_load(cfg_file.read_text(encoding="utf-8")) or {}
    model = SettingsModel(**data)
    return model.to_dataclass()
