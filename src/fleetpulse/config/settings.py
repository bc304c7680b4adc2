# fleetpulse/config/settings.py

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class ExecutorConfig:
    """重试执行器配置（每个执行器实例一份，构造后不可变）"""
    max_attempts: int = 3
    per_attempt_timeout_ms: int = 5000
    enable_logging: bool = True

    def __post_init__(self):
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError(f"max_attempts must be an integer >= 1, got {self.max_attempts!r}")
        if isinstance(self.per_attempt_timeout_ms, bool) or not isinstance(self.per_attempt_timeout_ms, int) \
                or self.per_attempt_timeout_ms <= 0:
            raise ValueError(f"per_attempt_timeout_ms must be an integer > 0, got {self.per_attempt_timeout_ms!r}")


@dataclass
class LoggingConfig:
    """日志配置"""
    level: str = "INFO"
    file: Optional[str] = None
    max_size: int = 10485760  # 10MB
    backup_count: int = 5
    serialize: bool = False


@dataclass
class FunctionsConfig:
    """Serverless 函数网关配置"""
    base_url: str = ""
    api_key: Optional[str] = None
    timeout: int = 30


@dataclass
class Settings:
    """主配置类"""
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    functions: FunctionsConfig = field(default_factory=FunctionsConfig)

    @classmethod
    def load_from_file(cls, config_path: Optional[str] = None) -> 'Settings':
        """从文件加载配置"""
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"

        config_path = Path(config_path)

        if not config_path.exists():
            # 返回默认配置
            return cls()

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'Settings':
        """从字典创建配置"""
        settings = cls()

        if 'executor' in config_data:
            settings.executor = ExecutorConfig(**config_data['executor'])

        if 'logging' in config_data:
            settings.logging = LoggingConfig(**config_data['logging'])

        if 'functions' in config_data:
            settings.functions = FunctionsConfig(**config_data['functions'])

        return settings

    def load_environment_variables(self):
        """加载环境变量"""
        self.functions.base_url = os.getenv('FLEETPULSE_FUNCTIONS_URL', self.functions.base_url)
        self.functions.api_key = os.getenv('FLEETPULSE_FUNCTIONS_KEY', self.functions.api_key)
        env_level = os.getenv('FLEETPULSE_LOG_LEVEL')
        if env_level:
            self.logging.level = env_level.upper()

        # ExecutorConfig 不可变，整体替换
        env_attempts = os.getenv('FLEETPULSE_MAX_ATTEMPTS')
        if env_attempts:
            self.executor = replace(self.executor, max_attempts=int(env_attempts))
        env_timeout = os.getenv('FLEETPULSE_TIMEOUT_MS')
        if env_timeout:
            self.executor = replace(self.executor, per_attempt_timeout_ms=int(env_timeout))
        return self
