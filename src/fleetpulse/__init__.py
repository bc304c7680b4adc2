# fleetpulse/__init__.py
"""
FleetPulse - 设备群遥测仪表盘的服务层

- 带超时与指数退避的重试执行器
- Result 风格的统一错误模型
- 设备分组、设备删除、Telegram / 邮件通知等 Serverless 函数调用
"""

__version__ = "1.0.0"
__author__ = "FleetPulse Team"
