"""
依赖注入模块。
"""

from .container import Container

__all__ = ["Container"]
