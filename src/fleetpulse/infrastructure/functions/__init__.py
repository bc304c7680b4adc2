"""
Serverless 函数网关。
"""

from .client import EdgeFunctionClient, FunctionResponse

__all__ = ["EdgeFunctionClient", "FunctionResponse"]
