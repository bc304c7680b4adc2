"""
基础设施层：结构化日志、Serverless 函数网关。
"""
