"""
轻量依赖注入容器，用于解耦服务与具体的网关客户端实现。
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Type, TypeVar

T = TypeVar("T")


class Container:
    _instance: "Container" | None = None

    def __init__(self) -> None:
        self._factories: Dict[Type[Any], tuple[Callable[[], Any], bool]] = {}
        self._singletons: Dict[Type[Any], Any] = {}

    @classmethod
    def instance(cls) -> "Container":
        if cls._instance is None:
            cls._instance = Container()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    def register(self, interface: Type[T], factory: Callable[[], T], singleton: bool = False) -> None:
        """注册依赖工厂。重复注册会覆盖旧工厂并丢弃已缓存的单例。"""
        self._factories[interface] = (factory, singleton)
        self._singletons.pop(interface, None)

    def resolve(self, interface: Type[T]) -> T:
        """获取依赖实例。"""
        if interface in self._singletons:
            return self._singletons[interface]

        factory_tuple = self._factories.get(interface)
        if not factory_tuple:
            raise ValueError(f"No factory registered for {interface}")

        factory, as_singleton = factory_tuple
        instance = factory()
        if as_singleton:
            self._singletons[interface] = instance
        return instance
