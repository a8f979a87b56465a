from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._injector import Injector

T = TypeVar("T")


class InstanceSource(ABC, Generic[T]):
    """Produces one instance of a contract's type per call. Never caches."""

    @abstractmethod
    def resolve(self, injector: Injector) -> T: ...


class ConstructedInstanceSource(InstanceSource[T]):
    """Builds a concrete class through constructor injection."""

    def __init__(self, concrete: type[T]) -> None:
        self.concrete = concrete

    def resolve(self, injector: Injector) -> T:
        return injector.create_instance(self.concrete)

    def __repr__(self) -> str:
        return f"ConstructedInstanceSource({self.concrete.__qualname__})"


class FixedInstanceSource(InstanceSource[T]):
    def __init__(self, instance: T) -> None:
        self.instance = instance

    def resolve(self, injector: Injector) -> T:
        return self.instance

    def __repr__(self) -> str:
        return f"FixedInstanceSource({type(self.instance).__qualname__})"


class FactoryInstanceSource(InstanceSource[T]):
    """Calls a factory, injecting each of its annotated parameters."""

    def __init__(self, factory: Callable[..., Any]) -> None:
        self.factory = factory

    def resolve(self, injector: Injector) -> T:
        return injector.invoke(self.factory)

    def __repr__(self) -> str:
        return f"FactoryInstanceSource({getattr(self.factory, '__qualname__', self.factory)!r})"
