from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar


if TYPE_CHECKING:
    from ._injector import Injector
    from ._sources import InstanceSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"
    THREAD_LOCAL = "thread_local"


class CachingStrategy(ABC, Generic[T]):
    """Lifetime policy wrapping an instance source.

    Every contract owns its own strategy object. `release` is called once when the
    owning injector is disposed.
    """

    @abstractmethod
    def resolve(self, injector: Injector, source: InstanceSource[T]) -> T: ...

    def release(self) -> None:  # noqa: B027
        pass


class TransientCaching(CachingStrategy[T]):
    def resolve(self, injector: Injector, source: InstanceSource[T]) -> T:
        return source.resolve(injector)


class SingletonCaching(CachingStrategy[T]):
    """Resolve once, then return the cached instance forever.

    The unguarded read of `_resolved` is the fast path; the slow path re-checks under
    the lock so the source runs at most once even under concurrent first access.
    """

    def __init__(self) -> None:
        # Reentrant: a dependency cycle through a singleton must fail, not deadlock.
        self._lock = threading.RLock()
        self._resolved = False
        self._instance: T | None = None

    def resolve(self, injector: Injector, source: InstanceSource[T]) -> T:
        if not self._resolved:
            with self._lock:
                if not self._resolved:
                    self._instance = source.resolve(injector)
                    self._resolved = True
                    logger.debug("Cached singleton %s", type(self._instance).__qualname__)
        return self._instance  # type: ignore[return-value]

    def release(self) -> None:
        with self._lock:
            if not self._resolved:
                return
            instance, self._instance = self._instance, None
            self._resolved = False
        dispose_instance(instance)


class ThreadLocalCaching(CachingStrategy[T]):
    """One instance per calling thread."""

    def __init__(self) -> None:
        self._local = threading.local()
        self._lock = threading.Lock()
        self._instances: list[T] = []

    def resolve(self, injector: Injector, source: InstanceSource[T]) -> T:
        try:
            return self._local.instance
        except AttributeError:
            pass

        instance = source.resolve(injector)
        self._local.instance = instance
        with self._lock:
            self._instances.append(instance)
        return instance

    def release(self) -> None:
        with self._lock:
            instances, self._instances = self._instances, []
        self._local = threading.local()
        for instance in reversed(instances):
            dispose_instance(instance)


_LIFETIME_STRATEGIES: dict[Lifetime, type[CachingStrategy]] = {
    Lifetime.SINGLETON: SingletonCaching,
    Lifetime.TRANSIENT: TransientCaching,
    Lifetime.THREAD_LOCAL: ThreadLocalCaching,
}


def strategy_for(lifetime: Lifetime) -> type[CachingStrategy]:
    return _LIFETIME_STRATEGIES[lifetime]


def dispose_instance(instance: object) -> None:
    """Close a disposable instance: `close()` if present, else exit it as a context manager."""
    close = getattr(instance, "close", None)
    if callable(close):
        logger.debug("Closing %s", type(instance).__qualname__)
        close()
        return

    exit_ = getattr(type(instance), "__exit__", None)
    if callable(exit_):
        logger.debug("Exiting %s", type(instance).__qualname__)
        exit_(instance, None, None, None)
