from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints

from ._errors import AmbiguousConstructorError, MissingConstructorError, ResolutionError
from ._typing import is_plain_class, is_protocol, type_name


if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

F = TypeVar("F")

_INJECTED_MARK = "__bindery_injected_constructor__"
_ALTERNATE_MARK = "__bindery_alternate_constructor__"


def injected_constructor(func: F) -> F:
    """Mark `__init__` or a classmethod as the constructor used for injection.

    Works above or below `@classmethod`.
    """
    _mark(func, _INJECTED_MARK)
    return func


def alternate_constructor(func: F) -> F:
    """Declare a classmethod as an additional public constructor of its class."""
    _mark(func, _ALTERNATE_MARK)
    return func


def _mark(func: Any, attr: str) -> None:
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, attr, True)


def _has_mark(member: Any, attr: str) -> bool:
    target = member.__func__ if isinstance(member, classmethod) else member
    return bool(getattr(target, attr, False))


@dataclass(frozen=True)
class ConstructorDescriptor:
    """The constructor chosen for a concrete type."""

    owner: type
    name: str
    factory: Callable[..., Any]
    signature: inspect.Signature
    hints: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{type_name(self.owner)}.{self.name}"


class ConstructorSelector:
    """Chooses which constructor of a concrete type is used for injection.

    1. the single constructor marked with `@injected_constructor`
    2. otherwise the only public constructor
    3. otherwise the selection is ambiguous.
    """

    def select(self, cls: Any) -> ConstructorDescriptor:
        if not is_plain_class(cls):
            msg = f"Cannot create an instance of {type_name(cls)}; it is not a class"
            raise MissingConstructorError(msg)
        if is_protocol(cls) or inspect.isabstract(cls):
            msg = f"Cannot create an instance of type {type_name(cls)}; the type has no public constructor"
            raise MissingConstructorError(msg)

        candidates = self._candidates(cls)

        marked = [name for name, member in candidates.items() if _has_mark(member, _INJECTED_MARK)]
        if len(marked) > 1:
            msg = (
                f"Type {type_name(cls)} marks more than one constructor with @injected_constructor: "
                f"{', '.join(marked)}"
            )
            raise AmbiguousConstructorError(msg)

        if marked:
            chosen = marked[0]
        elif len(candidates) == 1:
            chosen = next(iter(candidates))
        else:
            msg = (
                f"Cannot choose a constructor for type {type_name(cls)}; candidates are "
                f"{', '.join(candidates)}. Mark one with @injected_constructor"
            )
            raise AmbiguousConstructorError(msg)

        return self._describe(cls, chosen)

    def _candidates(self, cls: type) -> dict[str, Any]:
        seen: dict[str, Any] = {}
        for klass in cls.__mro__:
            for name, member in vars(klass).items():
                if name not in seen:
                    seen[name] = member

        candidates = {
            name: member
            for name, member in seen.items()
            if isinstance(member, classmethod)
            and (_has_mark(member, _ALTERNATE_MARK) or _has_mark(member, _INJECTED_MARK))
        }

        init = inspect.getattr_static(cls, "__init__")
        if init is not object.__init__ or not candidates:
            return {"__init__": init, **candidates}
        return candidates

    def _describe(self, cls: type, name: str) -> ConstructorDescriptor:
        if name == "__init__":
            factory: Callable[..., Any] = cls
            func = inspect.getattr_static(cls, "__init__")
        else:
            factory = getattr(cls, name)
            func = factory.__func__  # type: ignore[attr-defined]

        try:
            if func is object.__init__ and cls.__new__ is object.__new__:
                signature = inspect.Signature()
            else:
                signature = inspect.signature(factory)
        except (TypeError, ValueError) as exc:
            msg = f"Cannot inspect constructor {type_name(cls)}.{name}: {exc}"
            raise ResolutionError(msg) from exc

        descriptor = ConstructorDescriptor(cls, name, factory, signature, get_hints(func, cls))
        logger.debug("Selected constructor %s", descriptor)
        return descriptor


class CachedConstructorSelector:
    """Remembers the selection per type; constructor shape never changes at runtime."""

    def __init__(self, selector: ConstructorSelector) -> None:
        self._selector = selector
        self._lock = threading.Lock()
        self._cache: dict[Any, ConstructorDescriptor | ResolutionError] = {}

    def select(self, cls: Any) -> ConstructorDescriptor:
        try:
            decision = self._cache.get(cls)
        except TypeError:  # unhashable
            return self._selector.select(cls)

        if decision is None:
            with self._lock:
                decision = self._cache.get(cls)
                if decision is None:
                    try:
                        decision = self._selector.select(cls)
                    except ResolutionError as exc:
                        decision = exc
                    self._cache[cls] = decision

        if isinstance(decision, ResolutionError):
            raise type(decision)(*decision.args)
        return decision


def get_hints(func: Any, owner: Any = None) -> dict[str, Any]:
    """Type hints of a callable; empty if they cannot be evaluated."""
    try:
        return get_type_hints(func)
    except TypeError:
        return {}
    except NameError as exc:
        label = type_name(owner) if owner is not None else getattr(func, "__qualname__", repr(func))
        logger.warning("'%s' name error retrieving %s type hints", exc.name, label)
        return {}
