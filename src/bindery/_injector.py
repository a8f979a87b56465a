from __future__ import annotations

import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._constructors import CachedConstructorSelector, ConstructorSelector, get_hints
from ._errors import CircularDependencyError, ConfigurationError, ResolutionError
from ._resolver import DependencyResolver
from ._typing import is_instance_of, type_name


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType

    from ._registry import ContractRegistry, ContractSet

    CreationHook = Callable[["Injector", object], None]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Injector:
    """Builds object graphs from compiled contracts.

    - `resolve`: look a type up in the contracts (single or collection)
    - `create_instance`: constructor injection for any concrete class, then creation hooks
    - `execute_method` / `invoke`: call a function with injected parameters

    The injector binds itself, so `resolve(Injector)` returns it. Use
    `InjectorConfiguration.build_injector()` rather than constructing it directly.
    """

    def __init__(
        self,
        registry: ContractRegistry,
        constructor_selector: ConstructorSelector | None = None,
        creation_hooks: Iterable[CreationHook] = (),
    ) -> None:
        if registry is None:
            msg = "Contract registry must not be None"
            raise ValueError(msg)
        if Injector in registry:
            msg = "Injector is bound automatically and cannot be registered explicitly"
            raise ConfigurationError(msg)

        self._creation_hooks = tuple(dict.fromkeys(creation_hooks))
        self._constructors = CachedConstructorSelector(constructor_selector or ConstructorSelector())
        self._local = threading.local()
        self._dispose_lock = threading.Lock()
        self._disposed = False

        registry.add(Injector).to_instance(self)
        self._contracts = registry.compile(self)
        self._resolver = DependencyResolver(self._contracts)

    @property
    def contracts(self) -> ContractSet:
        return self._contracts

    @overload
    def resolve(self, requested: type[T]) -> T: ...

    @overload
    def resolve(self, requested: Any) -> Any: ...

    def resolve(self, requested: Any) -> Any:
        """Resolve `requested` from the compiled contracts.

        The result is checked against the requested type, so a factory returning the
        wrong kind of object fails here instead of somewhere downstream.
        """
        if requested is None:
            msg = "Requested type must not be None"
            raise ValueError(msg)
        self._check_not_disposed()

        try:
            instance = self._resolver.resolve(requested)
            assignable = is_instance_of(instance, requested)
        except ResolutionError:
            raise
        except Exception as exc:
            msg = f"Failed to create instance of type {type_name(requested)}. See the chained exception"
            raise ResolutionError(msg) from exc

        if not assignable:
            msg = (
                f"Resolved instance of {type_name(type(instance))} is not assignable to "
                f"resolved type {type_name(requested)}"
            )
            raise ResolutionError(msg)
        return instance

    def create_instance(self, cls: type[T]) -> T:
        """Construct `cls` with constructor injection and run the creation hooks."""
        if cls is None:
            msg = "Type to create must not be None"
            raise ValueError(msg)
        self._check_not_disposed()

        building = self._building()
        if cls in building:
            path = " -> ".join(type_name(t) for t in [*building[building.index(cls) :], cls])
            msg = f"Circular dependency detected: {path}"
            raise CircularDependencyError(msg)

        constructor = self._constructors.select(cls)

        building.append(cls)
        try:
            args, kwargs = self._resolve_arguments(constructor.signature, constructor.hints, str(constructor))
            instance = constructor.factory(*args, **kwargs)
            for hook in self._creation_hooks:
                hook(self, instance)
        except ResolutionError:
            raise
        except Exception as exc:
            msg = f"Failed to create instance of type {type_name(cls)}. See the chained exception"
            raise ResolutionError(msg) from exc
        finally:
            building.pop()

        return instance

    def execute_method(self, return_type: Any, method: Callable[..., Any]) -> Any:
        """Call `method` with injected parameters; it must declare `return_type`."""
        self._check_callable(method, "Method")

        declared = get_hints(method).get("return", inspect.Signature.empty)
        expected = type(None) if return_type is None else return_type
        if declared != expected:
            msg = (
                f"Method {_callable_name(method)} has wrong return type. "
                f"Expected return type {type_name(expected)}."
            )
            raise TypeError(msg)

        return self._call(method)

    def invoke(self, func: Callable[..., T]) -> T:
        """Call `func` with every annotated parameter resolved from the contracts."""
        self._check_callable(func, "Function")
        return self._call(func)

    def dispose(self) -> None:
        """Release every contract's caching strategy, closing singleton-held resources."""
        with self._dispose_lock:
            if self._disposed:
                return
            self._disposed = True

        first_error: Exception | None = None
        for contract in reversed(list(self._contracts)):
            try:
                contract.caching.release()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to release %r", contract, exc_info=True)
                first_error = first_error or exc

        if first_error is not None:
            raise first_error

    close = dispose

    def __enter__(self) -> Injector:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def _call(self, func: Callable[..., T]) -> T:
        self._check_not_disposed()
        try:
            signature = inspect.signature(func)
            args, kwargs = self._resolve_arguments(signature, get_hints(func), _callable_name(func))
            return func(*args, **kwargs)
        except ResolutionError:
            raise
        except Exception as exc:
            msg = f"Failed to execute {_callable_name(func)}. See the chained exception"
            raise ResolutionError(msg) from exc

    def _resolve_arguments(
        self,
        signature: inspect.Signature,
        hints: dict[str, Any],
        owner: str,
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for name, p in signature.parameters.items():
            # Variadic parameters are never injected
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            value = self._resolve_parameter(owner, name, p, hints)
            if p.kind is p.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[name] = value

        return args, kwargs

    def _resolve_parameter(self, owner: str, name: str, p: inspect.Parameter, hints: dict[str, Any]) -> Any:
        """Resolving param.

        Resolution precedence:
        1. type-based registration
        2. default
        3. error.
        """
        annotation = hints.get(name, p.annotation)
        if isinstance(annotation, str):
            # Left unevaluated when the owner's hints failed on some forward reference.
            msg = f"Cannot satisfy parameter '{name}' of {owner}: annotation {annotation!r} could not be evaluated"
            raise ResolutionError(msg)
        if annotation is inspect.Parameter.empty:
            if p.default is not inspect.Parameter.empty:
                return p.default
            msg = f"Cannot satisfy parameter '{name}' of {owner}: it has no type annotation"
            raise ResolutionError(msg)

        if p.default is not inspect.Parameter.empty and not self._resolver.can_resolve(annotation):
            return p.default

        return self._resolver.resolve(annotation)

    def _building(self) -> list[Any]:
        try:
            return self._local.building
        except AttributeError:
            self._local.building = []
            return self._local.building

    def _check_not_disposed(self) -> None:
        if self._disposed:
            msg = "Injector has been disposed"
            raise ResolutionError(msg)

    @staticmethod
    def _check_callable(func: object, label: str) -> None:
        if func is None:
            msg = f"{label} must not be None"
            raise ValueError(msg)
        if not callable(func):
            msg = f"{label} must be callable, got {func!r}"
            raise TypeError(msg)

    def __repr__(self) -> str:
        return f"<Injector contracts={len(self._contracts)} hooks={len(self._creation_hooks)}>"


def _callable_name(func: object) -> str:
    return getattr(func, "__qualname__", None) or repr(func)
