from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ._constructors import ConstructorSelector
from ._errors import ConfigurationError
from ._injector import Injector
from ._registry import ContractRegistry


if TYPE_CHECKING:
    from ._contracts import ContractBuilder
    from ._injector import CreationHook

T = TypeVar("T")


class InjectorConfiguration:
    """Declares bindings and creation hooks, then builds an `Injector`.

    Example:
      configuration = InjectorConfiguration()
      configuration.bind(IService).to(ServiceA).as_transient()
      configuration.bind(Settings).to_instance(Settings(debug=True))
      configuration.add_creation_hook(inject_properties)
      injector = configuration.build_injector()

    """

    def __init__(self, constructor_selector: ConstructorSelector | None = None) -> None:
        self._registry = ContractRegistry()
        self._constructor_selector = constructor_selector
        self._creation_hooks: dict[CreationHook, None] = {}
        self._built = False

    def bind(self, contract_type: type[T] | Any) -> ContractBuilder[T]:
        """Start a new contract for `contract_type`. Binding a type again adds another contract."""
        self._check_not_built()
        if contract_type is Injector:
            msg = "Injector is bound automatically and cannot be registered explicitly"
            raise ConfigurationError(msg)
        return self._registry.add(contract_type)

    def add_creation_hook(self, hook: CreationHook) -> InjectorConfiguration:
        """Register `hook(injector, instance)`, called after every constructed instance."""
        self._check_not_built()
        if hook is None:
            msg = "Creation hook must not be None"
            raise ValueError(msg)
        if not callable(hook):
            msg = f"Creation hook must be callable, got {hook!r}"
            raise TypeError(msg)
        self._creation_hooks[hook] = None
        return self

    def build_injector(self) -> Injector:
        self._check_not_built()
        self._built = True
        return Injector(self._registry, self._constructor_selector, self._creation_hooks)

    def _check_not_built(self) -> None:
        if self._built:
            msg = "This configuration already built an injector; create a new InjectorConfiguration"
            raise ConfigurationError(msg)
