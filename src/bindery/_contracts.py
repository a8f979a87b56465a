from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._caching import CachingStrategy, Lifetime, TransientCaching, strategy_for
from ._errors import ConfigurationError
from ._sources import ConstructedInstanceSource, FactoryInstanceSource, FixedInstanceSource, InstanceSource
from ._typing import is_plain_class, type_name, validate_impl


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._injector import Injector

T = TypeVar("T")


class Contract(Generic[T]):
    """A compiled binding: abstract type -> instance source, behind a caching strategy."""

    __slots__ = ("caching", "contract_type", "injector", "ordinal", "source")

    def __init__(
        self,
        contract_type: Any,
        ordinal: int,
        source: InstanceSource[T],
        caching: CachingStrategy[T],
        injector: Injector,
    ) -> None:
        self.contract_type = contract_type
        self.ordinal = ordinal
        self.source = source
        self.caching = caching
        self.injector = injector

    def resolve(self) -> T:
        return self.caching.resolve(self.injector, self.source)

    def __repr__(self) -> str:
        return (
            f"Contract({type_name(self.contract_type)}#{self.ordinal}, "
            f"{self.source!r}, {type(self.caching).__name__})"
        )


class ContractBuilder(Generic[T]):
    """Configures one contract for `contract_type`.

    Example:
      registry.add(IService).to(ServiceA).as_transient()
      registry.add(Settings).to_instance(settings)
      registry.add(Connection).to_factory(open_connection).as_singleton()

    """

    def __init__(self, contract_type: Any) -> None:
        self.contract_type = contract_type
        self._source: InstanceSource[T] | None = None
        self._caching: Callable[[], CachingStrategy[T]] | None = None

    def to(self, concrete: type[T]) -> ContractBuilder[T]:
        if not is_plain_class(concrete):
            msg = f"Binding target for {type_name(self.contract_type)} must be a class, got {concrete!r}"
            raise TypeError(msg)
        if is_plain_class(self.contract_type):
            validate_impl(cls=self.contract_type, impl=concrete)
        return self._bind(ConstructedInstanceSource(concrete))

    def to_self(self) -> ContractBuilder[T]:
        return self.to(self.contract_type)

    def to_instance(self, instance: T) -> ContractBuilder[T]:
        if instance is None:
            msg = f"Cannot bind {type_name(self.contract_type)} to None"
            raise ValueError(msg)
        if is_plain_class(self.contract_type):
            validate_impl(cls=self.contract_type, impl=type(instance))
        return self._bind(FixedInstanceSource(instance))

    def to_factory(self, factory: Callable[..., T]) -> ContractBuilder[T]:
        if not callable(factory):
            msg = f"Factory for {type_name(self.contract_type)} must be callable, got {factory!r}"
            raise TypeError(msg)
        return self._bind(FactoryInstanceSource(factory))

    def as_singleton(self) -> ContractBuilder[T]:
        return self.with_lifetime(Lifetime.SINGLETON)

    def as_transient(self) -> ContractBuilder[T]:
        return self.with_lifetime(Lifetime.TRANSIENT)

    def as_thread_local(self) -> ContractBuilder[T]:
        return self.with_lifetime(Lifetime.THREAD_LOCAL)

    def with_lifetime(self, lifetime: Lifetime) -> ContractBuilder[T]:
        return self.with_caching(strategy_for(lifetime))

    def with_caching(self, strategy_factory: Callable[[], CachingStrategy[T]]) -> ContractBuilder[T]:
        """Use a custom caching strategy; the factory is called once per compiled contract."""
        if not callable(strategy_factory):
            msg = "Caching strategy factory must be callable"
            raise TypeError(msg)
        self._caching = strategy_factory
        return self

    def build_contract(self, injector: Injector, ordinal: int) -> Contract[T]:
        if self._source is None:
            msg = (
                f"Contract #{ordinal} for {type_name(self.contract_type)} was registered "
                "but never bound to a type, instance or factory"
            )
            raise ConfigurationError(msg)

        caching = (self._caching or self._default_caching())()
        if not isinstance(caching, CachingStrategy):
            msg = f"Caching strategy factory for {type_name(self.contract_type)} returned {caching!r}"
            raise ConfigurationError(msg)
        return Contract(self.contract_type, ordinal, self._source, caching, injector)

    def _default_caching(self) -> Callable[[], CachingStrategy[T]]:
        # Fixed instances are owned by the caller and must not be closed on disposal.
        if isinstance(self._source, FixedInstanceSource):
            return TransientCaching
        return strategy_for(Lifetime.SINGLETON)

    def _bind(self, source: InstanceSource[T]) -> ContractBuilder[T]:
        if self._source is not None:
            msg = f"Contract for {type_name(self.contract_type)} is already bound to {self._source!r}"
            raise ConfigurationError(msg)
        self._source = source
        return self
