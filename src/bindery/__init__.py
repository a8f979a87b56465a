"""Contract-based dependency injection.

Bindings (contracts) map an abstract type to a way of producing instances: a concrete
class built by constructor injection, a fixed instance, or a factory. Each contract has
a lifetime (singleton, transient or thread-local), and a type may be bound several
times to get all implementations as a collection.

Exports:
- `InjectorConfiguration`: declares bindings and creation hooks and builds an `Injector`.
- `Injector`: resolves types, creates instances and calls functions with injected parameters.
- `Lifetime`, `CachingStrategy` and its variants: lifetime policies for contracts.
- `injected_constructor`, `alternate_constructor`: constructor selection markers.
- `inject_properties`, `injected_property`, `Inject`: property injection after construction.
- `ResolutionError` and its subclasses, `ConfigurationError`.
"""

from ._caching import CachingStrategy, Lifetime, SingletonCaching, ThreadLocalCaching, TransientCaching
from ._configuration import InjectorConfiguration
from ._constructors import (
    CachedConstructorSelector,
    ConstructorDescriptor,
    ConstructorSelector,
    alternate_constructor,
    injected_constructor,
)
from ._contracts import Contract, ContractBuilder
from ._errors import (
    AmbiguousConstructorError,
    CircularDependencyError,
    ConfigurationError,
    MissingConstructorError,
    ResolutionError,
    UnresolvableTypeError,
)
from ._injector import Injector
from ._properties import Inject, inject_properties, injected_property
from ._registry import ContractRegistry, ContractSet
from ._resolver import DependencyResolver
from ._sources import ConstructedInstanceSource, FactoryInstanceSource, FixedInstanceSource, InstanceSource


__all__ = [
    "AmbiguousConstructorError",
    "CachedConstructorSelector",
    "CachingStrategy",
    "CircularDependencyError",
    "ConfigurationError",
    "ConstructedInstanceSource",
    "ConstructorDescriptor",
    "ConstructorSelector",
    "Contract",
    "ContractBuilder",
    "ContractRegistry",
    "ContractSet",
    "DependencyResolver",
    "FactoryInstanceSource",
    "FixedInstanceSource",
    "Inject",
    "Injector",
    "InjectorConfiguration",
    "InstanceSource",
    "Lifetime",
    "MissingConstructorError",
    "ResolutionError",
    "SingletonCaching",
    "ThreadLocalCaching",
    "TransientCaching",
    "UnresolvableTypeError",
    "alternate_constructor",
    "inject_properties",
    "injected_constructor",
    "injected_property",
]
