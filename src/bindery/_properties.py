from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, get_args, get_origin, get_type_hints

from ._constructors import get_hints
from ._errors import ResolutionError
from ._typing import type_name


if TYPE_CHECKING:
    from ._injector import Injector


class Inject:
    """Marker for `Annotated[T, Inject()]` class attributes filled by `inject_properties`."""

    def __repr__(self) -> str:
        return "Inject()"


class injected_property(property):  # noqa: N801
    """A property whose value is resolved by `inject_properties`.

    Example:
      class Report:
          @injected_property
          def clock(self) -> Clock:
              return self._clock

          @clock.setter
          def clock(self, value: Clock) -> None:
              self._clock = value

    """


def inject_properties(injector: Injector, instance: object) -> None:
    """Resolve and assign every property of `instance` marked for injection.

    Can be registered directly as a creation hook.
    """
    if injector is None:
        msg = "Injector must not be None"
        raise ValueError(msg)
    if instance is None:
        msg = "Instance must not be None"
        raise ValueError(msg)

    cls = type(instance)

    for name, prop in _marked_properties(cls).items():
        if prop.fset is None:
            raise _no_setter(name, cls)
        declared = get_hints(prop.fget).get("return") if prop.fget is not None else None
        if declared is None:
            msg = f"Property '{name}' on type '{type_name(cls)}' is marked for injection but has no return annotation."
            raise ResolutionError(msg)
        setattr(instance, name, injector.resolve(declared))

    for name, declared in _marked_attributes(cls).items():
        value = injector.resolve(declared)
        try:
            setattr(instance, name, value)
        except AttributeError as exc:
            raise _no_setter(name, cls) from exc


def _marked_properties(cls: type) -> dict[str, injected_property]:
    found: dict[str, Any] = {}
    for klass in cls.__mro__:
        for name, member in vars(klass).items():
            found.setdefault(name, member)
    return {name: member for name, member in found.items() if isinstance(member, injected_property)}


def _marked_attributes(cls: type) -> dict[str, Any]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return {}

    marked = {}
    for name, hint in hints.items():
        if get_origin(hint) is not Annotated:
            continue
        base_type, *metadata = get_args(hint)
        if any(isinstance(m, Inject) or m is Inject for m in metadata):
            marked[name] = base_type
    return marked


def _no_setter(name: str, cls: type) -> ResolutionError:
    msg = f"Property '{name}' on type '{type_name(cls)}' is marked for injection but does not have a setter."
    return ResolutionError(msg)
