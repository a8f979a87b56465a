from __future__ import annotations

import collections.abc
import inspect
import typing
from typing import Any, Protocol, cast, get_args, get_origin, get_type_hints


# Generic origins accepted as a request for "every binding of the element type".
COLLECTION_ORIGINS = frozenset(
    {
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
    }
)


def type_name(tp: object) -> str:
    """Fully qualified, human readable name of a type or generic alias."""
    if is_plain_class(tp):
        module = getattr(tp, "__module__", "")
        qualname = getattr(tp, "__qualname__", tp.__name__)
        return qualname if module == "builtins" else f"{module}.{qualname}"
    return repr(tp)


def is_plain_class(tp: object) -> bool:
    """A class object, excluding parameterized generics that pose as classes."""
    return inspect.isclass(tp) and get_origin(tp) is None


def collection_item_type(tp: object) -> object | None:
    """Return the element type of a supported read-only collection request, or None."""
    origin = get_origin(tp)
    args = get_args(tp)
    if origin in COLLECTION_ORIGINS and len(args) == 1:
        return args[0]
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
        return args[0]
    return None


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: object) -> bool:
        return is_plain_class(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: object) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return (
            is_plain_class(tp)
            and issubclass(tp, cast("type", Protocol))
            and bool(getattr(tp, "_is_protocol", False))
        )


def is_runtime_checkable_protocol(tp: object) -> bool:
    if not is_protocol(tp):
        return False

    try:
        isinstance(None, tp)  # type: ignore[arg-type]
    except TypeError:
        return False
    else:
        return True


def validate_impl(cls: type, impl: type) -> None:
    """Validate that 'impl' implements 'cls'.

    - For normal classes/ABCs: require issubclass(impl, cls).
    - For Protocols: check nominal via MRO; otherwise perform structural conformance.
    """
    if not is_protocol(cls):
        if not issubclass(impl, cls):
            msg = f"Implementation {impl.__name__} must be a subclass of {cls.__name__}"
            raise TypeError(msg)
        return

    validate_protocol_impl(cls, impl)


def validate_protocol_impl(proto_cls: type, impl: type) -> None:
    if proto_cls in getattr(impl, "__mro__", ()):
        return

    _validate_protocol_structural_conformance(proto_cls, impl)


def is_instance_of(instance: object, tp: object) -> bool:
    """Check a resolved value against the requested type.

    Collections are checked by origin, and element by element when they can be iterated
    more than once. Protocols that are not runtime checkable are checked structurally.
    """
    item_type = collection_item_type(tp)
    if item_type is not None:
        if not isinstance(instance, cast("type", get_origin(tp))):
            return False
        # Iterating a generator or iterator here would hand the caller an exhausted one.
        if not isinstance(instance, collections.abc.Collection):
            return True
        return all(is_instance_of(item, item_type) for item in instance)

    if get_origin(tp) is not None:
        # Other parameterized generics: only the origin is checkable at runtime.
        origin = get_origin(tp)
        return not inspect.isclass(origin) or isinstance(instance, origin)

    if not is_plain_class(tp):
        return True

    if is_runtime_checkable_protocol(tp):
        return isinstance(instance, tp)

    if is_protocol(tp):
        try:
            validate_protocol_impl(tp, type(instance))
        except TypeError:
            return False
        return True

    return isinstance(instance, tp)


def _validate_protocol_structural_conformance(proto_cls: type, impl: type) -> None:
    """Members must exist; methods must be callable, accept the protocol's positional
    arguments and declare a compatible return class. Anything subtler is not checked.
    """
    try:
        annotated = [name for name in get_type_hints(proto_cls) if not name.startswith("_")]
    except TypeError:
        annotated = []
    methods = {
        name: member
        for name, member in vars(proto_cls).items()
        if not name.startswith("_") and inspect.isfunction(member)
    }

    problems = [f"missing {name}" for name in dict.fromkeys([*annotated, *methods]) if not hasattr(impl, name)]
    for name, proto_method in methods.items():
        if hasattr(impl, name):
            problems.extend(_method_problems(name, proto_method, getattr(impl, name)))

    if problems:
        msg = (
            f"{type_name(impl)} does not structurally conform to protocol "
            f"{type_name(proto_cls)}: {'; '.join(problems)}"
        )
        raise TypeError(msg)


def _method_problems(name: str, proto_method: Any, impl_member: Any) -> list[str]:
    if not callable(impl_member):
        return [f"{name} is not callable"]

    try:
        expected, actual = inspect.signature(proto_method), inspect.signature(impl_member)
    except (TypeError, ValueError) as exc:
        return [f"{name} signature cannot be inspected ({exc})"]

    problems = []
    if _required_positional(actual) < _required_positional(expected):
        problems.append(f"{name} takes fewer positional arguments than the protocol declares")

    proto_ret, impl_ret = expected.return_annotation, actual.return_annotation
    if impl_ret != proto_ret and not _returns_subclass(impl_ret, proto_ret):
        problems.append(f"{name} returns {impl_ret!r}, protocol declares {proto_ret!r}")
    return problems


def _required_positional(signature: inspect.Signature) -> int:
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return sum(
        1
        for p in signature.parameters.values()
        if p.name != "self" and p.kind in positional and p.default is inspect.Parameter.empty
    )


def _returns_subclass(impl_ret: object, proto_ret: object) -> bool:
    # An unannotated or Any return on either side is not compared.
    unchecked = (inspect.Signature.empty, Any)
    if impl_ret in unchecked or proto_ret in unchecked:
        return True
    return is_plain_class(impl_ret) and is_plain_class(proto_ret) and issubclass(impl_ret, proto_ret)
