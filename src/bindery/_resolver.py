from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._errors import UnresolvableTypeError
from ._typing import collection_item_type, type_name


if TYPE_CHECKING:
    from ._registry import ContractSet


class DependencyResolver:
    """Maps a requested type to an instance using a compiled `ContractSet`.

    Resolution order:
    1. the first contract registered for the exact type
    2. for `Iterable[T]`, `Collection[T]`, `Sequence[T]` or `tuple[T, ...]`: every
       contract of `T`, in registration order, as a tuple. Only when `T` has at
       least one contract; an empty multi-binding is a configuration mistake,
       not an empty result.
    3. error.
    """

    def __init__(self, contracts: ContractSet) -> None:
        self._contracts = contracts

    def resolve(self, requested: Any) -> Any:
        found, instance = self._resolve_first(requested)
        if found:
            return instance

        found, instances = self._resolve_collection(requested)
        if found:
            return instances

        msg = f"Cannot resolve type {type_name(requested)}"
        raise UnresolvableTypeError(msg)

    def can_resolve(self, requested: Any) -> bool:
        if self._has_contract(requested):
            return True
        item_type = collection_item_type(requested)
        return item_type is not None and self._has_contract(item_type)

    def _has_contract(self, requested: Any) -> bool:
        try:
            return requested in self._contracts
        except TypeError:  # unhashable annotation
            return False

    def _resolve_first(self, requested: Any) -> tuple[bool, Any]:
        if not self._has_contract(requested):
            return False, None
        contract = self._contracts.first(requested)
        return True, contract.resolve()  # type: ignore[union-attr]

    def _resolve_collection(self, requested: Any) -> tuple[bool, tuple[Any, ...] | None]:
        item_type = collection_item_type(requested)
        if item_type is None:
            return False, None
        return self._resolve_all(item_type)

    def _resolve_all(self, item_type: Any) -> tuple[bool, tuple[Any, ...] | None]:
        if not self._has_contract(item_type):
            return False, None
        return True, tuple(contract.resolve() for contract in self._contracts.get(item_type))
