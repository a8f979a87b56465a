from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar

from ._contracts import Contract, ContractBuilder
from ._errors import ConfigurationError
from ._typing import type_name


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from ._injector import Injector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContractSet:
    """A fixed set of compiled contracts, keyed by contract type in declaration order."""

    def __init__(self, contracts: Mapping[Any, tuple[Contract[Any], ...]]) -> None:
        self._contracts = MappingProxyType(dict(contracts))

    def get(self, contract_type: Any) -> tuple[Contract[Any], ...]:
        return self._contracts.get(contract_type, ())

    def first(self, contract_type: Any) -> Contract[Any] | None:
        contracts = self._contracts.get(contract_type)
        return contracts[0] if contracts else None

    def __contains__(self, contract_type: object) -> bool:
        return bool(self._contracts.get(contract_type))

    def __iter__(self) -> Iterator[Contract[Any]]:
        for contracts in self._contracts.values():
            yield from contracts

    def __len__(self) -> int:
        return sum(len(contracts) for contracts in self._contracts.values())

    def types(self) -> tuple[Any, ...]:
        return tuple(self._contracts)


class ContractRegistry:
    """Accumulates contract declarations until they are compiled into a `ContractSet`."""

    def __init__(self) -> None:
        self._builders: dict[Any, list[ContractBuilder[Any]]] = {}
        self._sealed = False

    def add(self, contract_type: type[T] | Any) -> ContractBuilder[T]:
        """Register a new, unconfigured contract for `contract_type`.

        Adding the same type again appends another contract; the first one wins for
        single resolution and all of them are returned for collection requests.
        """
        if contract_type is None:
            msg = "Contract type must not be None"
            raise ValueError(msg)
        if self._sealed:
            msg = f"Cannot add a contract for {type_name(contract_type)}: the registry was already compiled"
            raise ConfigurationError(msg)

        builder: ContractBuilder[T] = ContractBuilder(contract_type)
        self._builders.setdefault(contract_type, []).append(builder)
        return builder

    def __contains__(self, contract_type: object) -> bool:
        return contract_type in self._builders

    def compile(self, injector: Injector) -> ContractSet:
        """Build every registered contract against `injector` and seal the registry."""
        if injector is None:
            msg = "Injector must not be None"
            raise ValueError(msg)
        if self._sealed:
            msg = "Contract registry was already compiled"
            raise ConfigurationError(msg)

        compiled = {
            contract_type: tuple(
                builder.build_contract(injector, ordinal) for ordinal, builder in enumerate(builders)
            )
            for contract_type, builders in self._builders.items()
        }
        self._sealed = True

        for contract_type, contracts in compiled.items():
            logger.debug("Compiled %d contract(s) for %s", len(contracts), type_name(contract_type))
        return ContractSet(compiled)
