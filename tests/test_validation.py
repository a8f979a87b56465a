import unittest
from typing import Protocol, runtime_checkable

import pytest

from bindery import InjectorConfiguration, ResolutionError


class TestRuntimeProtocolNonConformance(unittest.TestCase):
    config: InjectorConfiguration

    @runtime_checkable
    class RepoProtocol(Protocol):
        def get(self) -> int: ...

    class BadRepo:
        # Missing `get`, does not conform to RepoProtocol
        def other(self) -> str:
            return "nope"

    def setUp(self):
        self.config = InjectorConfiguration()

    def test_resolve_raises_when_factory_returns_non_conforming_instance(self):
        self.config.bind(self.RepoProtocol).to_factory(lambda: self.BadRepo())
        injector = self.config.build_injector()

        # factory path does not raise at bind time, but fails at resolution.
        with pytest.raises(ResolutionError):
            injector.resolve(self.RepoProtocol)

    def test_bind_instance_raises_type_error_for_non_conforming_instance(self):
        with pytest.raises(TypeError):
            self.config.bind(self.RepoProtocol).to_instance(self.BadRepo())

    def test_bind_raises_type_error_for_non_conforming_class(self):
        with pytest.raises(TypeError):
            self.config.bind(self.RepoProtocol).to(self.BadRepo)


class TestRuntimeProtocolConformance(unittest.TestCase):
    config: InjectorConfiguration

    @runtime_checkable
    class RepoProtocol(Protocol):
        def get(self) -> int: ...

    class GoodRepo:
        def get(self) -> int:
            return 42

    def setUp(self):
        self.config = InjectorConfiguration()

    def test_resolve_succeeds_when_factory_returns_conforming_instance(self):
        self.config.bind(self.RepoProtocol).to_factory(lambda: self.GoodRepo())

        repo = self.config.build_injector().resolve(self.RepoProtocol)

        assert isinstance(repo, self.GoodRepo)
        assert repo.get() == 42

    def test_bind_instance_succeeds_for_conforming_instance(self):
        repo = self.GoodRepo()

        self.config.bind(self.RepoProtocol).to_instance(repo)
        resolved = self.config.build_injector().resolve(self.RepoProtocol)

        assert resolved is repo
        assert resolved.get() == 42

    def test_bind_succeeds_for_conforming_class(self):
        self.config.bind(self.RepoProtocol).to(self.GoodRepo)

        repo = self.config.build_injector().resolve(self.RepoProtocol)

        assert isinstance(repo, self.GoodRepo)
        assert repo.get() == 42


class TestRuntimeProtocolSignatureNonConformance(unittest.TestCase):
    config: InjectorConfiguration

    @runtime_checkable
    class RepoProtocol(Protocol):
        def get(self, key: str) -> int: ...

    def setUp(self):
        self.config = InjectorConfiguration()

    def test_bind_raises_type_error_for_method_with_wrong_arity(self):
        class GetNoArgs:
            # Wrong arity: missing an argument
            def get(self) -> int:
                return 1

        with pytest.raises(TypeError):
            self.config.bind(self.RepoProtocol).to(GetNoArgs)

    def test_bind_instance_raises_type_error_for_non_callable_attribute(self):
        class GetIsNotCallable:
            # Attribute exists but is not callable
            get = 123

        with pytest.raises(TypeError):
            self.config.bind(self.RepoProtocol).to_instance(GetIsNotCallable())

    def test_resolve_raises_when_factory_returns_wrong_arity_instance(self):
        class GetNoArgs:
            def get(self) -> int:
                return 1

        self.config.bind(self.RepoProtocol).to_factory(lambda: GetNoArgs())

        # runtime checkable isinstance only checks presence, not arity
        assert isinstance(self.config.build_injector().resolve(self.RepoProtocol), GetNoArgs)

    def test_bind_raises_type_error_for_wrong_return_type(self):
        class GetReturnsWrongType:
            # Return type mismatch
            def get(self, key: str) -> str:
                return "not an int"

        with pytest.raises(TypeError):
            self.config.bind(self.RepoProtocol).to(GetReturnsWrongType)


class TestBindTargetConstraints(unittest.TestCase):
    config: InjectorConfiguration

    def setUp(self):
        self.config = InjectorConfiguration()

    def test_bind_requires_target_to_be_subclass_of_concrete_type(self):
        class Base: ...

        class NotDerived: ...

        with pytest.raises(TypeError):
            self.config.bind(Base).to(NotDerived)  # Not a subclass of Base

    def test_bind_requires_class_target(self):
        class Base: ...

        with pytest.raises(TypeError):
            self.config.bind(Base).to(Base())

    def test_bind_any_class_to_empty_protocol_succeeds(self):
        class EmptyProto(Protocol): ...

        class AnyClass: ...

        self.config.bind(EmptyProto).to(AnyClass)

        resolved = self.config.build_injector().resolve(EmptyProto)
        assert isinstance(resolved, AnyClass)

    def test_bind_requires_target_to_structurally_conform_to_protocol(self):
        class Fooer(Protocol):
            def foo(self) -> None: ...

        class FooerImpl:
            def foo(self) -> None:
                pass

        self.config.bind(Fooer).to(FooerImpl)

        resolved = self.config.build_injector().resolve(Fooer)
        assert isinstance(resolved, FooerImpl)

    def test_bind_none_instance_raises_value_error(self):
        class Base: ...

        with pytest.raises(ValueError, match="None"):
            self.config.bind(Base).to_instance(None)

    def test_bind_non_callable_factory_raises_type_error(self):
        class Base: ...

        with pytest.raises(TypeError):
            self.config.bind(Base).to_factory("not callable")
