from __future__ import annotations


class ResolutionError(RuntimeError):
    """Raised when a dependency request cannot be satisfied."""


class UnresolvableTypeError(ResolutionError):
    pass


class MissingConstructorError(ResolutionError):
    pass


class AmbiguousConstructorError(ResolutionError):
    pass


class CircularDependencyError(ResolutionError):
    pass


class ConfigurationError(ValueError):
    """Raised when bindings are declared or compiled incorrectly."""
