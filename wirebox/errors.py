from typing import Any, Sequence

from .utils.typing_utils import type_repr


class ContainerError(Exception):
    """
    Base class for all wirebox exceptions.
    """

    code: str = "E_CONTAINER"

    def __init__(self, message: str, /):
        self.message = message
        super().__init__(self.message)


# =============== Registration Errors ===============


class RegistrationError(ContainerError):
    """
    Base class for errors raised while registering bindings.
    """


class InvalidBindingKeyError(RegistrationError):
    code = "E_INVALID_BINDING_KEY"

    def __init__(self, key: Any):
        self.key = key
        super().__init__(
            f"The container binding key must be of type 'string', 'symbol', or a 'class constructor', received {key!r}"
        )


class InvalidAliasKeyError(RegistrationError):
    code = "E_INVALID_ALIAS_KEY"

    def __init__(self, alias: Any, reason: str = ""):
        self.alias = alias
        msg = (
            reason
            or f"The container alias key must be of type 'string' or 'symbol', received {alias!r}"
        )
        super().__init__(msg)


class MissingContextualTargetError(RegistrationError):
    code = "E_MISSING_CONTEXTUAL_TARGET"

    def __init__(self, parent: type):
        self.parent = parent
        super().__init__(
            f"Missing value for contextual binding of {type_repr(parent)}. "
            "Call 'asks_for' method before calling the 'provide' method"
        )


# =============== Resolve Errors ===============


class ResolveError(ContainerError):
    """
    Base class for errors raised while making a binding.
    """


class InvalidDependencyError(ResolveError):
    """
    Raised when a dependency is not a class, or is a primitive wrapper
    that can't be constructed by the container.
    """

    code = "E_INVALID_CONTAINER_DEPENDENCY"

    def __init__(self, value: Any, reason: str = ""):
        self.value = value
        super().__init__(
            reason
            or f"Cannot inject {type_repr(value)}. The value cannot be constructed"
        )


class CannotConstructValueError(ResolveError):
    code = "E_CANNOT_CONSTRUCT_VALUE"

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Cannot construct value {value!r} using the container. "
            "Only registered bindings and classes can be made"
        )


class CannotConstructDependenciesError(ResolveError):
    code = "E_CANNOT_CONSTRUCT_DEPENDENCIES"

    def __init__(self, binding: Any, reason: str, *, method: str = ""):
        self.binding = binding
        self.method = method
        if method:
            target = f"call '{binding.__qualname__}.{method}' method"
        else:
            target = f"construct {type_repr(binding)}"
        super().__init__(
            f"Cannot {target}. Container is not able to resolve its dependencies, {reason}"
        )


class MethodNotFoundError(ResolveError):
    code = "E_METHOD_NOT_FOUND"

    def __init__(self, target: Any, method: str):
        self.target = target
        self.method = method
        super().__init__(
            f"Missing method {method!r} on {type_repr(type(target))}"
        )


class MissingDefaultExportError(ResolveError):
    code = "E_MISSING_DEFAULT_EXPORT"

    def __init__(self, loader: Any):
        self.loader = loader
        super().__init__(
            f"Missing 'default' export in module loaded by {loader!r}"
        )


class CyclicDependencyError(ResolveError):
    """Raised when a binding depends on itself, directly or transitively."""

    code = "E_CYCLIC_DEPENDENCY"

    def __init__(self, cycle_path: Sequence[Any]):
        self._cycle_path = list(cycle_path)
        cycle_str = " -> ".join(
            getattr(k, "__name__", None) or repr(k) for k in self._cycle_path
        )
        super().__init__(f"Circular dependency detected: {cycle_str}")

    @property
    def cycle_path(self) -> list[Any]:
        return self._cycle_path
