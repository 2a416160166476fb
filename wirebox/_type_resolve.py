"""
Signature inspection used by the container, the reflective `inject` front-end
and factory registration.
"""

from functools import lru_cache
from inspect import Parameter, Signature
from typing import Any, Callable, Sequence, Union, get_type_hints

from .config import CacheMax
from .errors import InvalidDependencyError

POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
MAX_FACTORY_ARITY = 2


def get_signature(call: Callable[..., Any]) -> Union[Signature, None]:
    try:
        return Signature.from_callable(call)
    except (TypeError, ValueError):
        # builtins implemented in C may not expose a signature
        return None


@lru_cache(CacheMax)
def get_class_signature(cls: type) -> Union[Signature, None]:
    return get_signature(cls)


def factory_arity(factory: Callable[..., Any]) -> int:
    """
    How many of `(resolver, runtime_values)` a factory accepts positionally.

    ```py
    container.bind("route", lambda: Route())                # 0
    container.bind("route", lambda resolver: Route())       # 1
    container.bind("route", lambda resolver, values: ...)   # 2
    ```
    """
    if not callable(factory):
        raise TypeError(f"factory {factory!r} is not callable")

    if (sig := get_signature(factory)) is None:
        return MAX_FACTORY_ARITY

    count = 0
    for param in sig.parameters.values():
        if param.kind is Parameter.VAR_POSITIONAL:
            return MAX_FACTORY_ARITY
        if param.kind in POSITIONAL:
            count += 1
    return min(count, MAX_FACTORY_ARITY)


def get_positional_types(
    func: Callable[..., Any], *, skip_first: bool = False
) -> list[Any]:
    """
    Reflect the annotated types of positional parameters, in order.
    Unannotated parameters are recorded as `object`.
    """
    if (sig := get_signature(func)) is None:
        return []

    try:
        hints = get_type_hints(func)
    except NameError as ne:
        raise InvalidDependencyError(
            func, f"Unable to resolve type hints of {func.__qualname__}, {ne}"
        ) from ne

    params = [p for p in sig.parameters.values() if p.kind in POSITIONAL]
    if skip_first:
        params = params[1:]
    return [hints.get(p.name, object) for p in params]


def merge_positional(reflected: Sequence[Any], overrides: Sequence[Any]) -> list[Any]:
    """
    An override at index i wins over the reflected type,
    `None` keeps the reflected type.
    """
    size = max(len(reflected), len(overrides))
    merged: list[Any] = []
    for i in range(size):
        override = overrides[i] if i < len(overrides) else None
        if override is not None:
            merged.append(override)
        else:
            merged.append(reflected[i] if i < len(reflected) else object)
    return merged


def unbindable_reason(call: Any, args: Sequence[Any]) -> Union[str, None]:
    """
    Returns why `call(*args)` can't be called, None if it can,
    or when the signature is not inspectable.
    """
    sig = get_class_signature(call) if isinstance(call, type) else get_signature(call)
    if sig is None:
        return None
    try:
        sig.bind(*args)
    except TypeError as te:
        return str(te)
    return None
