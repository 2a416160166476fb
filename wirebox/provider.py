"""
Dependency provider protocol.

A class declares, per property, the ordered keys the container resolves and
passes positionally. The constructor uses the `_constructor` pseudo-property.

```py
class UserService:
    container_injections = {"_constructor": [Database], "notify": [Mailer]}
```

Declarations live in a side table keyed by class identity, looked up along
the MRO, so a subclass inherits its parents' declarations without sharing
a mutable static attribute with them.
"""

import logging
from asyncio import gather
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, Iterable, Union
from weakref import WeakKeyDictionary

from .config import INJECTIONS_ATTR, PROVIDER_ATTR
from .errors import InvalidDependencyError
from .interfaces import Injections, IProvider, IReflector, RuntimeValues
from .utils.param_utils import MISSING, is_provided, slot
from .utils.typing_utils import is_class, is_primitive_wrapper, type_repr

if TYPE_CHECKING:
    from .resolver import Resolver

logger = logging.getLogger(__name__)


class InjectionTable:
    """
    A mapping of classes to their declared injections.
    A declaration may be deferred, reflected on the first lookup,
    so annotations may refer to classes defined later in the module.
    """

    __slots__ = ("_mappings",)

    def __init__(self):
        self._mappings: "WeakKeyDictionary[type, Injections]" = WeakKeyDictionary()

    def __contains__(self, cls: type) -> bool:
        return cls in self._mappings

    def _own(self, cls: type) -> Injections:
        if not is_class(cls):
            raise InvalidDependencyError(
                cls, f"Injections can only be declared on classes, received {cls!r}"
            )
        return self._mappings.setdefault(cls, {})

    def declare(self, cls: type, property: str, keys: Iterable[Any]) -> None:
        self._own(cls)[property] = list(keys)

    def defer(self, cls: type, property: str, reflect: IReflector) -> None:
        self._own(cls)[property] = reflect

    def _reflected(self, own: Injections, property: str) -> list[Any]:
        if callable(entry := own[property]):
            entry = own[property] = list(entry())
        return entry

    def lookup(self, cls: type, property: str) -> Union[list[Any], None]:
        """
        Find the injections of `property`, the nearest class in the MRO wins,
        within a class the side table wins over a static `container_injections`.
        """
        for klass in getattr(cls, "__mro__", (cls,)):
            if (own := self._mappings.get(klass)) and property in own:
                return self._reflected(own, property).copy()

            static = klass.__dict__.get(INJECTIONS_ATTR)
            if isinstance(static, dict) and property in static:
                return list(static[property])  # type: ignore[arg-type]
        return None


injections = InjectionTable()


def declare(cls: type, property: str, keys: Iterable[Any]) -> None:
    """
    Explicitly declare the dependencies of a constructor or method.

    ```py
    declare(UserService, CONSTRUCTOR_KEY, [Database, "config"])
    ```
    """
    injections.declare(cls, property, keys)


def _check_injectable(binding: type, index: int, key: Any) -> None:
    if key is MISSING:
        raise InvalidDependencyError(
            key,
            f"Cannot inject position {index} of {type_repr(binding)}, "
            "no dependency declared and no runtime value provided",
        )
    if is_primitive_wrapper(key):
        raise InvalidDependencyError(key)


async def container_provider(
    binding: type,
    property: str,
    resolver: "Resolver",
    runtime_values: Union[RuntimeValues, None] = None,
) -> list[Any]:
    """
    The default provider.
    Runtime values win over declared keys for a given position,
    unfilled positions are resolved concurrently through the resolver.
    """
    values = list(runtime_values or ())
    declared = injections.lookup(binding, property) or []
    size = max(len(values), len(declared))

    plan = [
        value if is_provided(value := slot(values, i)) else slot(declared, i)
        for i in range(size)
    ]

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "created resolver plan. target: %s, property: %r, injections: %r",
            type_repr(binding),
            property,
            plan,
        )

    pending: dict[int, Any] = {}
    for i in range(size):
        if not is_provided(slot(values, i)):
            key = slot(declared, i)
            _check_injectable(binding, i, key)
            pending[i] = key

    if not pending:
        return plan

    resolved = await gather(
        *(resolver.resolve_for(binding, key) for key in pending.values())
    )
    for i, value in zip(pending, resolved):
        plan[i] = value
    return plan


async def provide(
    binding: type,
    property: str,
    resolver: "Resolver",
    runtime_values: Union[RuntimeValues, None] = None,
) -> list[Any]:
    """
    Hands control to the class level `container_provider` hook when defined,
    the hook receives the default provider so it may delegate.
    """
    custom: Union[IProvider, None] = getattr(binding, PROVIDER_ATTR, None)
    if custom is None:
        return await container_provider(binding, property, resolver, runtime_values)

    dependencies = custom(
        binding, property, resolver, container_provider, runtime_values
    )
    if isawaitable(dependencies):
        dependencies = await dependencies
    return list(dependencies)
