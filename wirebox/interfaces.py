from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Protocol,
    Sequence,
    Union,
)

from .utils.typing_utils import T

if TYPE_CHECKING:
    from .keys import Symbol
    from .resolver import Resolver

RawKey = Union[str, "Symbol", type]
"""
admissible binding identifiers, before being classified into a `BindingKey`
"""

RuntimeValues = Sequence[Any]

IFactory = Callable[..., Union[T, Awaitable[T]]]
"""
(resolver, runtime_values) -> T | Awaitable[T], trailing params may be omitted
"""

IHook = Callable[[T, "Resolver"], Union[None, Awaitable[None]]]

IReflector = Callable[[], list[Any]]
"""
reflects the dependency keys of a declaration on first lookup
"""

Injections = dict[str, Union[list[Any], IReflector]]
"""
### mapping a property name to the ordered dependency keys to resolve
"""


class IDefaultProvider(Protocol):
    def __call__(
        self,
        binding: type,
        property: str,
        resolver: "Resolver",
        runtime_values: Union[RuntimeValues, None] = None,
    ) -> Awaitable[list[Any]]: ...


class IProvider(Protocol):
    """
    A class level hook taking over dependency discovery for its constructor and methods.
    """

    def __call__(
        self,
        binding: type,
        property: str,
        resolver: "Resolver",
        default_provider: IDefaultProvider,
        runtime_values: Union[RuntimeValues, None] = None,
    ) -> Union[list[Any], Awaitable[list[Any]]]: ...


class IEmitter(Protocol):
    def emit(self, event: str, payload: dict[str, Any]) -> Any: ...


class IModuleLoader(Protocol):
    """
    Returns a module-like object exposing a `default` attribute.
    """

    def __call__(self) -> Union[Any, Awaitable[Any]]: ...
