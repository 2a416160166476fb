from dataclasses import FrozenInstanceError
from typing import TYPE_CHECKING, Any, Final, Union

if TYPE_CHECKING:
    from .interfaces import IEmitter


class FrozenSlot:
    """
    Base for immutable records, such as `BindingKey` and `ContainerConfig`.
    Equality, hash and repr are derived from the values of `__slots__`,
    assigning after `__init__` raises `FrozenInstanceError`.
    """

    __slots__: tuple[str, ...] = ()

    def _fields(self) -> tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self.__slots__)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, self.__class__) and self._fields() == other._fields()

    def __hash__(self) -> int:
        return hash(self._fields())

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{name}={value!r}" for name, value in zip(self.__slots__, self._fields())
        )
        return f"{self.__class__.__name__}({fields})"

    def __setattr__(self, name: str, value: Any) -> None:
        raise FrozenInstanceError(
            f"cannot assign to {name!r}, {self.__class__.__name__} is frozen"
        )

    def __delattr__(self, name: str) -> None:
        raise FrozenInstanceError(
            f"cannot delete {name!r}, {self.__class__.__name__} is frozen"
        )


class ContainerConfig(FrozenSlot):
    """
    emitter
    ---
    optional event sink, receives `container:resolve` for every fresh construction
    """

    __slots__ = ("emitter",)

    emitter: Union["IEmitter", None]

    def __init__(self, *, emitter: Union["IEmitter", None] = None):
        if emitter is not None and not callable(getattr(emitter, "emit", None)):
            raise TypeError(f"emitter {emitter!r} must define an `emit` method")
        object.__setattr__(self, "emitter", emitter)

    def __hash__(self) -> int:
        return hash(id(self.emitter))


CacheMax: Final[int] = 1024
CONSTRUCTOR_KEY: Final[str] = "_constructor"
RESOLVE_EVENT: Final[str] = "container:resolve"
INJECTIONS_ATTR: Final[str] = "container_injections"
PROVIDER_ATTR: Final[str] = "container_provider"
