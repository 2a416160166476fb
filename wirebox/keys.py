"""
Binding keys are classified once, at the API boundary, into a closed
`BindingKey` variant. Everything past the boundary branches on `kind`.
"""

from typing import Any, Literal, Union

from .config import FrozenSlot
from .errors import InvalidAliasKeyError, InvalidBindingKeyError
from .utils.typing_utils import is_class, type_repr

KeyKind = Literal["string", "symbol", "class"]


class Symbol:
    """
    A unique, opaque binding identifier.
    Two symbols are only equal when they are the same object,
    regardless of their description.

    >>> ROUTE = Symbol("route")
    >>> container.bind(ROUTE, lambda: Route())
    """

    __slots__ = ("_description",)

    def __init__(self, description: str = ""):
        self._description = description

    @property
    def description(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return f"Symbol({self._description})"


class BindingKey(FrozenSlot):
    __slots__ = ("kind", "value")

    kind: KeyKind
    value: Union[str, Symbol, type]

    def __init__(self, kind: KeyKind, value: Union[str, Symbol, type]):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BindingKey):
            return False
        return self.kind == other.kind and self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"BindingKey({self.kind}, {self.describe()})"

    @property
    def is_class(self) -> bool:
        return self.kind == "class"

    def describe(self) -> str:
        if self.kind == "class":
            return type_repr(self.value)
        return repr(self.value)


def classify(value: Any) -> Union[BindingKey, None]:
    "Returns None when `value` is not an admissible binding key"
    if isinstance(value, BindingKey):
        return value
    if isinstance(value, str):
        return BindingKey("string", value)
    if isinstance(value, Symbol):
        return BindingKey("symbol", value)
    if is_class(value):
        return BindingKey("class", value)
    return None


def binding_key(value: Any) -> BindingKey:
    if (key := classify(value)) is None:
        raise InvalidBindingKeyError(value)
    return key


def alias_key(value: Any) -> BindingKey:
    key = classify(value)
    if key is None or key.is_class:
        raise InvalidAliasKeyError(value)
    return key

