from typing import Any, Literal, Sequence, Union

from typing_extensions import TypeGuard

from .typing_utils import T


class _Unfilled:
    """
    Marks a runtime value slot the container has to fill.
    Unlike `None`, which is passed through as a value.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> Literal[False]:
        return False


MISSING = _Unfilled()


Maybe = Union[T, _Unfilled]
"""
a value, or MISSING when it was never given
"""


def is_provided(value: Maybe[T]) -> TypeGuard[T]:
    return value is not MISSING


def slot(values: Sequence[Any], index: int) -> Any:
    "values[index], or MISSING when the slot is out of range"
    if index < len(values):
        return values[index]
    return MISSING
