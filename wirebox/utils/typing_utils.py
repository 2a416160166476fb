from datetime import date, datetime
from types import FunctionType
from typing import Any, TypeVar

from typing_extensions import TypeGuard

T = TypeVar("T")


PrimitiveBuiltins = (int, float, complex, str, bool, bytes, bytearray, type)
"""
builtin types that are never auto-constructed by the container
"""

WrapperBuiltins = (object, date, datetime, FunctionType)


def is_class(t: Any) -> TypeGuard[type]:
    return isinstance(t, type)


def is_builtin_primitive(t: Any) -> bool:
    return t in PrimitiveBuiltins


def is_primitive_wrapper(t: Any) -> bool:
    """
    Primitive wrappers can't be meaningfully injected,
    a runtime value must be provided for them instead.
    """
    return is_builtin_primitive(t) or t in WrapperBuiltins


def type_repr(t: Any) -> str:
    if isinstance(t, type):
        return f"[class {t.__qualname__}]"
    return repr(t)
