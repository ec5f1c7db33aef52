"""Boxed/primitive type pairs used for signature coercion.

ctypes simple types are Python's boxed primitives: a ``c_int`` wraps an
``int`` the same way a ``c_double`` wraps a ``float``. A capability declared
with boxed parameters must still resolve against primitive arguments and
vice versa, so signature matching can normalise both sides to primitives
and convert arguments at call time.
"""

from __future__ import annotations

import ctypes
from collections.abc import Callable
from typing import Any

BOXED_TO_PRIMITIVE: dict[type, type] = {
    ctypes.c_bool: bool,
    ctypes.c_byte: int,
    ctypes.c_ubyte: int,
    ctypes.c_short: int,
    ctypes.c_ushort: int,
    ctypes.c_int: int,
    ctypes.c_uint: int,
    ctypes.c_long: int,
    ctypes.c_ulong: int,
    ctypes.c_longlong: int,
    ctypes.c_ulonglong: int,
    ctypes.c_float: float,
    ctypes.c_double: float,
    ctypes.c_longdouble: float,
    ctypes.c_char: bytes,
    ctypes.c_char_p: bytes,
    ctypes.c_wchar: str,
    ctypes.c_wchar_p: str,
}

# Preferred box when a primitive argument meets a boxed parameter of unknown width.
PRIMITIVE_TO_BOXED: dict[type, type] = {
    bool: ctypes.c_bool,
    int: ctypes.c_longlong,
    float: ctypes.c_double,
    bytes: ctypes.c_char_p,
    str: ctypes.c_wchar_p,
}


def is_boxed(tp: Any) -> bool:
    return isinstance(tp, type) and tp in BOXED_TO_PRIMITIVE


def to_primitive(tp: Any) -> Any:
    """Map a boxed type to its primitive counterpart; other types pass through."""
    if is_boxed(tp):
        return BOXED_TO_PRIMITIVE[tp]
    return tp


def to_primitives(signature: tuple[Any, ...]) -> tuple[Any, ...]:
    return tuple(to_primitive(tp) for tp in signature)


def unbox(value: Any) -> Any:
    """Return the primitive held by a boxed *value*, or *value* unchanged."""
    if type(value) in BOXED_TO_PRIMITIVE:
        return value.value
    return value


def coercer(arg_type: Any, param_type: Any) -> Callable[[Any], Any] | None:
    """Return a converter from *arg_type* values to *param_type*, if one is needed."""
    if is_boxed(arg_type) and not is_boxed(param_type):
        return unbox
    if is_boxed(param_type) and not is_boxed(arg_type):
        box = param_type

        def _box(value: Any) -> Any:
            return value if value is None or isinstance(value, box) else box(value)

        return _box
    return None
