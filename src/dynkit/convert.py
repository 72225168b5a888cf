"""Best-effort conversion of any value to a primitive.

``to_bool``, ``to_int``, ``to_float`` and ``to_float32`` return
``(value, ok)``; ``ok`` is ``False`` when the input could not be interpreted,
and the value is then the zero value.  ``to_string`` and ``to_string_prec``
always produce text.

Each function resolves its input in three tiers:

1. **Fast path**: a table lookup on the *exact* class of the value (or of
   the value held by a one-level ``Ref``): ``bool``, ``int``,
   ``numpy.int32``, ``numpy.int64``, ``numpy.uint8``, ``float``,
   ``numpy.float64``, ``numpy.float32``, ``str``.  ``to_string`` also
   renders byte strings as text and ``ctypes.c_void_p`` addresses in hex.
2. **Capability**, probed on the value or the value one ``Ref`` holds:
   ``Inter`` / ``__index__`` / ``__int__`` for ``to_int``,
   ``Floater`` / ``__float__`` for the float conversions, a class-defined
   ``__str__`` for the string conversions.  ``to_bool`` has no capability
   tier.
3. **Kind fallback**: nil inputs fail (``"nil"`` for strings); otherwise
   every reference level is followed and the value is handled by kind.
   Strings are parsed with the grammars in ``parse``.

WARNING: none of this is type safe, on purpose.  It is meant for values that
come from end users and configuration, where ``"3"`` and ``3`` should mean
the same thing.
"""

from __future__ import annotations

import ctypes
import math
import operator
import typing
from typing import Any, Callable, Dict, Tuple

import numpy as np

from .core import Floater, Inter, Ref, is_stringer
from .formatting import format_complex, format_float
from .kinds import Kind, is_nil, kind_of
from .numeric import INT64_MAX, INT64_MIN, narrow_float32, wrap_int64
from .parse import parse_bool, parse_float, parse_int
from .refs import non_ref_value

_BYTES_TYPES = (bytes, bytearray, memoryview)


def _one_level(it: Any) -> Any:
    """The value itself, or the value held by a ``Ref`` (by-reference form)."""
    return it.get() if isinstance(it, Ref) else it


def _text(value: Any) -> str:
    """Plain ``str`` content of a ``str`` (sub)class instance."""
    return str.__str__(value)


def _truncate(x: float) -> int:
    """Truncate toward zero into the signed 64-bit range."""
    if not math.isfinite(x):
        raise ValueError(f"cannot truncate {x!r} to an integer")
    n = int(x)
    if not INT64_MIN <= n <= INT64_MAX:
        raise ValueError(f"{x!r} is out of 64-bit integer range")
    return n


def _bytes_text(value: Any) -> str:
    return bytes(value).decode("utf-8", errors="replace")


# ─────────────────────────────────────────────────────────────────────────────
# to_bool
# ─────────────────────────────────────────────────────────────────────────────


def _bool_of_text(s: str) -> Tuple[bool, bool]:
    try:
        return parse_bool(s), True
    except ValueError:
        return False, False


def _nonzero(v: Any) -> Tuple[bool, bool]:
    return bool(v != 0), True


_BOOL_FAST: Dict[type, Callable[[Any], Tuple[bool, bool]]] = {
    bool: lambda v: (v, True),
    int: _nonzero,
    np.int32: _nonzero,
    np.int64: _nonzero,
    np.uint8: _nonzero,
    float: _nonzero,
    np.float64: _nonzero,
    np.float32: _nonzero,
    str: _bool_of_text,
}


def to_bool(it: Any) -> Tuple[bool, bool]:
    """Robustly convert anything to a ``bool``.

    Numbers are true when non-zero; strings must be canonical boolean
    literals (``"true"``, ``"F"``, ``"1"``, …); ``"yes"`` is not one.
    """
    target = _one_level(it)
    fast = _BOOL_FAST.get(type(target))
    if fast is not None:
        return fast(target)

    if is_nil(it):
        return False, False
    v = non_ref_value(it)
    kind = kind_of(v)
    if kind in (Kind.INT, Kind.UINT):
        return int(v) != 0, True
    if kind == Kind.BOOL:
        return bool(v), True
    if kind == Kind.FLOAT:
        return float(v) != 0.0, True
    if kind == Kind.COMPLEX:
        return complex(v).real != 0.0, True
    if kind == Kind.STRING:
        return _bool_of_text(_text(v))
    return False, False


# ─────────────────────────────────────────────────────────────────────────────
# to_int
# ─────────────────────────────────────────────────────────────────────────────


def _int_of_text(s: str) -> Tuple[int, bool]:
    try:
        return parse_int(s), True
    except ValueError:
        return 0, False


def _int_of_float(x: Any) -> Tuple[int, bool]:
    try:
        return _truncate(float(x)), True
    except ValueError:
        return 0, False


_INT_FAST: Dict[type, Callable[[Any], Tuple[int, bool]]] = {
    bool: lambda v: (1 if v else 0, True),
    int: lambda v: (wrap_int64(v), True),
    np.int32: lambda v: (int(v), True),
    np.int64: lambda v: (int(v), True),
    np.uint8: lambda v: (int(v), True),
    float: _int_of_float,
    np.float64: _int_of_float,
    np.float32: _int_of_float,
    str: _int_of_text,
}


def to_int(it: Any) -> Tuple[int, bool]:
    """Robustly convert anything to a signed 64-bit ``int``.

    Floats are truncated toward zero (NaN, infinities and values outside
    the 64-bit range fail, whatever their float type), unsigned
    values are reinterpreted as signed, strings are parsed with their base
    prefix (``"0x1F"`` → ``31``).  ``Inter.to_int`` and the ``__index__`` /
    ``__int__`` protocols are honoured.
    """
    target = _one_level(it)
    fast = _INT_FAST.get(type(target))
    if fast is not None:
        return fast(target)

    if is_nil(it):
        return 0, False
    try:
        if isinstance(target, Inter):
            return wrap_int64(int(target.to_int())), True
        if kind_of(target) == Kind.FLOAT:
            return _int_of_float(target)
        if isinstance(target, typing.SupportsIndex):
            return wrap_int64(operator.index(target)), True
        if isinstance(target, typing.SupportsInt):
            n = int(target)
            if not INT64_MIN <= n <= INT64_MAX:
                return 0, False
            return n, True
    except (TypeError, ValueError, OverflowError):
        return 0, False

    v = non_ref_value(it)
    kind = kind_of(v)
    if kind in (Kind.INT, Kind.UINT):
        return wrap_int64(int(v)), True
    if kind == Kind.BOOL:
        return (1 if v else 0), True
    if kind == Kind.FLOAT:
        return _int_of_float(v)
    if kind == Kind.COMPLEX:
        return _int_of_float(complex(v).real)
    if kind == Kind.STRING:
        return _int_of_text(_text(v))
    return 0, False


# ─────────────────────────────────────────────────────────────────────────────
# to_float / to_float32
# ─────────────────────────────────────────────────────────────────────────────


def _float_of_text(s: str) -> Tuple[float, bool]:
    try:
        return parse_float(s), True
    except ValueError:
        return 0.0, False


_FLOAT_FAST: Dict[type, Callable[[Any], Tuple[float, bool]]] = {
    bool: lambda v: (1.0 if v else 0.0, True),
    int: lambda v: (float(v), True),
    np.int32: lambda v: (float(v), True),
    np.int64: lambda v: (float(v), True),
    np.uint8: lambda v: (float(v), True),
    float: lambda v: (v, True),
    np.float64: lambda v: (float(v), True),
    np.float32: lambda v: (float(v), True),
    str: _float_of_text,
}


def _float_fallback(it: Any) -> Tuple[float, bool]:
    """Capability and kind tiers shared by ``to_float`` and ``to_float32``."""
    if is_nil(it):
        return 0.0, False
    target = _one_level(it)
    try:
        if isinstance(target, Floater):
            return float(target.to_float()), True
        if isinstance(target, typing.SupportsFloat):
            return float(target), True
    except (TypeError, ValueError, OverflowError):
        return 0.0, False

    v = non_ref_value(it)
    kind = kind_of(v)
    if kind in (Kind.INT, Kind.UINT):
        return float(int(v)), True
    if kind == Kind.BOOL:
        return (1.0 if v else 0.0), True
    if kind == Kind.FLOAT:
        return float(v), True
    if kind == Kind.COMPLEX:
        return complex(v).real, True
    if kind == Kind.STRING:
        return _float_of_text(_text(v))
    return 0.0, False


def to_float(it: Any) -> Tuple[float, bool]:
    """Robustly convert anything to a 64-bit ``float``.

    Complex values contribute their real part; strings are parsed as decimal,
    scientific or hexadecimal literals.  ``Floater.to_float`` and
    ``__float__`` are honoured.
    """
    target = _one_level(it)
    fast = _FLOAT_FAST.get(type(target))
    if fast is not None:
        return fast(target)
    return _float_fallback(it)


def to_float32(it: Any) -> Tuple[np.float32, bool]:
    """Robustly convert anything to ``numpy.float32``.

    Same rules as ``to_float`` with the result rounded to 32 bits; strings
    are parsed directly at 32-bit precision.
    """
    target = _one_level(it)
    if type(target) is str:
        try:
            return parse_float(target, bits=32), True
        except ValueError:
            return np.float32(0.0), False
    if type(target) is np.float32:
        return target, True
    fast = _FLOAT_FAST.get(type(target))
    value, ok = fast(target) if fast is not None else _float_fallback(it)
    return narrow_float32(value), ok


# ─────────────────────────────────────────────────────────────────────────────
# to_string / to_string_prec
# ─────────────────────────────────────────────────────────────────────────────


_STRING_FAST: Dict[type, Callable[[Any], str]] = {
    str: lambda v: v,
    bool: lambda v: "true" if v else "false",
    int: lambda v: str(v),
    np.int32: lambda v: str(int(v)),
    np.int64: lambda v: str(int(v)),
    np.uint8: lambda v: str(int(v)),
    float: lambda v: format_float(v),
    np.float64: lambda v: format_float(v),
    np.float32: lambda v: format_float(v, bits=32),
    bytes: _bytes_text,
    bytearray: _bytes_text,
    memoryview: _bytes_text,
    ctypes.c_void_p: lambda v: hex(v.value or 0),
}


def _string_by_kind(v: Any, prec: int) -> str:
    kind = kind_of(v)
    if kind in (Kind.INT, Kind.UINT):
        return str(int(v))
    if kind == Kind.BOOL:
        return "true" if v else "false"
    if kind == Kind.FLOAT:
        return format_float(v, prec)
    if kind == Kind.COMPLEX:
        return format_complex(v, prec)
    if kind == Kind.STRING:
        return _text(v)
    if kind == Kind.INVALID:
        return "nil"
    if isinstance(v, _BYTES_TYPES):
        return _bytes_text(v)
    return str(v)


def to_string(it: Any) -> str:
    """Robustly convert anything to a ``str``.  Never fails.

    Integers print in base 10, floats in shortest ``'G'`` form (``1E+06``,
    ``0.1``), complex values as ``"real,imag"``, byte strings as their
    UTF-8 text, nil as ``"nil"``.  Anything else falls back to ``str()``.
    """
    target = _one_level(it)
    fast = _STRING_FAST.get(type(target))
    if fast is not None:
        return fast(target)

    if is_stringer(target):
        return str(target)
    if is_nil(it):
        return "nil"
    return _string_by_kind(non_ref_value(it), -1)


def to_string_prec(it: Any, prec: int) -> str:
    """``to_string`` with floats rounded to *prec* significant digits.

    ``to_string_prec(0.1 + 0.2, 6)`` → ``"0.3"`` where ``to_string`` gives
    ``"0.30000000000000004"``.  There is no fast-path tier.
    """
    if is_nil(it):
        return "nil"
    target = _one_level(it)
    if is_stringer(target):
        return str(target)
    return _string_by_kind(non_ref_value(it), prec)
