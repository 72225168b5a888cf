"""Fixed-width numeric casts.

Python integers are unbounded and Python floats are always 64-bit; the
destinations robust assignment writes into may be narrower (``numpy.int8``,
``numpy.uint32``, ``numpy.float32``, …).  These helpers perform the casts the
way a fixed-width language does: integers wrap around, floats round to the
nearest representable value (overflowing to infinity).
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .kinds import runtime_class

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def wrap_int64(n: int) -> int:
    """Reinterpret an arbitrary integer as a signed 64-bit two's-complement value."""
    return ((n - INT64_MIN) % (1 << 64)) + INT64_MIN


def narrow_float32(x: Any) -> np.float32:
    """Round *x* to 32-bit precision; out-of-range magnitudes become infinite."""
    with np.errstate(over="ignore"):
        return np.float32(x)


def convert_int(n: int, tp: Any) -> Any:
    """Narrow or widen the signed 64-bit value *n* to the integer type *tp*.

    numpy integer types wrap around (``-1`` → ``numpy.uint8(255)``); other
    integer classes are constructed directly and may reject the value.
    """
    cls = runtime_class(tp) or int
    if issubclass(cls, np.integer):
        return np.int64(n).astype(cls)
    return cls(n)


def convert_float(x: float, tp: Any) -> Any:
    """Narrow or widen *x* to the float type *tp*."""
    cls = runtime_class(tp) or float
    if issubclass(cls, np.floating):
        with np.errstate(over="ignore"):
            return cls(x)
    return cls(x)
