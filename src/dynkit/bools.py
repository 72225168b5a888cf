"""Conversions between ``bool`` and the other standard value types.

``to_*`` map ``True`` / ``False`` to ``1`` / ``0`` (``"true"`` / ``"false"``
for strings); ``from_*`` treat any non-zero number as true.  ``from_string``
is strict: only ``"true"`` is true.  For lenient parsing use
``convert.to_bool``.
"""

from __future__ import annotations

import numpy as np

from .core import Booler


def to_float32(b: bool) -> np.float32:
    return np.float32(1 if b else 0)


def to_float64(b: bool) -> float:
    return 1.0 if b else 0.0


def to_int(b: bool) -> int:
    return 1 if b else 0


def to_int32(b: bool) -> np.int32:
    return np.int32(1 if b else 0)


def to_int64(b: bool) -> np.int64:
    return np.int64(1 if b else 0)


def to_string(b: bool) -> str:
    return "true" if b else "false"


def from_float32(v: np.float32) -> bool:
    return bool(v != 0)


def from_float64(v: float) -> bool:
    return bool(v != 0)


def from_int(v: int) -> bool:
    return bool(v != 0)


def from_int32(v: np.int32) -> bool:
    return bool(v != 0)


def from_int64(v: np.int64) -> bool:
    return bool(v != 0)


def from_string(v: str) -> bool:
    return v == "true"


def from_booler(b: Booler) -> bool:
    """The boolean a ``Booler`` reports for itself."""
    return bool(b.to_bool())
