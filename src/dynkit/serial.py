"""msgspec hooks and JSON rendering for diagnostics.

msgspec natively handles builtins, dataclasses and ``msgspec.Struct``s; the
hooks here teach it the remaining value types the library deals in:

* numpy scalars and arrays → their Python equivalents
* ``Ref`` → the value it currently holds
* ``complex`` → ``[real, imag]``
* ``RegisteredType`` → its short type name (or ``null``)
"""

from __future__ import annotations

from typing import Any

import msgspec
import numpy as np

from .core import Ref
from .errors import UnknownTypeNameError
from .typereg import RegisteredType


def enc_hook(obj: Any) -> Any:
    """msgspec ``enc_hook`` for values msgspec does not encode natively."""
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Ref):
        return obj.get()
    if isinstance(obj, complex):
        return [obj.real, obj.imag]
    if isinstance(obj, RegisteredType):
        return obj.to_builtin()
    raise NotImplementedError(f"Objects of type {type(obj).__name__} are not supported")


def dec_hook(tp: Any, obj: Any) -> Any:
    """msgspec ``dec_hook`` building numpy scalars and ``RegisteredType``s.

    Failures are raised as ``ValueError`` so msgspec reports them as
    ``ValidationError`` with the path of the offending field.
    """
    if isinstance(tp, type) and issubclass(tp, np.generic):
        try:
            return tp(obj)
        except OverflowError as exc:
            raise ValueError(str(exc)) from None
    if tp is RegisteredType:
        try:
            return RegisteredType.from_builtin(obj)
        except UnknownTypeNameError as exc:
            raise ValueError(str(exc)) from None
    raise NotImplementedError(f"Objects of type {tp!r} are not supported")


def example_json(it: Any) -> str:
    """Compact JSON of *it*, or its ``repr`` when it is not encodable."""
    try:
        return msgspec.json.encode(it, enc_hook=enc_hook).decode()
    except (TypeError, ValueError, NotImplementedError, OverflowError):
        return repr(it)


def string_json(it: Any) -> str:
    """Indented JSON of *it* for debugging; falls back to ``repr``."""
    try:
        encoded = msgspec.json.encode(it, enc_hook=enc_hook)
    except (TypeError, ValueError, NotImplementedError, OverflowError):
        return repr(it)
    return msgspec.json.format(encoded, indent=2).decode()
