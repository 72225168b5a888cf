"""Core abstractions: references, capabilities, and the type-name registry.

This module owns every *interface* in the system.  Nothing here depends on a
concrete implementation; the concrete references live in ``refs``, the
conversion engine in ``convert`` / ``robust``, and the default registry in
``typereg``.

Conversion flow (``set_robust`` entry point)::

    destination (Ref or mutable object)
      │
      ▼
    as_ref(to) → Ref                       ← settable location + static type
      │
      ▼
    kind_of_type(ref.type)                 ← dispatch on destination kind
      │
      ├── basic kinds → to_int / to_bool / to_float / to_string
      │                   └── fast path → capability probe → kind fallback
      └── containers  → JSON decode (text source) or robust copy
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

import numpy as np


# ─────────────────────────────────────────────────────────────────────────────
# Ref: settable location abstraction
# ─────────────────────────────────────────────────────────────────────────────


class Ref(ABC):
    """Abstract interface for a location that can be read and written.

    A ``Ref`` is the Python stand-in for a pointer: it carries the *static*
    type of the location (what may be stored there) independently of the
    value currently stored.  Robust assignment converts the source into
    ``type`` and writes it through ``set``.

    Default implementations: ``refs.Var``, ``refs.AttrRef``, ``refs.ItemRef``,
    ``refs.InPlaceRef``.
    """

    @property
    @abstractmethod
    def type(self) -> Any:
        """Static type of the location (a class or a ``typing`` annotation)."""

    @abstractmethod
    def get(self) -> Any:
        """Return the value currently stored at the location."""

    @abstractmethod
    def set(self, value: Any) -> None:
        """Store *value* at the location.  No conversion is performed."""

    @property
    def settable(self) -> bool:
        """Whether ``set`` is allowed.

        Default: ``True``.  Override for locations that may be read-only
        (frozen objects, tuples, properties without a setter, …).
        """
        return True


# ─────────────────────────────────────────────────────────────────────────────
# Capabilities: optional interfaces probed before generic introspection
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class Booler(Protocol):
    """A value that can report itself as a boolean."""

    def to_bool(self) -> bool: ...


@runtime_checkable
class BoolSetter(Booler, Protocol):
    """A ``Booler`` that can also be set from a boolean."""

    def set_bool(self, val: bool) -> None: ...


@runtime_checkable
class Inter(Protocol):
    """A value that can report itself as an integer."""

    def to_int(self) -> int: ...


@runtime_checkable
class Floater(Protocol):
    """A value that can report itself as a float."""

    def to_float(self) -> float: ...


# ``__str__`` slots of the value types themselves; classes that only inherit
# one of these have no textual representation of their own.
_VALUE_STRS = frozenset({
    object.__str__,
    int.__str__,
    float.__str__,
    complex.__str__,
    str.__str__,
    bytes.__str__,
})


def is_stringer(value: Any) -> bool:
    """Return True if *value*'s class defines its own ``__str__``.

    numpy scalars are basic values, not stringers, even though numpy gives
    each scalar type a ``__str__``.
    """
    if isinstance(value, np.generic):
        return False
    return type(value).__str__ not in _VALUE_STRS


# ─────────────────────────────────────────────────────────────────────────────
# TypeRegistry: name ↔ type lookup used by ``typereg.RegisteredType``
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class TypeRegistry(Protocol):
    """Name ↔ type lookup consumed by the type-descriptor wrapper.

    Default implementation: ``typereg.Types``.
    """

    def type(self, name: str) -> Optional[Any]:
        """Return the type registered under *name*, or ``None``."""

    def type_name(self, tp: Any) -> str:
        """Return the registry-qualified short name of *tp*."""
