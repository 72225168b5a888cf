"""Kind classification, nil probing, and static-type introspection.

A *kind* is the coarse runtime category of a value or a type: boolean,
signed / unsigned integer, float, complex, string, sequence, mapping,
struct-like aggregate, reference, function, or "anything" (interface).

Exports
-------
Kind
    ``IntEnum`` of kinds.  Basic kinds (``BOOL`` … ``STRING``) are contiguous.

is_nil / value_is_zero
    Absence and zero-value probes for dynamic values.

kind_of / kind_of_type / kind_is_basic
    Classify a value or a static type.

strip_optional / is_optional / runtime_class / element_type / mapping_types / type_name
    Static-type helpers used by robust assignment.

make_of_type / rebuild_sequence / rebuild_mapping
    Construct zero values and containers of a given static type.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import functools
import inspect
import types
import typing
import weakref
from enum import IntEnum
from typing import Any, Optional, Tuple

import numpy as np

from .core import Ref


class Kind(IntEnum):
    INVALID = 0
    BOOL = 1
    INT = 2
    UINT = 3
    FLOAT = 4
    COMPLEX = 5
    STRING = 6
    SEQUENCE = 7
    MAPPING = 8
    STRUCT = 9
    POINTER = 10
    FUNC = 11
    INTERFACE = 12


_UNION_ORIGINS = (typing.Union, types.UnionType)
_NONE_TYPE = type(None)
_SEQUENCE_TYPES = (cabc.Sequence, cabc.Set, bytearray, memoryview, np.ndarray)
_FUNC_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    functools.partial,
)


# ─────────────────────────────────────────────────────────────────────────────
# Dynamic values
# ─────────────────────────────────────────────────────────────────────────────


def is_nil(value: Any) -> bool:
    """Return True if *value* is semantically absent.

    ``None`` is absent, and so is a weak reference whose referent has been
    collected.  Numbers, booleans, containers and aggregates never are;
    an empty list is a value, not an absence.
    """
    if value is None:
        return True
    if isinstance(value, weakref.ReferenceType):
        return value() is None
    return False


def kind_of(value: Any) -> Kind:
    """Return the dynamic kind of *value*."""
    if value is None:
        return Kind.INVALID
    if isinstance(value, (Ref, weakref.ReferenceType)):
        return Kind.POINTER
    if isinstance(value, (bool, np.bool_)):
        return Kind.BOOL
    if isinstance(value, (int, np.signedinteger)):
        return Kind.INT
    if isinstance(value, np.unsignedinteger):
        return Kind.UINT
    if isinstance(value, (float, np.floating)):
        return Kind.FLOAT
    if isinstance(value, (complex, np.complexfloating)):
        return Kind.COMPLEX
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, cabc.Mapping):
        return Kind.MAPPING
    if isinstance(value, _SEQUENCE_TYPES):
        return Kind.SEQUENCE
    if isinstance(value, _FUNC_TYPES):
        return Kind.FUNC
    return Kind.STRUCT


def kind_is_basic(kind: Kind) -> bool:
    """Return True for boolean, integer, float, complex and string kinds."""
    return Kind.BOOL <= kind <= Kind.STRING


def value_is_zero(value: Any) -> bool:
    """Return True if *value* is nil or the zero value of its kind.

    Empty text and containers, ``False`` and numeric zero are zero values.
    References are never zero; they either are nil or point somewhere.
    """
    if is_nil(value):
        return True
    kind = kind_of(value)
    if kind in (Kind.STRING, Kind.SEQUENCE, Kind.MAPPING):
        return len(value) == 0
    if kind == Kind.BOOL:
        return not value
    if kind in (Kind.INT, Kind.UINT, Kind.FLOAT, Kind.COMPLEX):
        return bool(value == 0)
    return False


# ─────────────────────────────────────────────────────────────────────────────
# Static types
# ─────────────────────────────────────────────────────────────────────────────


def strip_optional(tp: Any) -> Any:
    """``Optional[T]`` → ``T``; any other type is returned unchanged."""
    if typing.get_origin(tp) in _UNION_ORIGINS:
        args = [a for a in typing.get_args(tp) if a is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return tp


def is_optional(tp: Any) -> bool:
    """Return True if ``None`` is a valid value for *tp*."""
    if tp is Any or tp is object or tp is _NONE_TYPE:
        return True
    if typing.get_origin(tp) in _UNION_ORIGINS:
        return any(is_optional(a) for a in typing.get_args(tp))
    return False


def runtime_class(tp: Any) -> Optional[type]:
    """Return the class an instance of *tp* has, or ``None`` if there is none.

    ``list[int]`` → ``list``; ``Optional[Foo]`` → ``Foo``; ``Any`` → ``None``.
    """
    tp = strip_optional(tp)
    if tp is Any:
        return None
    origin = typing.get_origin(tp)
    if origin is not None:
        tp = origin
    return tp if isinstance(tp, type) else None


def kind_of_type(tp: Any) -> Kind:
    """Return the kind of values of the static type *tp*.

    ``Optional[T]`` classifies as ``T``.  ``Any``, ``object``, type variables
    and unions of several types classify as ``INTERFACE``: anything may be
    stored there.
    """
    tp = strip_optional(tp)
    if tp is None or tp is _NONE_TYPE:
        return Kind.INVALID
    if tp is Any or tp is object or isinstance(tp, typing.TypeVar):
        return Kind.INTERFACE
    origin = typing.get_origin(tp)
    if origin in _UNION_ORIGINS:
        return Kind.INTERFACE
    if origin is cabc.Callable:
        return Kind.FUNC
    cls = runtime_class(tp)
    if cls is None:
        return Kind.INTERFACE
    if issubclass(cls, (Ref, weakref.ReferenceType)):
        return Kind.POINTER
    if issubclass(cls, (bool, np.bool_)):
        return Kind.BOOL
    if issubclass(cls, np.unsignedinteger):
        return Kind.UINT
    if issubclass(cls, (int, np.integer)):
        return Kind.INT
    if issubclass(cls, (float, np.floating)):
        return Kind.FLOAT
    if issubclass(cls, (complex, np.complexfloating)):
        return Kind.COMPLEX
    if issubclass(cls, str):
        return Kind.STRING
    if issubclass(cls, cabc.Mapping):
        return Kind.MAPPING
    if issubclass(cls, (bytes, *_SEQUENCE_TYPES)):
        return Kind.SEQUENCE
    if issubclass(cls, _FUNC_TYPES):
        return Kind.FUNC
    return Kind.STRUCT


def element_type(tp: Any, index: Optional[int] = None) -> Any:
    """Return the element type of the sequence type *tp*.

    Fixed-shape tuples (``tuple[int, str]``) use *index*; positions past the
    declared shape, and unparametrised sequences, give ``Any``.  Byte strings
    hold ``numpy.uint8``.
    """
    tp = strip_optional(tp)
    args = typing.get_args(tp)
    cls = runtime_class(tp)
    if cls is not None and issubclass(cls, tuple) and args:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        if index is not None and index < len(args):
            return args[index]
        return Any
    if cls is not None and issubclass(cls, (bytes, bytearray)):
        return np.uint8
    return args[0] if args else Any


def mapping_types(tp: Any) -> Tuple[Any, Any]:
    """Return ``(key_type, value_type)`` of the mapping type *tp*."""
    args = typing.get_args(strip_optional(tp))
    if len(args) == 2:
        return args[0], args[1]
    return Any, Any


def type_name(tp: Any) -> str:
    """Human-readable name of a class or annotation, for diagnostics."""
    if isinstance(tp, type) and not typing.get_args(tp):
        return tp.__qualname__
    return repr(tp)


# ─────────────────────────────────────────────────────────────────────────────
# Construction
# ─────────────────────────────────────────────────────────────────────────────


def _is_abstract(cls: type) -> bool:
    return inspect.isabstract(cls) or cls.__module__ in ("collections.abc", "typing")


def rebuild_sequence(tp: Any, items: list) -> Any:
    """Build a sequence of type *tp* holding *items*.

    Lists, abstract sequence types and ``Any`` get the list itself.
    """
    cls = runtime_class(tp)
    if cls is None or cls is list or _is_abstract(cls):
        return items
    if issubclass(cls, np.ndarray):
        return np.asarray(items)
    return cls(items)


def rebuild_mapping(tp: Any, entries: dict) -> Any:
    """Build a mapping of type *tp* holding *entries*."""
    cls = runtime_class(tp)
    if cls is None or cls is dict or _is_abstract(cls):
        return entries
    return cls(entries)


def make_of_type(tp: Any) -> Any:
    """Return a new zero value of the static type *tp*.

    * ``Optional[T]``, ``Any``, references and functions → ``None``
    * basic kinds → ``tp()`` (``0``, ``0.0``, ``False``, ``""``, …)
    * sequences and mappings → empty container of that type
    * structs → ``tp()`` when every field has a default, else ``None``
    """
    if is_optional(tp):
        return None
    kind = kind_of_type(tp)
    cls = runtime_class(tp)
    if cls is None or kind in (Kind.INVALID, Kind.INTERFACE, Kind.POINTER, Kind.FUNC):
        return None
    if kind == Kind.SEQUENCE:
        return rebuild_sequence(tp, [])
    if kind == Kind.MAPPING:
        return rebuild_mapping(tp, {})
    if dataclasses.is_dataclass(cls) and any(
            f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            for f in dataclasses.fields(cls) if f.init
    ):
        return None
    try:
        return cls()
    except (TypeError, ValueError):
        return None
