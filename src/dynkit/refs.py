"""Concrete ``Ref`` implementations: the destinations robust assignment writes to.

Python has no address-of operator, so a settable destination is an explicit
reference object that knows both *where* to write and *what type* the
location holds.

Exports
-------
Var
    Free-standing typed cell; ``Var(int)`` is a fresh ``0`` that can be
    written through.

AttrRef
    ``obj.name``; the static type comes from the class annotations.

ItemRef
    ``container[key]`` for mutable mappings and sequences.

InPlaceRef
    The *contents* of a mutable list, dict or object; assigning replaces the
    contents without rebinding the object.

as_ref
    Turn a destination argument into a ``Ref`` (or ``None`` for immutable
    values that cannot be written to).

non_ref_value
    Follow ``Ref`` and live weak-reference chains down to the value.
"""

from __future__ import annotations

import builtins
import collections.abc as cabc
import dataclasses
import inspect
import types
import typing
import weakref
from typing import Any, Optional

from .core import Ref
from .kinds import Kind, kind_is_basic, kind_of, make_of_type, type_name

_ZERO = object()


def _infer_type(value: Any) -> Any:
    return Any if value is None else builtins.type(value)


def _is_frozen(obj: Any) -> bool:
    """Frozen dataclasses, frozen ``msgspec.Struct``s and tuples."""
    cls = builtins.type(obj)
    if isinstance(obj, tuple):
        return True
    if dataclasses.is_dataclass(obj) and cls.__dataclass_params__.frozen:
        return True
    config = getattr(cls, "__struct_config__", None)
    return bool(getattr(config, "frozen", False))


def _state(obj: Any) -> dict[str, Any]:
    """Field name → value for dataclasses, ``msgspec.Struct``s and plain objects."""
    if dataclasses.is_dataclass(obj):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    fields = getattr(builtins.type(obj), "__struct_fields__", None)
    if fields is not None:
        return {name: getattr(obj, name) for name in fields}
    return dict(vars(obj))


# ─────────────────────────────────────────────────────────────────────────────
# Var
# ─────────────────────────────────────────────────────────────────────────────


class Var(Ref):
    """A typed cell, the analogue of a freshly allocated variable.

    ::

        v = Var(int)              # holds 0
        v = Var(list[str])        # holds []
        v = Var(Optional[int])    # holds None
        v = Var.of(3.5)           # type float, holds 3.5
    """

    def __init__(self, type: Any = Any, value: Any = _ZERO) -> None:
        self._type = type
        self.value = make_of_type(type) if value is _ZERO else value

    @classmethod
    def of(cls, value: Any) -> Var:
        """Return a ``Var`` typed after *value*'s class."""
        return cls(_infer_type(value), value)

    @property
    def type(self) -> Any:
        return self._type

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Var({type_name(self._type)}, {self.value!r})"


# ─────────────────────────────────────────────────────────────────────────────
# AttrRef
# ─────────────────────────────────────────────────────────────────────────────


class AttrRef(Ref):
    """``obj.name`` as a settable location.

    Static type resolution order: explicit *type* → class annotation →
    class of the current value → ``Any``.

    Not settable on frozen dataclasses / structs, on read-only properties,
    and on ``__slots__`` classes that have no slot for *name*.
    """

    def __init__(self, obj: Any, name: str, type: Any = None) -> None:
        self._obj = obj
        self._name = name
        self._type = self._annotation() if type is None else type

    def _annotation(self) -> Any:
        try:
            hints = typing.get_type_hints(builtins.type(self._obj))
        except (NameError, TypeError):
            hints = {}
        if self._name in hints:
            return hints[self._name]
        return _infer_type(self.get())

    @property
    def type(self) -> Any:
        return self._type

    @property
    def settable(self) -> bool:
        if _is_frozen(self._obj):
            return False
        attr = inspect.getattr_static(builtins.type(self._obj), self._name, None)
        if isinstance(attr, property):
            return attr.fset is not None
        if isinstance(attr, types.MemberDescriptorType):
            return True
        return hasattr(self._obj, "__dict__")

    def get(self) -> Any:
        return getattr(self._obj, self._name, None)

    def set(self, value: Any) -> None:
        setattr(self._obj, self._name, value)

    def __repr__(self) -> str:
        return f"AttrRef({builtins.type(self._obj).__name__}.{self._name}: {type_name(self._type)})"


# ─────────────────────────────────────────────────────────────────────────────
# ItemRef
# ─────────────────────────────────────────────────────────────────────────────


class ItemRef(Ref):
    """``container[key]`` as a settable location.

    Mutable mappings accept any key (assigning creates it); mutable sequences
    only accept an index that already exists.  Tuples, strings and read-only
    mappings are never settable.
    """

    def __init__(self, container: Any, key: Any, type: Any = None) -> None:
        self._container = container
        self._key = key
        self._type = _infer_type(self.get()) if type is None else type

    @property
    def type(self) -> Any:
        return self._type

    @property
    def settable(self) -> bool:
        if isinstance(self._container, cabc.MutableMapping):
            return True
        if isinstance(self._container, cabc.MutableSequence):
            return isinstance(self._key, int) and -len(self._container) <= self._key < len(self._container)
        return False

    def get(self) -> Any:
        try:
            return self._container[self._key]
        except (KeyError, IndexError, TypeError):
            return None

    def set(self, value: Any) -> None:
        self._container[self._key] = value

    def __repr__(self) -> str:
        return f"ItemRef([{self._key!r}]: {type_name(self._type)})"


# ─────────────────────────────────────────────────────────────────────────────
# InPlaceRef
# ─────────────────────────────────────────────────────────────────────────────


class InPlaceRef(Ref):
    """The contents of a mutable object.

    ``set(new)`` keeps the identity of the wrapped object and copies *new*
    into it:

    * mutable sequence → ``obj[:] = new``
    * mutable mapping  → ``obj.clear(); obj.update(new)``
    * any other object → each field of *new* is assigned onto ``obj``
    """

    def __init__(self, obj: Any, type: Any = None) -> None:
        self._obj = obj
        self._type = builtins.type(obj) if type is None else type

    @property
    def type(self) -> Any:
        return self._type

    @property
    def settable(self) -> bool:
        if isinstance(self._obj, (cabc.MutableSequence, cabc.MutableMapping)):
            return True
        if _is_frozen(self._obj):
            return False
        return hasattr(self._obj, "__dict__") or hasattr(builtins.type(self._obj), "__slots__")

    def get(self) -> Any:
        return self._obj

    def set(self, value: Any) -> None:
        obj = self._obj
        if value is obj:
            return
        if isinstance(obj, cabc.MutableSequence):
            obj[:] = list(value)
        elif isinstance(obj, cabc.MutableMapping):
            obj.clear()
            obj.update(value)
        else:
            for name, field_value in _state(value).items():
                setattr(obj, name, field_value)

    def __repr__(self) -> str:
        return f"InPlaceRef({builtins.type(self._obj).__name__}: {type_name(self._type)})"


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def as_ref(target: Any) -> Optional[Ref]:
    """Return a ``Ref`` that writes into *target*, or ``None`` if there is none.

    ``Ref``s are returned unchanged.  Mutable containers and objects are
    wrapped in ``InPlaceRef``.  Basic values, tuples, frozen sets, functions,
    classes and ``None`` have no writable contents.
    """
    if isinstance(target, Ref):
        return target
    kind = kind_of(target)
    if kind == Kind.INVALID or kind == Kind.FUNC or kind_is_basic(kind) or isinstance(target, type):
        return None
    if kind == Kind.SEQUENCE and not isinstance(target, cabc.MutableSequence):
        return None
    if kind == Kind.MAPPING and not isinstance(target, cabc.MutableMapping):
        return None
    if kind == Kind.POINTER:
        referent = target()
        return None if referent is None else as_ref(referent)
    return InPlaceRef(target)


def non_ref_value(value: Any) -> Any:
    """Dereference every ``Ref`` and live weak-reference level of *value*."""
    while True:
        if isinstance(value, Ref):
            value = value.get()
        elif isinstance(value, weakref.ReferenceType):
            referent = value()
            if referent is None:
                return None
            value = referent
        else:
            return value
