"""Robust assignment: store any value into any settable destination.

Exports
-------
set_robust
    Convert *frm* to the static type of the destination and store it.

copy_sequence_robust / copy_map_robust
    Element-wise robust copies between containers of different types.

set_map_robust
    Insert a key / value pair, converting either side to the mapping's
    declared key and value types.

clone_to_type
    New zero value of a type, robustly set from a value.

Destinations are ``Ref`` objects (``Var``, ``AttrRef``, ``ItemRef``,
``InPlaceRef``) or mutable containers and objects, which are written in place.

Failures never raise: they are logged on the module logger (or the
``logger=`` passed in) and reported as ``False``.  The container copies are
the exception; they raise ``TypeError`` when either side has the wrong kind,
and ``set_robust`` turns that into a logged ``False``.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import types
import typing
from typing import Any, Callable, Optional, Tuple, Union

import msgspec

from .convert import to_bool, to_float, to_int, to_string
from .core import BoolSetter, Ref
from .kinds import (
    Kind,
    element_type,
    is_nil,
    is_optional,
    kind_of,
    kind_of_type,
    make_of_type,
    mapping_types,
    rebuild_mapping,
    rebuild_sequence,
    runtime_class,
    strip_optional,
    type_name,
)
from .numeric import convert_float, convert_int
from .refs import ItemRef, Var, as_ref, non_ref_value
from .serial import dec_hook, enc_hook, example_json

_logger = logging.getLogger(__name__)

Logger = Union[logging.Logger, logging.LoggerAdapter]

_UNION_ORIGINS = (typing.Union, types.UnionType)
_STORE_ERRORS = (TypeError, ValueError, OverflowError, AttributeError)
_JSON_ERRORS = (msgspec.MsgspecError, TypeError, ValueError, NotImplementedError)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _resolve(to: Any, log: Logger, what: str) -> Optional[Ref]:
    """Return a settable ``Ref`` for *to*, or log and return ``None``."""
    if is_nil(to):
        log.warning("%s: destination is nil", what)
        return None
    ref = as_ref(to)
    if ref is None:
        log.warning(
            "%s: a %s value cannot be set; pass a Ref or a mutable object",
            what, type(to).__name__,
        )
        return None
    if not ref.settable:
        log.warning("%s: destination %r is not settable", what, ref)
        return None
    return ref


def _store(ref: Ref, make: Callable[[], Any], log: Logger) -> bool:
    try:
        ref.set(make())
    except _STORE_ERRORS as exc:
        log.warning("set_robust: cannot store into %r: %s", ref, exc)
        return False
    return True


def _text_source(frm: Any) -> Optional[str]:
    """The text of *frm* when it is (a reference to) a string."""
    v = non_ref_value(frm)
    if kind_of(v) == Kind.STRING:
        return str.__str__(v)
    return None


def _assignable(value: Any, tp: Any) -> bool:
    """Whether *value* may be stored as-is in a location of type *tp*."""
    if value is None:
        return is_optional(tp)
    base = strip_optional(tp)
    if typing.get_origin(base) in _UNION_ORIGINS:
        return any(_assignable(value, a) for a in typing.get_args(base))
    if kind_of_type(base) == Kind.INTERFACE:
        return True
    cls = runtime_class(base)
    return cls is not None and isinstance(value, cls)


def _fits(value: Any, tp: Any) -> bool:
    kind = kind_of_type(tp)
    if kind == Kind.INTERFACE:
        return True
    return kind_of(value) == kind and _assignable(value, tp)


def _merge(base: dict, patch: dict) -> dict:
    """Merge *patch* into *base* recursively; nested objects merge, the rest replaces."""
    for key, value in patch.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _merge(current, value)
        else:
            base[key] = value
    return base


# ─────────────────────────────────────────────────────────────────────────────
# JSON text sources
# ─────────────────────────────────────────────────────────────────────────────


def _decode_struct(ref: Ref, text: str, log: Logger) -> bool:
    typ = strip_optional(ref.type)
    current = ref.get()
    try:
        patch = msgspec.json.decode(text)
        if not isinstance(patch, dict):
            raise ValueError(f"expected a JSON object, got {type(patch).__name__}")
        base = msgspec.to_builtins(current, enc_hook=enc_hook) if current is not None else {}
        merged = _merge(base if isinstance(base, dict) else {}, patch)
        value = msgspec.convert(merged, type=typ, dec_hook=dec_hook)
    except _JSON_ERRORS as exc:
        log.warning("set_robust: struct from string: %s, for example: %s", exc, example_json(current))
        return False
    return _store(ref, lambda: value, log)


def _decode_sequence(ref: Ref, text: str, log: Logger) -> bool:
    try:
        value = msgspec.json.decode(text, type=strip_optional(ref.type), dec_hook=dec_hook)
    except _JSON_ERRORS as exc:
        log.warning("set_robust: sequence from string: %s, for example: %s", exc, example_json(ref.get()))
        return False
    return _store(ref, lambda: value, log)


def _decode_mapping(ref: Ref, text: str, log: Logger) -> bool:
    try:
        value = msgspec.json.decode(text, type=strip_optional(ref.type), dec_hook=dec_hook)
    except _JSON_ERRORS as exc:
        log.warning("set_robust: mapping from string: %s, for example: %s", exc, example_json(ref.get()))
        return False
    current = ref.get()
    if isinstance(current, cabc.MutableMapping):
        current.update(value)
        return True
    return _store(ref, lambda: value, log)


# ─────────────────────────────────────────────────────────────────────────────
# set_robust
# ─────────────────────────────────────────────────────────────────────────────


def set_robust(to: Any, frm: Any, *, logger: Optional[Logger] = None) -> bool:
    """Robustly store *frm* into the destination *to*.

    Basic destinations go through the ``to_*`` conversions and are then cast
    to the exact destination class (``numpy.uint8``, ``numpy.float32``, an
    ``IntEnum``, …).  Structured destinations accept a JSON string, or a
    container of another element type which is copied element by element.
    Anything else is stored only when it already is an instance of the
    destination type.

    ``None`` is stored as-is into ``Optional`` destinations.  A mutable
    object implementing ``BoolSetter`` is set through ``set_bool``.

    Returns ``True`` on success; on failure the destination is left as it was.
    """
    log = logger or _logger

    if not isinstance(to, Ref) and isinstance(to, BoolSetter):
        b, ok = to_bool(frm)
        if ok:
            to.set_bool(b)
        return ok

    ref = _resolve(to, log, "set_robust")
    if ref is None:
        return False

    typ = ref.type
    kind = kind_of_type(typ)

    if frm is None and is_optional(typ):
        return _store(ref, lambda: None, log)

    if kind in (Kind.INT, Kind.UINT):
        n, ok = to_int(frm)
        if ok:
            return _store(ref, lambda: convert_int(n, typ), log)
    elif kind == Kind.BOOL:
        b, ok = to_bool(frm)
        if ok:
            return _store(ref, lambda: (runtime_class(typ) or bool)(b), log)
    elif kind == Kind.FLOAT:
        x, ok = to_float(frm)
        if ok:
            return _store(ref, lambda: convert_float(x, typ), log)
    elif kind == Kind.STRING:
        s = to_string(frm)
        return _store(ref, lambda: (runtime_class(typ) or str)(s), log)
    elif kind == Kind.STRUCT:
        text = _text_source(frm)
        if text is not None:
            return _decode_struct(ref, text, log)
    elif kind == Kind.SEQUENCE:
        text = _text_source(frm)
        if text is not None:
            return _decode_sequence(ref, text, log)
        try:
            return copy_sequence_robust(ref, frm, logger=log)
        except TypeError as exc:
            log.warning("set_robust: %s", exc)
            return False
    elif kind == Kind.MAPPING:
        text = _text_source(frm)
        if text is not None:
            return _decode_mapping(ref, text, log)
        try:
            return copy_map_robust(ref, frm, logger=log)
        except TypeError as exc:
            log.warning("set_robust: %s", exc)
            return False

    if _assignable(frm, typ):
        return _store(ref, lambda: frm, log)
    log.debug("set_robust: cannot convert %s to %s", type(frm).__name__, type_name(typ))
    return False


# ─────────────────────────────────────────────────────────────────────────────
# Container copies
# ─────────────────────────────────────────────────────────────────────────────


def copy_sequence_robust(to: Any, frm: Any, *, logger: Optional[Logger] = None) -> bool:
    """Copy the sequence *frm* into the sequence destination *to*.

    The destination is truncated or grown to the length of the source and
    every element is converted with ``set_robust`` into the destination's
    element type.  An element that does not convert keeps its previous (or
    zero) value and is logged at debug level.

    Mutable destinations are updated in place; tuples, byte strings and
    frozen sets are rebuilt and stored through the reference.

    Raises ``TypeError`` if the destination is not settable or either side
    is not a sequence.
    """
    log = logger or _logger
    ref = as_ref(to)
    if ref is None or not ref.settable:
        raise TypeError(f"copy_sequence_robust: destination {to!r} is not settable")
    typ = ref.type
    if kind_of_type(typ) != Kind.SEQUENCE:
        raise TypeError(f"copy_sequence_robust: destination is not a sequence: {type_name(typ)}")
    src = non_ref_value(frm)
    if kind_of(src) != Kind.SEQUENCE:
        raise TypeError(f"copy_sequence_robust: source is not a sequence: {type(src).__name__}")

    items = list(src)
    current = ref.get()
    in_place = isinstance(current, cabc.MutableSequence)
    if in_place:
        target = current
    else:
        target = [] if current is None else list(current)

    n = len(items)
    del target[n:]
    while len(target) < n:
        target.append(make_of_type(element_type(typ, len(target))))

    for i, item in enumerate(items):
        if not set_robust(ItemRef(target, i, element_type(typ, i)), item, logger=log):
            log.debug("copy_sequence_robust: element %d (%r) was not converted", i, item)

    if in_place:
        return True
    return _store(ref, lambda: rebuild_sequence(typ, target), log)


def copy_map_robust(to: Any, frm: Any, *, logger: Optional[Logger] = None) -> bool:
    """Replace the contents of the mapping destination *to* with *frm*.

    The destination is cleared (or created) and every source entry is
    inserted with ``set_map_robust``, converting keys and values to the
    destination's declared types.

    Raises ``TypeError`` if the destination is not settable or either side
    is not a mapping.
    """
    log = logger or _logger
    ref = as_ref(to)
    if ref is None or not ref.settable:
        raise TypeError(f"copy_map_robust: destination {to!r} is not settable")
    typ = ref.type
    if kind_of_type(typ) != Kind.MAPPING:
        raise TypeError(f"copy_map_robust: destination is not a mapping: {type_name(typ)}")
    src = non_ref_value(frm)
    if kind_of(src) != Kind.MAPPING:
        raise TypeError(f"copy_map_robust: source is not a mapping: {type(src).__name__}")

    entries = list(src.items())
    current = ref.get()
    created = not isinstance(current, cabc.MutableMapping)
    target = {} if created else current
    target.clear()

    holder = Var(typ, target)
    for key, val in entries:
        set_map_robust(holder, key, val, logger=log)

    if created:
        return _store(ref, lambda: rebuild_mapping(typ, target), log)
    return True


def set_map_robust(mp: Any, key: Any, val: Any, *, logger: Optional[Logger] = None) -> bool:
    """Insert ``mp[key] = val``, converting *key* and *val* when their kinds
    do not match the mapping's declared key and value types."""
    log = logger or _logger
    ref = _resolve(mp, log, "set_map_robust")
    if ref is None:
        return False
    if kind_of_type(ref.type) != Kind.MAPPING:
        log.warning("set_map_robust: destination is not a mapping: %s", type_name(ref.type))
        return False
    target = ref.get()
    if not isinstance(target, cabc.MutableMapping):
        log.warning("set_map_robust: %s is not a mutable mapping", type(target).__name__)
        return False

    ktyp, vtyp = mapping_types(ref.type)
    if not _fits(key, ktyp):
        key, ok = clone_to_type(ktyp, key, logger=log)
        if not ok:
            log.warning("set_map_robust: cannot convert key to %s", type_name(ktyp))
            return False
    if not _fits(val, vtyp):
        val, ok = clone_to_type(vtyp, val, logger=log)
        if not ok:
            log.warning("set_map_robust: cannot convert value for key %r to %s", key, type_name(vtyp))
            return False

    try:
        target[key] = val
    except TypeError as exc:
        log.warning("set_map_robust: %s", exc)
        return False
    return True


def clone_to_type(tp: Any, val: Any, *, logger: Optional[Logger] = None) -> Tuple[Any, bool]:
    """Return ``(value, ok)``: a new value of type *tp* robustly set from *val*."""
    holder = Var(tp)
    ok = set_robust(holder, val, logger=logger)
    return holder.value, ok
