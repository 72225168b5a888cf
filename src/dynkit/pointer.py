"""JSON-Pointer addressing of destinations inside nested documents.

``ref_at`` turns an RFC 6901 pointer into an ``ItemRef`` that robust
assignment can write through::

    doc = {"cfg": {"ports": [80, 443]}}
    set_robust(ref_at(doc, "/cfg/ports/1", type=int), "8443")
    doc["cfg"]["ports"][1]            → 8443

Supported syntax:

* ``/a/b/0`` path segments, ``~1`` (``/``) and ``~0`` (``~``) escapes
* ``..`` parent reference
* ``-`` for one past the end of a list
"""

from __future__ import annotations

import collections.abc as cabc
from typing import Any, List, Tuple

from .kinds import make_of_type
from .refs import ItemRef


def _decode(tok: str) -> str:
    """Decode a single JSON Pointer token (RFC 6901 order: ``~1`` then ``~0``)."""
    return tok.replace("~1", "/").replace("~0", "~")


def _is_list(value: Any) -> bool:
    return isinstance(value, cabc.Sequence) and not isinstance(value, (str, bytes, bytearray))


def _index(token: str, ptr: str) -> int:
    if not token.isdigit():
        raise ValueError(f"{ptr}: {token!r} is not a list index")
    return int(token)


def _ensure_parent(doc: Any, ptr: str, *, create: bool) -> Tuple[Any, str]:
    """Return (container, leaf_key) for *ptr*, optionally creating intermediate nodes."""
    parts: List[str] = []
    for raw in ptr.lstrip("/").split("/"):
        if raw == "..":
            if parts:
                parts.pop()
            continue
        parts.append(raw)

    if not parts or parts == [""]:
        raise ValueError(f"{ptr!r}: pointer addresses the document root, which has no parent")

    cur: Any = doc
    for raw in parts[:-1]:
        token = _decode(raw)

        if _is_list(cur):
            idx = _index(token, ptr)
            if idx >= len(cur):
                if not create:
                    raise IndexError(f"{ptr}: index {idx} out of range")
                while idx >= len(cur):
                    cur.append({})
            cur = cur[idx]
        elif isinstance(cur, cabc.Mapping):
            if token not in cur:
                if not create:
                    raise KeyError(f"{ptr}: missing key '{token}'")
                cur[token] = {}
            cur = cur[token]
        else:
            raise TypeError(f"{ptr}: cannot descend into {type(cur).__name__}")

    return cur, _decode(parts[-1])


def ref_at(doc: Any, pointer: str, *, create: bool = False, type: Any = None) -> ItemRef:
    """Resolve *pointer* inside *doc* to a settable ``ItemRef``.

    With ``create=True`` missing intermediate objects are created, list
    indexes past the end grow the list with ``None`` and ``-`` appends a
    zero value of *type* (``None`` when no type is given).  Without it,
    missing intermediate keys raise ``KeyError`` and list positions past the
    end raise ``IndexError``.  A missing *leaf* key of a mapping is fine; it
    is created when the reference is set.

    Root pointers (``""``, ``"/"``) raise ``ValueError``; the parent
    container must be mutable or ``TypeError`` is raised.
    """
    parent, leaf = _ensure_parent(doc, pointer, create=create)

    if isinstance(parent, cabc.MutableSequence) and not isinstance(parent, bytearray):
        if leaf == "-":
            if not create:
                raise IndexError(f"{pointer}: '-' addresses past the end of the list")
            parent.append(None if type is None else make_of_type(type))
            return ItemRef(parent, len(parent) - 1, type)
        idx = _index(leaf, pointer)
        if idx >= len(parent):
            if not create:
                raise IndexError(f"{pointer}: index {idx} out of range")
            while idx >= len(parent):
                parent.append(None)
        return ItemRef(parent, idx, type)

    if isinstance(parent, cabc.MutableMapping):
        return ItemRef(parent, leaf, type)

    raise TypeError(f"{pointer}: parent is not a mutable container ({parent.__class__.__name__})")
