"""Type-name registry and a serializable type-descriptor wrapper.

A ``RegisteredType`` holds a Python type (or nothing) and persists it by
*name* only, e.g. ``"shapes.Circle"``.  Loading looks the name up in a
``TypeRegistry``; the module-level ``types`` instance is the default one.

Serialized forms::

    JSON:  "shapes.Circle"          null
    XML:   <Type>shapes.Circle</Type>   <Type>null</Type>
"""

from __future__ import annotations

import builtins
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

import msgspec

from .core import TypeRegistry
from .errors import MalformedTypeError, UnknownTypeNameError


def short_type_name(tp: Any) -> str:
    """``<last module component>.<qualname>``; builtins are just the qualname.

    ``pkg.geometry.shapes.Circle`` → ``"shapes.Circle"``.
    """
    module = getattr(tp, "__module__", None) or ""
    qualname = getattr(tp, "__qualname__", None) or repr(tp)
    if module in ("", "builtins"):
        return qualname
    return f"{module.rsplit('.', 1)[-1]}.{qualname}"


class Types:
    """Minimal name ↔ type registry.

    ::

        types = Types()

        @types.register
        class Circle: ...

        types.type("shapes.Circle")   # → Circle
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Any] = {}
        self._by_type: Dict[Any, str] = {}

    def add(self, tp: Any, name: Optional[str] = None) -> str:
        """Register *tp* under *name* (default: its short type name)."""
        name = name or short_type_name(tp)
        existing = self._by_name.get(name)
        if existing is not None and existing is not tp:
            raise ValueError(f"type name {name!r} is already registered for {existing!r}")
        self._by_name[name] = tp
        self._by_type[tp] = name
        return name

    def register(self, tp: Any) -> Any:
        """Class decorator form of ``add``."""
        self.add(tp)
        return tp

    def type(self, name: str) -> Optional[Any]:
        return self._by_name.get(name)

    def type_name(self, tp: Any) -> str:
        return self._by_type.get(tp) or short_type_name(tp)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)


types = Types()

_NULL = "null"


class RegisteredType:
    """A type descriptor that serializes as its registry name.

    ``t`` is the wrapped type or ``None``; *registry* defaults to the
    module-level ``types``.
    """

    __slots__ = ("t", "registry")

    def __init__(self, t: Any = None, registry: Optional[TypeRegistry] = None) -> None:
        self.t = t
        self.registry = types if registry is None else registry

    def short_type_name(self) -> str:
        return self.registry.type_name(self.t)

    def __str__(self) -> str:
        if self.t is None:
            return "nil"
        return self.short_type_name()

    def __repr__(self) -> str:
        return f"RegisteredType({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisteredType):
            return NotImplemented
        return self.t is other.t

    def __hash__(self) -> int:
        return hash(self.t)

    # ─────────────────────────────────────────────────────────────────────────
    # Builtin (msgspec hooks) form
    # ─────────────────────────────────────────────────────────────────────────

    def to_builtin(self) -> Optional[str]:
        return None if self.t is None else self.short_type_name()

    @classmethod
    def from_builtin(cls, obj: Any, registry: Optional[TypeRegistry] = None) -> RegisteredType:
        """Build from ``None`` or a registered type name."""
        registry = types if registry is None else registry
        if obj is None or obj == _NULL:
            return cls(None, registry)
        if not isinstance(obj, str):
            raise MalformedTypeError(f"type name must be a string, got {builtins.type(obj).__name__}")
        return cls(_lookup(registry, obj), registry)

    # ─────────────────────────────────────────────────────────────────────────
    # JSON
    # ─────────────────────────────────────────────────────────────────────────

    def to_json(self) -> bytes:
        return msgspec.json.encode(self.to_builtin())

    @classmethod
    def from_json(cls, data: bytes | str, registry: Optional[TypeRegistry] = None) -> RegisteredType:
        try:
            obj = msgspec.json.decode(data)
        except msgspec.DecodeError as exc:
            raise MalformedTypeError(f"invalid type JSON: {exc}") from None
        return cls.from_builtin(obj, registry)

    # ─────────────────────────────────────────────────────────────────────────
    # XML
    # ─────────────────────────────────────────────────────────────────────────

    def to_xml_element(self, tag: str = "Type") -> ET.Element:
        elem = ET.Element(tag)
        elem.text = _NULL if self.t is None else self.short_type_name()
        return elem

    def to_xml(self, tag: str = "Type") -> str:
        return ET.tostring(self.to_xml_element(tag), encoding="unicode")

    @classmethod
    def from_xml_element(
            cls,
            elem: ET.Element,
            tag: Optional[str] = None,
            registry: Optional[TypeRegistry] = None,
    ) -> RegisteredType:
        """Load from an element whose only content is the type name.

        *tag*, when given, must match the element's tag.
        """
        if tag is not None and elem.tag != tag:
            raise MalformedTypeError(f"expected <{tag}> element, got <{elem.tag}>")
        if len(elem):
            raise MalformedTypeError(f"<{elem.tag}> must not contain child elements")
        name = (elem.text or "").strip()
        if not name:
            raise MalformedTypeError(f"<{elem.tag}> has no type name")
        registry = types if registry is None else registry
        if name == _NULL:
            return cls(None, registry)
        return cls(_lookup(registry, name), registry)

    @classmethod
    def from_xml(
            cls,
            data: bytes | str,
            tag: Optional[str] = None,
            registry: Optional[TypeRegistry] = None,
    ) -> RegisteredType:
        try:
            elem = ET.fromstring(data)
        except ET.ParseError as exc:
            raise MalformedTypeError(f"invalid type XML: {exc}") from None
        return cls.from_xml_element(elem, tag, registry)


def _lookup(registry: TypeRegistry, name: str) -> Any:
    tp = registry.type(name)
    if tp is None:
        raise UnknownTypeNameError(f"type name not found: {name}")
    return tp
