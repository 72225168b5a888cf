from . import bools
from .convert import to_bool, to_float, to_float32, to_int, to_string, to_string_prec
from .core import Booler, BoolSetter, Floater, Inter, Ref, TypeRegistry, is_stringer
from .errors import DynkitError, MalformedTypeError, UnknownTypeNameError
from .formatting import format_complex, format_float
from .kinds import (
    Kind,
    is_nil,
    kind_is_basic,
    kind_of,
    kind_of_type,
    make_of_type,
    value_is_zero,
)
from .parse import parse_bool, parse_float, parse_int
from .pointer import ref_at
from .refs import AttrRef, InPlaceRef, ItemRef, Var, as_ref, non_ref_value
from .robust import clone_to_type, copy_map_robust, copy_sequence_robust, set_map_robust, set_robust
from .serial import string_json
from .typereg import RegisteredType, Types, short_type_name, types

__all__ = [
    # conversion
    "to_bool",
    "to_int",
    "to_float",
    "to_float32",
    "to_string",
    "to_string_prec",
    # robust assignment
    "set_robust",
    "set_map_robust",
    "copy_sequence_robust",
    "copy_map_robust",
    "clone_to_type",
    "make_of_type",
    # references
    "Ref",
    "Var",
    "AttrRef",
    "ItemRef",
    "InPlaceRef",
    "as_ref",
    "non_ref_value",
    "ref_at",
    # kinds
    "Kind",
    "is_nil",
    "kind_of",
    "kind_of_type",
    "kind_is_basic",
    "value_is_zero",
    # capabilities
    "Booler",
    "BoolSetter",
    "Inter",
    "Floater",
    "is_stringer",
    # literals
    "parse_bool",
    "parse_int",
    "parse_float",
    "format_float",
    "format_complex",
    # type registry
    "TypeRegistry",
    "Types",
    "types",
    "RegisteredType",
    "short_type_name",
    # misc
    "bools",
    "string_json",
    "DynkitError",
    "UnknownTypeNameError",
    "MalformedTypeError",
]
