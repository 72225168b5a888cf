"""Tests for kind classification, nil probing and type helpers."""

import collections.abc as cabc
import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pytest

from dynkit import Kind, Var, is_nil, kind_is_basic, kind_of, kind_of_type, make_of_type, value_is_zero
from dynkit.kinds import element_type, is_optional, mapping_types, runtime_class, strip_optional


@dataclass
class Point:
    x: int = 0
    y: int = 0


@dataclass
class Required:
    name: str


class Plain:
    pass


class TestIsNil:
    """Test is_nil()."""

    def test_none_is_nil(self):
        assert is_nil(None) is True

    @pytest.mark.parametrize("value", [0, False, "", [], {}, 0.0, Point()])
    def test_values_are_not_nil(self, value):
        """Zero values are values, not absences."""
        assert is_nil(value) is False

    def test_dead_weakref_is_nil(self):
        """A weak reference whose referent is gone is nil."""
        obj = Plain()
        ref = weakref.ref(obj)
        assert is_nil(ref) is False

        del obj
        assert is_nil(ref) is True

    def test_ref_is_never_nil(self):
        """A Ref holding None is still a reference."""
        assert is_nil(Var(Any, None)) is False


class TestKindOf:
    """Test kind_of()."""

    @pytest.mark.parametrize("value, kind", [
        (None, Kind.INVALID),
        (True, Kind.BOOL),
        (np.bool_(False), Kind.BOOL),
        (3, Kind.INT),
        (np.int8(3), Kind.INT),
        (np.uint16(3), Kind.UINT),
        (1.0, Kind.FLOAT),
        (np.float32(1.0), Kind.FLOAT),
        (1j, Kind.COMPLEX),
        ("s", Kind.STRING),
        (b"x", Kind.SEQUENCE),
        ([1], Kind.SEQUENCE),
        ((1,), Kind.SEQUENCE),
        ({1}, Kind.SEQUENCE),
        ({}, Kind.MAPPING),
        (len, Kind.FUNC),
        (lambda: None, Kind.FUNC),
        (Var(int), Kind.POINTER),
        (Plain(), Kind.STRUCT),
        (Point(), Kind.STRUCT),
    ])
    def test_kinds(self, value, kind):
        assert kind_of(value) == kind

    def test_weakref_is_pointer(self):
        obj = Plain()
        assert kind_of(weakref.ref(obj)) == Kind.POINTER


class TestKindOfType:
    """Test kind_of_type()."""

    @pytest.mark.parametrize("tp, kind", [
        (bool, Kind.BOOL),
        (int, Kind.INT),
        (np.int32, Kind.INT),
        (np.uint8, Kind.UINT),
        (float, Kind.FLOAT),
        (np.float32, Kind.FLOAT),
        (complex, Kind.COMPLEX),
        (str, Kind.STRING),
        (bytes, Kind.SEQUENCE),
        (list, Kind.SEQUENCE),
        (list[int], Kind.SEQUENCE),
        (List[str], Kind.SEQUENCE),
        (Tuple[int, ...], Kind.SEQUENCE),
        (Sequence[int], Kind.SEQUENCE),
        (dict, Kind.MAPPING),
        (Dict[str, int], Kind.MAPPING),
        (Optional[int], Kind.INT),
        (int | None, Kind.INT),
        (Any, Kind.INTERFACE),
        (object, Kind.INTERFACE),
        (Union[int, str], Kind.INTERFACE),
        (Callable[[int], int], Kind.FUNC),
        (Point, Kind.STRUCT),
        (None, Kind.INVALID),
    ])
    def test_kinds(self, tp, kind):
        assert kind_of_type(tp) == kind


class TestKindIsBasic:
    """Test kind_is_basic()."""

    @pytest.mark.parametrize("kind", [Kind.BOOL, Kind.INT, Kind.UINT, Kind.FLOAT, Kind.COMPLEX, Kind.STRING])
    def test_basic(self, kind):
        assert kind_is_basic(kind) is True

    @pytest.mark.parametrize("kind", [Kind.INVALID, Kind.SEQUENCE, Kind.MAPPING, Kind.STRUCT, Kind.POINTER,
                                      Kind.FUNC, Kind.INTERFACE])
    def test_not_basic(self, kind):
        assert kind_is_basic(kind) is False


class TestValueIsZero:
    """Test value_is_zero()."""

    @pytest.mark.parametrize("value", [None, "", [], {}, (), False, 0, 0.0, 0j, np.int64(0),
                                       np.uint8(0), np.float32(0.0)])
    def test_zero_values(self, value):
        assert value_is_zero(value) is True

    @pytest.mark.parametrize("value", ["a", [0], 1, -0.5, True, Point(), Var(int)])
    def test_non_zero_values(self, value):
        assert value_is_zero(value) is False


class TestTypeHelpers:
    """Static-type helpers used by robust assignment."""

    def test_strip_optional(self):
        assert strip_optional(Optional[int]) is int
        assert strip_optional(int) is int
        assert strip_optional(Union[int, str]) == Union[int, str]

    def test_is_optional(self):
        assert is_optional(Optional[int]) is True
        assert is_optional(Any) is True
        assert is_optional(Union[int, str]) is False
        assert is_optional(int) is False

    def test_runtime_class(self):
        assert runtime_class(list[int]) is list
        assert runtime_class(Optional[Point]) is Point
        assert runtime_class(Sequence[int]) is cabc.Sequence
        assert runtime_class(Any) is None
        assert runtime_class(Optional[Any]) is None

    def test_element_type(self):
        """Homogeneous, fixed-shape and byte sequences."""
        assert element_type(list[int]) is int
        assert element_type(Tuple[int, ...]) is int
        assert element_type(Tuple[int, str], 1) is str
        assert element_type(Tuple[int, str], 5) is Any
        assert element_type(bytes) is np.uint8
        assert element_type(list) is Any

    def test_mapping_types(self):
        assert mapping_types(Dict[str, int]) == (str, int)
        assert mapping_types(dict) == (Any, Any)


class TestMakeOfType:
    """Test make_of_type()."""

    @pytest.mark.parametrize("tp, expected", [
        (int, 0),
        (float, 0.0),
        (bool, False),
        (str, ""),
        (bytes, b""),
        (list[int], []),
        (Dict[str, int], {}),
        (Tuple[int, ...], ()),
        (Sequence[int], []),
    ])
    def test_zero_values(self, tp, expected):
        value = make_of_type(tp)
        assert value == expected
        assert type(value) is type(expected)

    def test_numpy_scalar(self):
        value = make_of_type(np.float32)
        assert isinstance(value, np.float32) and value == 0

    @pytest.mark.parametrize("tp", [Optional[int], Any, Union[int, str], Var, Callable[[], None]])
    def test_no_zero_value(self, tp):
        """Optional, dynamic, reference and function types start as None."""
        assert make_of_type(tp) is None

    def test_dataclass_with_defaults(self):
        assert make_of_type(Point) == Point(0, 0)

    def test_dataclass_with_required_fields(self):
        assert make_of_type(Required) is None
