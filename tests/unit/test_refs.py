"""Tests for Ref implementations."""

import types
import weakref
from dataclasses import dataclass, field
from typing import Any, List, Optional

import msgspec
import pytest

from dynkit import AttrRef, InPlaceRef, ItemRef, Var, as_ref, non_ref_value


@dataclass
class Point:
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class FrozenPoint:
    x: int = 0


@dataclass
class Box:
    items: List[str] = field(default_factory=list)
    label: Optional[str] = None


class Slotted:
    __slots__ = ("a",)

    def __init__(self):
        self.a = 1


class WithProperty:
    def __init__(self):
        self._v = 1

    @property
    def read_only(self):
        return self._v

    @property
    def writable(self):
        return self._v

    @writable.setter
    def writable(self, value):
        self._v = value


class Vec(msgspec.Struct):
    x: float = 0.0


class FrozenVec(msgspec.Struct, frozen=True):
    x: float = 0.0


class TestVar:
    """Test Var."""

    def test_zero_value_from_type(self):
        """A Var without a value starts at the zero value of its type."""
        assert Var(int).get() == 0
        assert Var(str).get() == ""
        assert Var(List[str]).get() == []
        assert Var(Optional[int]).get() is None

    def test_explicit_value(self):
        v = Var(int, 5)
        assert v.get() == 5 and v.value == 5

    def test_of_infers_type(self):
        assert Var.of(3.5).type is float
        assert Var.of(None).type is Any

    def test_set(self):
        v = Var(int)
        v.set(9)
        assert v.get() == 9
        assert v.settable is True


class TestAttrRef:
    """Test AttrRef."""

    def test_type_from_annotation(self):
        """Static type comes from the class annotations."""
        assert AttrRef(Point(), "x").type is int
        assert AttrRef(Box(), "label").type == Optional[str]

    def test_type_from_value(self):
        """Unannotated attributes are typed after their current value."""
        obj = types.SimpleNamespace(n=1.5)
        assert AttrRef(obj, "n").type is float

    def test_explicit_type_wins(self):
        assert AttrRef(Point(), "x", type=float).type is float

    def test_get_and_set(self):
        p = Point(1, 2)
        ref = AttrRef(p, "y")

        assert ref.get() == 2
        ref.set(7)
        assert p.y == 7

    def test_frozen_dataclass_not_settable(self):
        assert AttrRef(FrozenPoint(), "x").settable is False

    def test_properties(self):
        """Only properties with a setter are settable."""
        obj = WithProperty()
        assert AttrRef(obj, "read_only").settable is False
        assert AttrRef(obj, "writable").settable is True

    def test_slots(self):
        """Slot classes accept their slots and nothing else."""
        obj = Slotted()
        assert AttrRef(obj, "a").settable is True
        assert AttrRef(obj, "b").settable is False

    def test_msgspec_structs(self):
        assert AttrRef(Vec(), "x").type is float
        assert AttrRef(Vec(), "x").settable is True
        assert AttrRef(FrozenVec(), "x").settable is False


class TestItemRef:
    """Test ItemRef."""

    def test_mapping_keys(self):
        """Any key of a mutable mapping is settable, existing or not."""
        d = {"a": 1}
        ref = ItemRef(d, "b")

        assert ref.settable is True
        assert ref.get() is None

        ref.set(2)
        assert d == {"a": 1, "b": 2}

    def test_sequence_indexes(self):
        """Only existing indexes of a mutable sequence are settable."""
        lst = [1, 2]
        assert ItemRef(lst, 1).settable is True
        assert ItemRef(lst, -2).settable is True
        assert ItemRef(lst, 2).settable is False
        assert ItemRef(lst, 5).get() is None

    def test_immutable_containers(self):
        assert ItemRef((1, 2), 0).settable is False
        assert ItemRef(types.MappingProxyType({"a": 1}), "a").settable is False

    def test_type_inference(self):
        assert ItemRef({"a": 1}, "a").type is int
        assert ItemRef({}, "missing").type is Any
        assert ItemRef([1.0], 0, type=int).type is int


class TestInPlaceRef:
    """Test InPlaceRef."""

    def test_list_identity_kept(self):
        lst = [1, 2, 3]
        InPlaceRef(lst).set([9])

        assert lst == [9]

    def test_dict_identity_kept(self):
        d = {"a": 1}
        InPlaceRef(d).set({"b": 2})

        assert d == {"b": 2}

    def test_object_fields_copied(self):
        p = Point(1, 2)
        InPlaceRef(p).set(Point(5, 6))

        assert (p.x, p.y) == (5, 6)

    def test_self_assignment_is_noop(self):
        lst = [1, 2]
        InPlaceRef(lst).set(lst)

        assert lst == [1, 2]

    def test_frozen_not_settable(self):
        assert InPlaceRef(FrozenPoint()).settable is False
        assert InPlaceRef(Point()).settable is True


class TestAsRef:
    """Test as_ref()."""

    def test_refs_pass_through(self):
        v = Var(int)
        assert as_ref(v) is v

    @pytest.mark.parametrize("target", [None, 5, "s", 1.5, (1,), frozenset({1}), len, int,
                                        types.MappingProxyType({})])
    def test_no_writable_contents(self, target):
        assert as_ref(target) is None

    @pytest.mark.parametrize("target", [[1], {"a": 1}, Point()])
    def test_mutable_targets_wrapped(self, target):
        ref = as_ref(target)

        assert isinstance(ref, InPlaceRef)
        assert ref.get() is target
        assert ref.type is type(target)

    def test_weakref_resolves_to_referent(self):
        p = Point()
        ref = as_ref(weakref.ref(p))

        assert isinstance(ref, InPlaceRef)
        assert ref.get() is p


class TestNonRefValue:
    """Test non_ref_value()."""

    def test_follows_every_level(self):
        assert non_ref_value(Var(Any, Var(int, 5))) == 5

    def test_plain_values_unchanged(self):
        assert non_ref_value(3) == 3

    def test_weakrefs(self):
        p = Point()
        assert non_ref_value(weakref.ref(p)) is p
