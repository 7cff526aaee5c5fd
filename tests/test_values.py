"""Structured value model tests."""

import pytest

from pyjsonbridge._errors import DuplicateKeyError, IntegerOutOfRangeError
from pyjsonbridge.values import (
    Array,
    Bool,
    Int64,
    Null,
    Object,
    String,
    UInt64,
    value_depth,
)
from tests.conftest import nest_arrays


class TestIntegerRanges:
    def test_int64_bounds(self):
        assert Int64(-(2**63)).value == -(2**63)
        assert Int64(2**63 - 1).value == 2**63 - 1

    def test_int64_overflow(self):
        with pytest.raises(IntegerOutOfRangeError):
            Int64(2**63)

    def test_uint64_bounds(self):
        assert UInt64(2**64 - 1).value == 2**64 - 1

    def test_uint64_negative(self):
        with pytest.raises(IntegerOutOfRangeError):
            UInt64(-1)


class TestEquality:
    def test_same_number_different_width(self):
        assert Int64(1) != UInt64(1)

    def test_bool_is_not_int(self):
        assert Bool(True) != Int64(1)

    def test_object_key_order_matters(self):
        a = Object((("x", Int64(1)), ("y", Int64(2))))
        b = Object((("y", Int64(2)), ("x", Int64(1))))
        assert a != b

    def test_objects_are_hashable(self):
        assert hash(Object((("k", Null()),))) == hash(Object((("k", Null()),)))


class TestObject:
    def test_lookup(self):
        obj = Object((("a", Int64(1)), ("b", String("x"))))
        assert obj["b"] == String("x")
        assert obj.get("missing") is None
        assert "a" in obj
        assert list(obj) == ["a", "b"]
        assert len(obj) == 2

    def test_repeated_key_rejected(self):
        with pytest.raises(DuplicateKeyError) as exc_info:
            Object((("a", Int64(1)), ("b", Null()), ("a", Int64(2))))
        assert "['a']" in exc_info.value.internal()

    def test_from_pairs_last_value_first_position(self):
        obj = Object.from_pairs([("a", Int64(1)), ("b", Int64(2)), ("a", Int64(3))])
        assert obj.items == (("a", Int64(3)), ("b", Int64(2)))


class TestValueDepth:
    def test_scalar(self):
        assert value_depth(Int64(1)) == 0

    def test_empty_containers(self):
        assert value_depth(Array(())) == 1
        assert value_depth(Object(())) == 1

    def test_mixed(self, nested_value):
        assert value_depth(nested_value) == 3

    def test_deep_without_recursion(self):
        assert value_depth(nest_arrays(5000)) == 5000
