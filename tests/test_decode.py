"""Structured value to Python object conversion tests."""

import pytest

from pyjsonbridge import decode, encode
from pyjsonbridge._converter import Decoder
from pyjsonbridge._errors import (
    ConstructionFailedError,
    MaxDepthExceededError,
    UnsupportedTypeError,
)
from pyjsonbridge.values import (
    Array,
    Bool,
    Float64,
    Int64,
    Null,
    Object,
    String,
    UInt64,
)
from tests.conftest import nest_arrays


class TestScalars:
    def test_null(self):
        assert decode(Null()) is None

    def test_bool(self):
        assert decode(Bool(False)) is False

    def test_int64(self):
        result = decode(Int64(-5))
        assert result == -5
        assert type(result) is int

    def test_uint64(self):
        assert decode(UInt64(2**64 - 1)) == 2**64 - 1

    def test_float(self):
        assert decode(Float64(2.5)) == 2.5

    def test_string(self):
        assert decode(String("x")) == "x"


class TestContainers:
    def test_array_to_list(self):
        assert decode(Array((Int64(1), Null()))) == [1, None]

    def test_object_to_dict_in_order(self):
        result = decode(Object((("b", Int64(1)), ("a", Int64(2)))))
        assert list(result.items()) == [("b", 1), ("a", 2)]

    def test_empty(self):
        assert decode(Array(())) == []
        assert decode(Object(())) == {}

    def test_nested(self, nested_value):
        assert decode(nested_value) == {
            "name": "vineyard",
            "id": -42,
            "ratio": 0.25,
            "enabled": True,
            "parent": None,
            "members": [1, "two", []],
            "meta": {"z": 0, "a": {}},
        }

    def test_returns_fresh_objects(self):
        value = Array((Array(()),))
        first = decode(value)
        second = decode(value)
        assert first == second
        assert first is not second
        assert first[0] is not second[0]


class TestErrors:
    def test_not_a_structured_value(self):
        with pytest.raises(UnsupportedTypeError):
            decode([1, 2])

    def test_bad_node_inside_array(self):
        with pytest.raises(UnsupportedTypeError, match="unsupported type: int"):
            decode(Array((Int64(1), 2)))

    def test_memory_error_becomes_construction_failed(self, monkeypatch):
        def fail(self, node, depth, work, results):
            raise MemoryError

        monkeypatch.setattr(Decoder, "_visit", fail)
        with pytest.raises(ConstructionFailedError) as exc_info:
            decode(Int64(1))
        assert isinstance(exc_info.value.wrapped, MemoryError)


class TestDepthLimit:
    def test_custom_limit(self):
        with pytest.raises(MaxDepthExceededError):
            decode(nest_arrays(3), max_depth=2)

    def test_deep_value_beyond_recursion_limit(self):
        result = Decoder(max_depth=5000).decode(nest_arrays(5000))
        assert isinstance(result, list)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "value",
        [
            Null(),
            Bool(True),
            Int64(-(2**63)),
            Float64(-0.5),
            String(""),
            Array(()),
            Object(()),
            Array((Object((("k", Array((Bool(False),))),)),)),
        ],
    )
    def test_encode_decode(self, value):
        assert encode(decode(value)) == value

    def test_nested_object_keeps_key_order(self, nested_value):
        assert encode(decode(nested_value)) == nested_value

    def test_unsigned_round_trip(self):
        assert encode(decode(UInt64(2**63))) == UInt64(2**63)

    def test_small_unsigned_collapses_to_signed(self):
        assert encode(decode(UInt64(7))) == Int64(7)
