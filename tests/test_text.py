"""JSON text notation tests."""

import pytest

from pyjsonbridge import _text, dumps, encode, loads
from pyjsonbridge._errors import MalformedTextError, MaxDepthExceededError
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


class TestLoadsScalars:
    def test_literals(self):
        assert loads("null") == Null()
        assert loads("true") == Bool(True)
        assert loads("false") == Bool(False)

    def test_signed_integer(self):
        assert loads("-7") == Int64(-7)

    def test_unsigned_integer(self):
        assert loads(str(2**64 - 1)) == UInt64(2**64 - 1)

    def test_huge_integer_becomes_float(self):
        assert loads(str(2**64)) == Float64(float(2**64))

    def test_float(self):
        assert loads("1.5") == Float64(1.5)
        assert loads("2e3") == Float64(2000.0)

    def test_string_escapes(self):
        assert loads(r'"a\"bé\n"') == String('a"bé\n')

    def test_bytes_input(self):
        assert loads(b'"x"') == String("x")


class TestLoadsContainers:
    def test_empty(self):
        assert loads("[]") == Array(())
        assert loads("{}") == Object(())

    def test_nested(self, nested_value):
        text = (
            '{"name": "vineyard", "id": -42, "ratio": 0.25, "enabled": true,'
            ' "parent": null, "members": [1, "two", []],'
            ' "meta": {"z": 0, "a": {}}}'
        )
        assert loads(text) == nested_value

    def test_duplicate_keys(self):
        assert loads('{"a": 1, "b": 2, "a": 3}').items == (
            ("a", Int64(3)),
            ("b", Int64(2)),
        )


class TestLoadsErrors:
    @pytest.mark.parametrize("text", ["", "[1,", "{'a': 1}", "01", "tru", '{"a" 1}'])
    def test_malformed(self, text):
        with pytest.raises(MalformedTextError):
            loads(text)

    def test_bad_escape(self):
        with pytest.raises(MalformedTextError):
            loads(r'"\q"')

    def test_invalid_utf8(self):
        with pytest.raises(MalformedTextError):
            loads(b'"\xff"')

    def test_depth_limit(self):
        with pytest.raises(MaxDepthExceededError):
            loads("[[[1]]]", max_depth=2)
        assert loads("[[1]]", max_depth=2) == Array((Array((Int64(1),)),))

    def test_deep_document_rejected_before_parsing(self, monkeypatch):
        def fail(text):
            raise AssertionError("parser should not run")

        monkeypatch.setattr(_text._parser, "parse", fail)
        depth = 200_000
        with pytest.raises(MaxDepthExceededError):
            loads("[" * depth + "]" * depth)

    def test_brackets_inside_strings_not_counted(self):
        assert loads('["[[[{{{"]', max_depth=1) == Array((String("[[[{{{"),))


class TestDumps:
    def test_compact(self):
        value = Object((("b", UInt64(2**63)), ("a", Array((Null(), Bool(False))))))
        assert dumps(value) == '{"b": 9223372036854775808, "a": [null, false]}'

    def test_indent(self):
        assert dumps(Array((Int64(1),)), indent=2) == "[\n  1\n]"

    def test_unicode_kept(self):
        assert dumps(String("é")) == '"é"'

    def test_nan_rejected(self):
        with pytest.raises(MalformedTextError):
            dumps(Float64(float("nan")))

    def test_depth_limit(self):
        with pytest.raises(MaxDepthExceededError):
            dumps(nest_arrays(3), max_depth=2)


class TestTextRoundTrip:
    def test_nested(self, nested_value):
        assert loads(dumps(nested_value)) == nested_value

    def test_from_python(self):
        value = encode({"blob": b"\x00\x01", "n": [2**63, -1, 0.5], 3: None})
        assert loads(dumps(value)) == value
