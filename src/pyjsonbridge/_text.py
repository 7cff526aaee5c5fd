"""JSON text notation for structured values.

Parsing keeps the integer width distinction (``Int64`` vs ``UInt64``) and
object key order, which a round trip through plain Python objects loses.
The transformer runs inside the LALR parser, so no recursion limit applies.
Nesting depth is checked against ``max_depth`` on the token stream, before
any value is built.
"""

from __future__ import annotations

import json

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError, VisitError

from pyjsonbridge._constants import DEFAULT_MAX_DEPTH
from pyjsonbridge._converter import Decoder, encode_integer
from pyjsonbridge._errors import (
    ERR_MSG_DEPTH_EXCEEDED,
    ERR_MSG_MALFORMED_TEXT,
    BridgeError,
    IntegerOutOfRangeError,
    MalformedTextError,
    MaxDepthExceededError,
)
from pyjsonbridge.values import (
    Array,
    Bool,
    Float64,
    Null,
    Object,
    String,
    Value,
)

_GRAMMAR = r"""
?start: value

?value: object
      | array
      | STRING         -> string
      | NUMBER         -> number
      | "true"         -> true
      | "false"        -> false
      | "null"         -> null

array  : "[" [value ("," value)*] "]"
object : "{" [pair ("," pair)*] "}"
pair   : STRING ":" value

NUMBER : /-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?/

%import common.ESCAPED_STRING -> STRING
%import common.WS
%ignore WS
"""


@v_args(inline=True)
class _ValueBuilder(Transformer):
    """Builds structured values from parse-tree reductions."""

    def string(self, token: Token) -> String:
        return String(_unquote(token))

    def number(self, token: Token) -> Value:
        text = str(token)
        if any(ch in text for ch in ".eE"):
            return Float64(float(text))
        try:
            return encode_integer(int(text))
        except IntegerOutOfRangeError:
            return Float64(float(text))

    def true(self) -> Bool:
        return Bool(True)

    def false(self) -> Bool:
        return Bool(False)

    def null(self) -> Null:
        return Null()

    def array(self, *items: Value | None) -> Array:
        # An empty array yields a single None placeholder.
        return Array(tuple(item for item in items if item is not None))

    def pair(self, key: Token, value: Value) -> tuple[str, Value]:
        return _unquote(key), value

    def object(self, *pairs: tuple[str, Value] | None) -> Object:
        return Object.from_pairs(pair for pair in pairs if pair is not None)


def _unquote(token: Token) -> str:
    try:
        return json.loads(str(token))
    except json.JSONDecodeError as e:
        raise MalformedTextError(
            ERR_MSG_MALFORMED_TEXT,
            f"invalid string literal at line {token.line}: {e.msg}",
            wrapped=e,
        ) from e


_parser = Lark(
    _GRAMMAR,
    parser="lalr",
    maybe_placeholders=True,
    transformer=_ValueBuilder(),
)


def _check_nesting(text: str, max_depth: int) -> None:
    depth = 0
    for token in _parser.lex(text):
        # String tokens keep their quotes, so a bracket inside one never matches.
        if token in ("[", "{"):
            depth += 1
            if depth > max_depth:
                raise MaxDepthExceededError(
                    ERR_MSG_DEPTH_EXCEEDED,
                    f"depth exceeds limit {max_depth} at line {token.line}",
                )
        elif token in ("]", "}"):
            depth -= 1


def loads(text: str | bytes, *, max_depth: int | None = None) -> Value:
    """Parse JSON text into a structured value.

    Args:
        text: JSON document. ``bytes`` are decoded as UTF-8.
        max_depth: Maximum container nesting depth. Defaults to 100.

    Raises:
        MalformedTextError: If the text is not valid JSON.
        MaxDepthExceededError: If the document nests deeper than ``max_depth``.
    """
    if max_depth is None:
        max_depth = DEFAULT_MAX_DEPTH
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTextError(
                ERR_MSG_MALFORMED_TEXT, f"text is not valid UTF-8: {e}", wrapped=e
            ) from e
    try:
        _check_nesting(text, max_depth)
        value = _parser.parse(text)
    except VisitError as e:
        if isinstance(e.orig_exc, BridgeError):
            raise e.orig_exc from e
        raise
    except LarkError as e:
        raise MalformedTextError(ERR_MSG_MALFORMED_TEXT, str(e), wrapped=e) from e
    return value


def dumps(
    value: Value,
    *,
    indent: int | None = None,
    max_depth: int | None = None,
) -> str:
    """Render a structured value as JSON text, keys in stored order.

    Raises:
        MalformedTextError: If the value holds a NaN or infinite float.
        MaxDepthExceededError: If the value nests deeper than ``max_depth``.
    """
    decoder = Decoder(DEFAULT_MAX_DEPTH if max_depth is None else max_depth)
    obj = decoder.decode(value)
    try:
        return json.dumps(obj, indent=indent, ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise MalformedTextError(
            "value cannot be represented as JSON text", str(e), wrapped=e
        ) from e
