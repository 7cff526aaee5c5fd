"""Two-way conversion between Python objects and structured values."""

from __future__ import annotations

import base64
import ctypes
import enum
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyjsonbridge._constants import DEFAULT_MAX_DEPTH
from pyjsonbridge._errors import (
    ERR_MSG_CONSTRUCTION_FAILED,
    ERR_MSG_DEPTH_EXCEEDED,
    ERR_MSG_INTEGER_OUT_OF_RANGE,
    ERR_MSG_UNSUPPORTED_TYPE,
    ConstructionFailedError,
    IntegerOutOfRangeError,
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
    Value,
)

logger = logging.getLogger(__name__)


class RuntimeKind(enum.StrEnum):
    NULL = "null"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    BYTES = "bytes"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    UNSUPPORTED = "unsupported"


# Checked in order, first match wins. bool must precede int since
# bool is an int subclass.
_KIND_CHECKS: tuple[tuple[RuntimeKind, Callable[[object], bool]], ...] = (
    (RuntimeKind.NULL, lambda obj: obj is None),
    (RuntimeKind.BOOL, lambda obj: isinstance(obj, bool)),
    (RuntimeKind.INTEGER, lambda obj: isinstance(obj, int)),
    (RuntimeKind.FLOAT, lambda obj: isinstance(obj, float)),
    (RuntimeKind.BYTES, lambda obj: isinstance(obj, (bytes, bytearray))),
    (RuntimeKind.STRING, lambda obj: isinstance(obj, str)),
    (RuntimeKind.SEQUENCE, lambda obj: isinstance(obj, (list, tuple))),
    (RuntimeKind.MAPPING, lambda obj: isinstance(obj, Mapping)),
)


def runtime_kind(obj: object) -> RuntimeKind:
    """Classify a Python object for encoding."""
    for kind, check in _KIND_CHECKS:
        if check(obj):
            return kind
    return RuntimeKind.UNSUPPORTED


def encode_integer(value: int) -> Int64 | UInt64:
    """Encode an int as Int64, falling back to UInt64.

    Each width is tried with a wrapping cast and accepted only if the
    cast value compares equal to the original.
    """
    signed = ctypes.c_int64(value).value
    if signed == value:
        return Int64(signed)
    unsigned = ctypes.c_uint64(value).value
    if unsigned == value:
        return UInt64(unsigned)
    raise IntegerOutOfRangeError(
        ERR_MSG_INTEGER_OUT_OF_RANGE,
        f"integer out of range for both int64 and uint64: {value!r}",
    )


def _depth_exceeded(depth: int, limit: int) -> MaxDepthExceededError:
    logger.debug("nesting depth %d exceeds limit %d", depth, limit)
    return MaxDepthExceededError(
        ERR_MSG_DEPTH_EXCEEDED,
        f"depth {depth} exceeds limit {limit}",
    )


# Work-stack opcodes. _VISIT converts one input node; the _BUILD_* ops pop
# already-converted children off the result stack and assemble a container.
_VISIT = 0
_BUILD_ARRAY = 1
_BUILD_OBJECT = 2


def _pop_children(results: list[Any], count: int) -> list[Any]:
    start = len(results) - count
    children = results[start:]
    del results[start:]
    return children


class Encoder:
    """Converts Python objects into structured values.

    Traversal uses an explicit work stack, so deep inputs are bounded by
    ``max_depth`` rather than the interpreter's recursion limit.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def encode(self, obj: object) -> Value:
        results: list[Value] = []
        work: list[tuple[int, Any, int]] = [(_VISIT, obj, 0)]
        while work:
            op, item, depth = work.pop()
            if op == _BUILD_ARRAY:
                results.append(Array(tuple(_pop_children(results, item))))
            elif op == _BUILD_OBJECT:
                children = _pop_children(results, len(item))
                results.append(Object.from_pairs(zip(item, children)))
            else:
                self._visit(item, depth, work, results)
        return results[0]

    def _visit(
        self,
        obj: object,
        depth: int,
        work: list[tuple[int, Any, int]],
        results: list[Value],
    ) -> None:
        kind = runtime_kind(obj)
        if kind is RuntimeKind.NULL:
            results.append(Null())
        elif kind is RuntimeKind.BOOL:
            results.append(Bool(obj))
        elif kind is RuntimeKind.INTEGER:
            results.append(encode_integer(obj))
        elif kind is RuntimeKind.FLOAT:
            results.append(Float64(float(obj)))
        elif kind is RuntimeKind.BYTES:
            results.append(String(base64.b64encode(obj).decode("ascii")))
        elif kind is RuntimeKind.STRING:
            results.append(String(str(obj)))
        elif kind is RuntimeKind.SEQUENCE:
            self._enter(depth)
            elements = list(obj)
            work.append((_BUILD_ARRAY, len(elements), depth))
            work.extend((_VISIT, element, depth + 1) for element in reversed(elements))
        elif kind is RuntimeKind.MAPPING:
            self._enter(depth)
            entries = list(obj.items())
            keys = [key if isinstance(key, str) else str(key) for key, _ in entries]
            values = [value for _, value in entries]
            work.append((_BUILD_OBJECT, keys, depth))
            work.extend((_VISIT, value, depth + 1) for value in reversed(values))
        else:
            type_name = type(obj).__qualname__
            raise UnsupportedTypeError(
                f"{ERR_MSG_UNSUPPORTED_TYPE}: {type_name}",
                f"cannot encode object of type {type_name}: {obj!r}",
                type_name=type_name,
            )

    def _enter(self, depth: int) -> None:
        if depth + 1 > self._max_depth:
            raise _depth_exceeded(depth + 1, self._max_depth)


class Decoder:
    """Builds new Python objects from structured values.

    Containers are assembled bottom-up; nothing is returned unless the
    whole value decodes.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def decode(self, value: Value) -> Any:
        try:
            return self._decode(value)
        except MemoryError as e:
            raise ConstructionFailedError(
                ERR_MSG_CONSTRUCTION_FAILED,
                f"out of memory while decoding {type(value).__name__}",
                wrapped=e,
            ) from e

    def _decode(self, value: Value) -> Any:
        results: list[Any] = []
        work: list[tuple[int, Any, int]] = [(_VISIT, value, 0)]
        while work:
            op, item, depth = work.pop()
            if op == _BUILD_ARRAY:
                results.append(_pop_children(results, item))
            elif op == _BUILD_OBJECT:
                children = _pop_children(results, len(item))
                results.append(dict(zip(item, children)))
            else:
                self._visit(item, depth, work, results)
        return results[0]

    def _visit(
        self,
        node: Value,
        depth: int,
        work: list[tuple[int, Any, int]],
        results: list[Any],
    ) -> None:
        if isinstance(node, Null):
            results.append(None)
        elif isinstance(node, Bool):
            results.append(bool(node.value))
        elif isinstance(node, (Int64, UInt64)):
            results.append(int(node.value))
        elif isinstance(node, Float64):
            results.append(float(node.value))
        elif isinstance(node, String):
            results.append(str(node.value))
        elif isinstance(node, Array):
            self._enter(depth)
            work.append((_BUILD_ARRAY, len(node.items), depth))
            work.extend((_VISIT, child, depth + 1) for child in reversed(node.items))
        elif isinstance(node, Object):
            self._enter(depth)
            work.append((_BUILD_OBJECT, node.keys(), depth))
            work.extend((_VISIT, child, depth + 1) for child in reversed(node.values()))
        else:
            type_name = type(node).__qualname__
            raise UnsupportedTypeError(
                f"{ERR_MSG_UNSUPPORTED_TYPE}: {type_name}",
                f"not a structured value: {node!r}",
                type_name=type_name,
            )

    def _enter(self, depth: int) -> None:
        if depth + 1 > self._max_depth:
            raise _depth_exceeded(depth + 1, self._max_depth)
