"""pyjsonbridge - Convert Python objects to and from JSON-like structured values."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyjsonbridge")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0.dev0"

from typing import Any

from pyjsonbridge._constants import DEFAULT_MAX_DEPTH
from pyjsonbridge._converter import Decoder, Encoder, RuntimeKind, runtime_kind
from pyjsonbridge._docs import DocPatcher, DocSlot, TargetKind, attach_doc, classify_target
from pyjsonbridge._errors import (
    AlreadyDocumentedError,
    AttributeNotSettableError,
    BridgeError,
    ConstructionFailedError,
    DuplicateKeyError,
    IntegerOutOfRangeError,
    InvalidTextError,
    MalformedTextError,
    MaxDepthExceededError,
    UnsupportedTypeError,
)
from pyjsonbridge._text import dumps, loads
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

__all__ = [
    "attach_doc",
    "decode",
    "dumps",
    "encode",
    "loads",
    "classify_target",
    "runtime_kind",
    "Decoder",
    "DocPatcher",
    "DocSlot",
    "Encoder",
    "RuntimeKind",
    "TargetKind",
    "Array",
    "Bool",
    "Float64",
    "Int64",
    "Null",
    "Object",
    "String",
    "UInt64",
    "Value",
    "AlreadyDocumentedError",
    "AttributeNotSettableError",
    "BridgeError",
    "ConstructionFailedError",
    "DuplicateKeyError",
    "IntegerOutOfRangeError",
    "InvalidTextError",
    "MalformedTextError",
    "MaxDepthExceededError",
    "UnsupportedTypeError",
]


def encode(obj: Any, *, max_depth: int | None = None) -> Value:
    """Convert a Python object into a structured value.

    Args:
        obj: The object to convert. It is only read, never modified.
        max_depth: Maximum container nesting depth. Defaults to 100.

    Returns:
        The structured value. Bytes become base64 ``String`` values.

    Raises:
        UnsupportedTypeError: If an object has no structured equivalent.
        IntegerOutOfRangeError: If an int fits neither int64 nor uint64.
        MaxDepthExceededError: If nesting exceeds ``max_depth``.
    """
    encoder = Encoder(DEFAULT_MAX_DEPTH if max_depth is None else max_depth)
    return encoder.encode(obj)


def decode(value: Value, *, max_depth: int | None = None) -> Any:
    """Build a new Python object from a structured value.

    Args:
        value: The structured value to convert.
        max_depth: Maximum container nesting depth. Defaults to 100.

    Returns:
        A new object owned by the caller: ``None``, ``bool``, ``int``,
        ``float``, ``str``, ``list`` or ``dict``.

    Raises:
        ConstructionFailedError: If Python runs out of memory building it.
        UnsupportedTypeError: If ``value`` is not a structured value.
        MaxDepthExceededError: If nesting exceeds ``max_depth``.
    """
    decoder = Decoder(DEFAULT_MAX_DEPTH if max_depth is None else max_depth)
    return decoder.decode(value)
