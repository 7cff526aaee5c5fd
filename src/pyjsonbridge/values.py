"""Structured value types: the JSON-like canonical form."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from pyjsonbridge._constants import INT64_MAX, INT64_MIN, UINT64_MAX
from pyjsonbridge._errors import (
    ERR_MSG_DUPLICATE_KEY,
    DuplicateKeyError,
    IntegerOutOfRangeError,
)


@dataclass(frozen=True)
class Null:
    pass


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Int64:
    """Signed 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise IntegerOutOfRangeError(
                "integer out of range for int64",
                f"{self.value} is outside [{INT64_MIN}, {INT64_MAX}]",
            )


@dataclass(frozen=True)
class UInt64:
    """Unsigned 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= UINT64_MAX:
            raise IntegerOutOfRangeError(
                "integer out of range for uint64",
                f"{self.value} is outside [0, {UINT64_MAX}]",
            )


@dataclass(frozen=True)
class Float64:
    value: float


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Array:
    """Ordered sequence of structured values."""

    items: tuple[Value, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


@dataclass(frozen=True)
class Object:
    """String-keyed mapping of structured values.

    Key order is insertion order and takes part in equality, so two objects
    with the same entries in a different order are not equal.
    """

    items: tuple[tuple[str, Value], ...] = ()
    _index: dict[str, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        index = {key: i for i, (key, _) in enumerate(self.items)}
        if len(index) != len(self.items):
            seen: set[str] = set()
            repeated = [key for key, _ in self.items if key in seen or seen.add(key)]
            raise DuplicateKeyError(
                ERR_MSG_DUPLICATE_KEY,
                f"object keys repeated: {repeated!r}; use Object.from_pairs to merge",
            )
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Value]]) -> Object:
        """Build an object, collapsing duplicate keys.

        A repeated key keeps the position of its first occurrence and the
        value of its last.
        """
        merged: dict[str, Value] = {}
        for key, value in pairs:
            merged[key] = value
        return cls(tuple(merged.items()))

    def keys(self) -> list[str]:
        return [key for key, _ in self.items]

    def values(self) -> list[Value]:
        return [value for _, value in self.items]

    def get(self, key: str, default: Value | None = None) -> Value | None:
        pos = self._index.get(key)
        if pos is None:
            return default
        return self.items[pos][1]

    def __getitem__(self, key: str) -> Value:
        return self.items[self._index[key]][1]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


Scalar = Null | Bool | Int64 | UInt64 | Float64 | String
Value = Scalar | Array | Object

VALUE_TYPES = (Null, Bool, Int64, UInt64, Float64, String, Array, Object)


def value_depth(value: Value) -> int:
    """Return the nesting depth of *value* without recursing.

    Scalars have depth 0; a container is one deeper than its deepest child.
    """
    deepest = 0
    stack: list[tuple[Value, int]] = [(value, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, Array):
            depth += 1
            stack.extend((child, depth) for child in node.items)
        elif isinstance(node, Object):
            depth += 1
            stack.extend((child, depth) for _, child in node.items)
        deepest = max(deepest, depth)
    return deepest
