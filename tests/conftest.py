"""Shared test fixtures."""

import pytest

from pyjsonbridge.values import Array, Bool, Float64, Int64, Null, Object, String


@pytest.fixture
def nested_value():
    return Object((
        ("name", String("vineyard")),
        ("id", Int64(-42)),
        ("ratio", Float64(0.25)),
        ("enabled", Bool(True)),
        ("parent", Null()),
        ("members", Array((Int64(1), String("two"), Array(())))),
        ("meta", Object((("z", Int64(0)), ("a", Object(())))))
    ))


def nest_lists(depth):
    """Build ``depth`` levels of nested lists without recursion."""
    root = []
    node = root
    for _ in range(depth - 1):
        child = []
        node.append(child)
        node = child
    return root


def nest_arrays(depth):
    value = Array(())
    for _ in range(depth - 1):
        value = Array((value,))
    return value
