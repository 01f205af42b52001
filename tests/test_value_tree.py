import datetime

import pytest

from policycheck.tree.value import (
    ArrayNode,
    MapNode,
    ScalarNode,
    TreeError,
    kind_name,
    to_value,
)
from policycheck.validate.errors import ErrorKind


def _nest(depth):
    node = "leaf"
    for _ in range(depth):
        node = {"a": node}
    return node


def test_to_value_keeps_key_order():
    tree = to_value({"b": 1, "a": [True, None], "c": {"d": 1.5}})
    assert tree == MapNode((
        ("b", ScalarNode(1)),
        ("a", ArrayNode((ScalarNode(True), ScalarNode(None)))),
        ("c", MapNode((("d", ScalarNode(1.5)),))),
    ))


def test_to_value_passes_values_through():
    node = ScalarNode("x")
    assert to_value(node) is node
    assert to_value({"a": node}).items[0][1] is node


def test_match_dispatches_on_variant():
    handlers = (lambda m: "map", lambda a: "array", lambda s: "scalar")
    assert to_value({}).match(*handlers) == "map"
    assert to_value([]).match(*handlers) == "array"
    assert to_value(3).match(*handlers) == "scalar"


def test_kind_name():
    assert kind_name(to_value({"a": 1})) == "map"
    assert kind_name(to_value([1])) == "array"
    assert kind_name(to_value("s")) == "string"
    assert kind_name(to_value(1)) == "number"
    assert kind_name(to_value(False)) == "bool"
    assert kind_name(to_value(None)) == "null"


def test_non_string_keys_are_stringified():
    tree = to_value({1: "a", False: "b"})
    assert [k for k, _ in tree.items] == ["1", "false"]


def test_unknown_type_is_rejected_with_path():
    with pytest.raises(TreeError) as exc:
        to_value({"spec": {"when": datetime.date(2020, 1, 1)}})
    assert exc.value.kind is ErrorKind.UNKNOWN_TREE_NODE_TYPE
    assert exc.value.path == "/spec/when/"


def test_first_unknown_type_in_document_order():
    with pytest.raises(TreeError) as exc:
        to_value({"a": [1, {"b": object()}], "c": object()})
    assert exc.value.path == "/a/1/b/"


def test_depth_is_bounded():
    to_value(_nest(5), max_depth=5)
    with pytest.raises(TreeError) as exc:
        to_value(_nest(6), max_depth=5)
    assert exc.value.kind is ErrorKind.PATTERN_TOO_DEEP


def test_high_depth_bound_does_not_hit_the_interpreter_limit():
    tree = to_value(_nest(3000), max_depth=5000)
    depth = 0
    while isinstance(tree, MapNode):
        tree = tree.items[0][1]
        depth += 1
    assert depth == 3000
    assert tree == ScalarNode("leaf")
