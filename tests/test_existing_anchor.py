import datetime

from policycheck.policy.model import Rule, Validation
from policycheck.tree.value import ArrayNode, MapNode, ScalarNode
from policycheck.validate.anchors import validate_existing_anchor_on_pattern, validate_existing_anchors
from policycheck.validate.errors import ErrorKind


def test_well_formed_pattern_passes():
    pattern = {
        "spec": {
            "containers": [
                {"name": "*", "=(securityContext)": {"=(privileged)": False}},
            ],
        },
    }
    assert validate_existing_anchor_on_pattern(pattern) is None


def test_existing_anchor_on_array_passes():
    pattern = {"spec": {"^(containers)": [{"name": "nginx"}]}}
    assert validate_existing_anchor_on_pattern(pattern) is None


def test_existing_anchor_on_scalar():
    err = validate_existing_anchor_on_pattern({"spec": {"containers": {"^(name)": "nginx"}}})
    assert err.kind is ErrorKind.ANCHOR_NOT_ON_ARRAY
    assert err.path == "/spec/containers/"
    assert "/spec/containers/^(name)" in err.message
    assert "string" in err.message


def test_existing_anchor_on_map():
    err = validate_existing_anchor_on_pattern({"^(spec)": {"a": 1}})
    assert err.kind is ErrorKind.ANCHOR_NOT_ON_ARRAY
    assert err.path == "/"
    assert "found: map" in err.message


def test_empty_array_anywhere():
    err = validate_existing_anchor_on_pattern({"spec": {"containers": []}})
    assert err.kind is ErrorKind.EMPTY_PATTERN_ARRAY
    assert err.path == "/spec/containers/"
    assert err.message == "pattern array at /spec/containers/ is empty"


def test_empty_array_under_anchor():
    err = validate_existing_anchor_on_pattern({"^(volumes)": []})
    assert err.kind is ErrorKind.EMPTY_PATTERN_ARRAY
    assert err.path == "/volumes/"


def test_array_elements_extend_path_with_index():
    pattern = {"spec": {"containers": [{"name": "a"}, {"ports": {"^(port)": 80}}]}}
    err = validate_existing_anchor_on_pattern(pattern)
    assert err.path == "/spec/containers/1/ports/"


def test_anchor_string_as_value():
    err = validate_existing_anchor_on_pattern({"spec": {"image": "^(nginx)"}})
    assert err.kind is ErrorKind.ANCHOR_NOT_ON_ARRAY
    assert err.path == "/spec/image/"


def test_other_anchor_strings_as_values_pass():
    assert validate_existing_anchor_on_pattern({"image": "=(nginx)"}) is None


def test_first_violation_wins():
    pattern = {"a": {"^(x)": 1}, "b": []}
    err = validate_existing_anchor_on_pattern(pattern)
    assert err.kind is ErrorKind.ANCHOR_NOT_ON_ARRAY
    assert err.path == "/a/"


def test_unknown_type():
    err = validate_existing_anchor_on_pattern({"spec": {"created": datetime.datetime(2020, 1, 1)}})
    assert err.kind is ErrorKind.UNKNOWN_TREE_NODE_TYPE
    assert err.path == "/spec/created/"


def test_depth_bound():
    pattern = [[[["x"]]]]
    assert validate_existing_anchor_on_pattern(pattern, max_depth=4) is None
    err = validate_existing_anchor_on_pattern(pattern, max_depth=3)
    assert err.kind is ErrorKind.PATTERN_TOO_DEEP


def test_depth_bound_on_built_tree():
    tree = MapNode((("a", MapNode((("b", ScalarNode(1)),))),))
    err = validate_existing_anchor_on_pattern(tree, max_depth=1)
    assert err.kind is ErrorKind.PATTERN_TOO_DEEP
    assert validate_existing_anchor_on_pattern(ArrayNode((ScalarNode(1),))) is None


def test_scalar_root():
    assert validate_existing_anchor_on_pattern("plain") is None
    assert validate_existing_anchor_on_pattern(None) is None


def test_any_pattern_reports_each_entry():
    rule = Rule(name="r", validation=Validation(any_pattern=[
        {"a": {"^(b)": "c"}},
        {"ok": 1},
        {"d": []},
    ]))
    errs = validate_existing_anchors(rule)
    assert [e.kind for e in errs] == [ErrorKind.ANCHOR_NOT_ON_ARRAY, ErrorKind.EMPTY_PATTERN_ARRAY]


def test_rule_without_patterns():
    assert validate_existing_anchors(Rule(name="r")) == []


def _nest(depth, leaf="leaf"):
    node = leaf
    for _ in range(depth):
        node = {"a": node}
    return node


def test_deep_pattern_within_a_large_bound():
    assert validate_existing_anchor_on_pattern(_nest(400), max_depth=500) is None
    assert validate_existing_anchor_on_pattern(_nest(2000), max_depth=5000) is None


def test_deep_pattern_over_a_large_bound():
    err = validate_existing_anchor_on_pattern(_nest(600), max_depth=500)
    assert err.kind is ErrorKind.PATTERN_TOO_DEEP


def test_violation_at_the_bottom_of_a_deep_pattern():
    err = validate_existing_anchor_on_pattern(_nest(1500, leaf={"^(x)": 1}), max_depth=2000)
    assert err.kind is ErrorKind.ANCHOR_NOT_ON_ARRAY
    assert err.path == "/" + "a/" * 1500


def test_sibling_keys_checked_after_earlier_subtree():
    pattern = {"a": {"b": []}, "^(c)": 1}
    err = validate_existing_anchor_on_pattern(pattern)
    assert err.kind is ErrorKind.EMPTY_PATTERN_ARRAY
    assert err.path == "/a/b/"
