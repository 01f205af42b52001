import pytest

from policycheck.tree.anchor import AnchorKind, classify, has_existing_anchor


@pytest.mark.parametrize("key,kind,plain", [
    ("name", AnchorKind.PLAIN, "name"),
    ("^(name)", AnchorKind.EXISTING, "name"),
    ("=(securityContext)", AnchorKind.EQUALITY, "securityContext"),
    ("X(hostPath)", AnchorKind.NEGATION, "hostPath"),
    ("+(imagePullPolicy)", AnchorKind.ADDITION, "imagePullPolicy"),
    ("(image)", AnchorKind.CONDITION, "image"),
])
def test_classify(key, kind, plain):
    assert classify(key) == (kind, plain)


@pytest.mark.parametrize("key", ["^()", "()", "^(name", "name)", "", "^name"])
def test_malformed_anchors_are_plain(key):
    assert classify(key) == (AnchorKind.PLAIN, key)


def test_has_existing_anchor():
    assert has_existing_anchor("^(containers)") == (True, "containers")
    assert has_existing_anchor("=(containers)") == (False, "=(containers)")
    assert has_existing_anchor("nginx") == (False, "nginx")
