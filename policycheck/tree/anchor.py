# policycheck/tree/anchor.py
"""
Anchors are decorations on map keys inside a pattern:

    (key)    condition
    ^(key)   existing   (only meaningful on arrays)
    =(key)   equality
    X(key)   negation
    +(key)   addition

A key is an anchor only if the wrapped name is non-empty.
"""
from __future__ import annotations

from enum import Enum
from typing import Tuple


class AnchorKind(str, Enum):
    PLAIN = "plain"
    CONDITION = "condition"
    EXISTING = "existing"
    EQUALITY = "equality"
    NEGATION = "negation"
    ADDITION = "addition"


_PREFIXES = (
    ("^(", AnchorKind.EXISTING),
    ("=(", AnchorKind.EQUALITY),
    ("X(", AnchorKind.NEGATION),
    ("+(", AnchorKind.ADDITION),
    ("(", AnchorKind.CONDITION),
)


def classify(key: str) -> Tuple[AnchorKind, str]:
    """Return (kind, plain key) for a map key."""
    if not key.endswith(")"):
        return AnchorKind.PLAIN, key
    for prefix, kind in _PREFIXES:
        if key.startswith(prefix) and len(key) > len(prefix) + 1:
            return kind, key[len(prefix):-1]
    return AnchorKind.PLAIN, key


def has_existing_anchor(s: str) -> Tuple[bool, str]:
    kind, plain = classify(s)
    if kind is AnchorKind.EXISTING:
        return True, plain
    return False, s
