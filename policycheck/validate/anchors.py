# policycheck/validate/anchors.py
"""
Existing anchors (``^(key)``) select array elements, so they may only be
bound to arrays. The walk is depth-first, pre-order, left to right and
returns the first violation it meets; callers run it once per pattern.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..config import MAX_DEPTH
from ..policy.model import Rule
from ..tree.anchor import AnchorKind, classify, has_existing_anchor
from ..tree.value import ArrayNode, MapNode, ScalarNode, TreeError, Value, kind_name, to_value, too_deep
from .errors import ErrorKind, ValidationError

log = logging.getLogger(__name__)


def _anchor_not_on_array(path: str, anchor: str, found: str) -> ValidationError:
    return ValidationError(
        ErrorKind.ANCHOR_NOT_ON_ARRAY,
        f"existing anchor at {path}{anchor} must be of type array, found: {found}",
        path,
    )


class _Walker:
    """Explicit-stack walk.

    Stack entries are ("node", node, path, depth) or ("entry", key, child,
    path, depth); a map's key is only checked once every earlier sibling's
    subtree is done.
    """

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self.stack: List[tuple] = []

    def walk(self, root: Value, path: str) -> Optional[ValidationError]:
        self.stack = [("node", root, path, 0)]
        while self.stack:
            task = self.stack.pop()
            if task[0] == "entry":
                err = self.visit_entry(*task[1:])
            else:
                _, node, path, depth = task
                if depth > self.max_depth:
                    return too_deep(path, self.max_depth).to_validation_error()
                err = node.match(
                    lambda m: self.visit_map(m, path, depth),
                    lambda a: self.visit_array(a, path, depth),
                    lambda s: self.visit_scalar(s, path),
                )
            if err is not None:
                return err
        return None

    def visit_entry(self, key: str, child: Value, path: str, depth: int) -> Optional[ValidationError]:
        kind, plain = classify(key)
        if kind is AnchorKind.EXISTING and not isinstance(child, ArrayNode):
            return _anchor_not_on_array(path, key, kind_name(child))
        self.stack.append(("node", child, f"{path}{plain}/", depth + 1))
        return None

    def visit_map(self, node: MapNode, path: str, depth: int) -> Optional[ValidationError]:
        for key, child in reversed(node.items):
            self.stack.append(("entry", key, child, path, depth))
        return None

    def visit_array(self, node: ArrayNode, path: str, depth: int) -> Optional[ValidationError]:
        if not node.elements:
            return ValidationError(ErrorKind.EMPTY_PATTERN_ARRAY, f"pattern array at {path} is empty", path)
        for i in reversed(range(len(node.elements))):
            self.stack.append(("node", node.elements[i], f"{path}{i}/", depth + 1))
        return None

    def visit_scalar(self, node: ScalarNode, path: str) -> Optional[ValidationError]:
        # an anchor is only legal as a key
        if node.is_string and has_existing_anchor(node.value)[0]:
            return _anchor_not_on_array(path, node.value, "string")
        return None


def validate_existing_anchor_on_pattern(
    pattern: Any, path: str = "/", max_depth: int = MAX_DEPTH
) -> Optional[ValidationError]:
    """Check one pattern tree; `pattern` is a Value or raw parsed data."""
    try:
        root = to_value(pattern, path, max_depth)
    except TreeError as e:
        log.debug("pattern rejected while building tree: %s", e)
        return e.to_validation_error()
    return _Walker(max_depth).walk(root, path)


def validate_existing_anchors(rule: Rule, max_depth: int = MAX_DEPTH) -> List[ValidationError]:
    errs: List[ValidationError] = []
    v = rule.validation
    if v.pattern is not None:
        err = validate_existing_anchor_on_pattern(v.pattern, "/", max_depth)
        if err is not None:
            errs.append(err)
    for pattern in v.any_pattern:
        err = validate_existing_anchor_on_pattern(pattern, "/", max_depth)
        if err is not None:
            errs.append(err)
    return errs
