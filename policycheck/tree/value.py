# policycheck/tree/value.py
"""
Value tree: the schema-less shape of a pattern.

A pattern is a Map, an Array or a Scalar, nothing else. Parser output
(dicts, lists and JSON scalars) is adapted with `to_value`, which is also
where anything that is not one of those gets rejected.

Traversals dispatch with `node.match(on_map, on_array, on_scalar)`; each node
class calls exactly one of the three, so there is no fallback branch.
Both `to_value` and the pattern walk keep their own stack, so the depth
bound is the only limit on nesting.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Tuple, TypeVar, Union

from ..config import MAX_DEPTH
from ..validate.errors import ErrorKind, ValidationError

T = TypeVar("T")

Scalar = Union[str, int, float, bool, None]
_SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class MapNode:
    items: Tuple[Tuple[str, "Value"], ...] = ()

    def match(self, on_map: Callable[["MapNode"], T], on_array, on_scalar) -> T:
        return on_map(self)


@dataclass(frozen=True)
class ArrayNode:
    elements: Tuple["Value", ...] = ()

    def match(self, on_map, on_array: Callable[["ArrayNode"], T], on_scalar) -> T:
        return on_array(self)


@dataclass(frozen=True)
class ScalarNode:
    value: Scalar = None

    def match(self, on_map, on_array, on_scalar: Callable[["ScalarNode"], T]) -> T:
        return on_scalar(self)

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)


Value = Union[MapNode, ArrayNode, ScalarNode]
VALUE_TYPES = (MapNode, ArrayNode, ScalarNode)


def kind_name(node: Value) -> str:
    return node.match(lambda m: "map", lambda a: "array", lambda s: _scalar_name(s.value))


def _scalar_name(value: Scalar) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


class TreeError(ValueError):
    def __init__(self, kind: ErrorKind, message: str, path: str):
        super().__init__(message)
        self.kind = kind
        self.path = path

    def to_validation_error(self) -> ValidationError:
        return ValidationError(self.kind, str(self), self.path)


def too_deep(path: str, max_depth: int) -> TreeError:
    return TreeError(
        ErrorKind.PATTERN_TOO_DEEP,
        f"pattern exceeds maximum depth of {max_depth}, path: {path}",
        path,
    )


def to_value(raw: Any, path: str = "/", max_depth: int = MAX_DEPTH) -> Value:
    """Adapt parsed YAML/JSON data into a Value tree.

    Raises TreeError for unsupported Python types or nesting deeper than
    `max_depth`. Map keys are stringified the way a JSON encoder would.
    Nodes are visited pre-order, left to right, so the first offending node
    in document order is the one reported.
    """
    root: List[Any] = [None]
    # ("build", raw, path, depth, slots, index) or ("seal", make, slots, parent_slots, index)
    stack: List[tuple] = [("build", raw, path, 0, root, 0)]
    while stack:
        task = stack.pop()
        if task[0] == "seal":
            _, make, parts, sink, slot = task
            sink[slot] = make(parts)
            continue

        _, raw, path, depth, sink, slot = task
        if isinstance(raw, VALUE_TYPES):
            sink[slot] = raw
            continue
        if depth > max_depth:
            raise too_deep(path, max_depth)
        if isinstance(raw, dict):
            keys = [_key_str(k, path) for k in raw]
            parts: List[Any] = [None] * len(keys)
            stack.append(("seal", lambda vs, keys=keys: MapNode(tuple(zip(keys, vs))), parts, sink, slot))
            children = [(f"{path}{k}/", v) for k, v in zip(keys, raw.values())]
        elif isinstance(raw, (list, tuple)):
            parts = [None] * len(raw)
            stack.append(("seal", lambda vs: ArrayNode(tuple(vs)), parts, sink, slot))
            children = [(f"{path}{i}/", v) for i, v in enumerate(raw)]
        elif isinstance(raw, _SCALAR_TYPES):
            sink[slot] = ScalarNode(raw)
            continue
        else:
            raise TreeError(
                ErrorKind.UNKNOWN_TREE_NODE_TYPE,
                f"pattern contains unknown type {type(raw).__name__}, path: {path}",
                path,
            )
        for i in reversed(range(len(children))):
            child_path, child = children[i]
            stack.append(("build", child, child_path, depth + 1, parts, i))
    return root[0]


def _key_str(key: Any, path: str) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float)) or key is None:
        return "null" if key is None else str(key)
    raise TreeError(
        ErrorKind.UNKNOWN_TREE_NODE_TYPE,
        f"pattern contains unknown key type {type(key).__name__}, path: {path}",
        path,
    )
