# policycheck/policy/selector.py
"""
Label selector -> requirement list, following Kubernetes selector rules.

Rules:
- matchLabels entries become equality requirements
- operators: In, NotIn, Exists, DoesNotExist
- In/NotIn need at least one value; Exists/DoesNotExist take none
- keys are qualified names ([prefix/]name), values are label values
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from .model import LabelSelector

_NAME_RX = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS1123_SUBDOMAIN_RX = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_NAME_MAX = 63
_PREFIX_MAX = 253

OPERATORS = ("In", "NotIn", "Exists", "DoesNotExist")


class SelectorError(ValueError):
    pass


@dataclass(frozen=True)
class Requirement:
    key: str
    operator: str  # "=" for matchLabels, otherwise one of OPERATORS
    values: Tuple[str, ...] = ()


def _check_key(key: str) -> None:
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix:
            raise SelectorError(f"invalid label key {key!r}: prefix part must be non-empty")
        if len(prefix) > _PREFIX_MAX or not _DNS1123_SUBDOMAIN_RX.match(prefix):
            raise SelectorError(f"invalid label key {key!r}: prefix part must be a DNS subdomain")
    if not name:
        raise SelectorError(f"invalid label key {key!r}: name part must be non-empty")
    if len(name) > _NAME_MAX or not _NAME_RX.match(name):
        raise SelectorError(
            f"invalid label key {key!r}: name part must consist of alphanumeric characters, "
            f"'-', '_' or '.', start and end with an alphanumeric character, at most {_NAME_MAX} characters"
        )


def _check_value(key: str, value) -> None:
    if not isinstance(value, str):
        raise SelectorError(f"invalid label value for {key!r}: expected a string, found {type(value).__name__}")
    if value == "":
        return
    if len(value) > _NAME_MAX or not _NAME_RX.match(value):
        raise SelectorError(f"invalid label value {value!r} for key {key!r}")


def compile_selector(selector: LabelSelector) -> List[Requirement]:
    """Compile a selector; raises SelectorError on the first invalid entry."""
    reqs: List[Requirement] = []
    for key, value in selector.match_labels.items():
        _check_key(key)
        _check_value(key, value)
        reqs.append(Requirement(key, "=", (value,)))

    for expr in selector.match_expressions:
        _check_key(expr.key)
        if expr.operator in ("In", "NotIn"):
            if not expr.values:
                raise SelectorError(f"values must be non-empty for operator {expr.operator!r} on key {expr.key!r}")
        elif expr.operator in ("Exists", "DoesNotExist"):
            if expr.values:
                raise SelectorError(f"values must be empty for operator {expr.operator!r} on key {expr.key!r}")
        else:
            raise SelectorError(f"{expr.operator!r} is not a valid label selector operator")
        for v in expr.values:
            _check_value(expr.key, v)
        reqs.append(Requirement(expr.key, expr.operator, tuple(sorted(expr.values))))

    reqs.sort(key=lambda r: r.key)
    return reqs
