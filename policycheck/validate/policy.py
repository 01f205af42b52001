# policycheck/validate/policy.py
"""
Whole-policy validation.

Per rule every check runs and all errors are kept, in this order:
rule type, match resources, exclude resources, overlay pattern, existing
anchors (then patches and generation when strict). Rule-name uniqueness is
checked afterwards and stops at the first duplicate.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from ..config import MAX_DEPTH, STRICT
from ..policy.model import Policy, Rule
from .anchors import validate_existing_anchors
from .errors import ErrorKind, ValidationError, ValidationResult
from .fields import (
    validate_generation,
    validate_overlay_pattern,
    validate_patch,
    validate_resource_description,
    validate_rule_type,
)

log = logging.getLogger(__name__)


def validate_rule(rule: Rule, strict: bool = STRICT, max_depth: int = MAX_DEPTH) -> List[ValidationError]:
    found: List[Optional[ValidationError]] = [
        validate_rule_type(rule),
        validate_resource_description(rule.match.resources),
        validate_resource_description(rule.exclude.resources),
        validate_overlay_pattern(rule),
    ]
    found.extend(validate_existing_anchors(rule, max_depth))

    if strict:
        found.extend(validate_patch(p) for p in rule.mutation.patches)
        if rule.has_generate():
            found.append(validate_generation(rule.generation))

    return [e.for_rule(rule.name) for e in found if e is not None]


def validate_unique_rule_names(policy: Policy) -> Optional[ValidationError]:
    seen = set()
    for rule in policy.rules:
        if rule.name in seen:
            return ValidationError(
                ErrorKind.DUPLICATE_RULE_NAME,
                f"duplicate rule name: '{rule.name}'",
                rule=rule.name,
            )
        seen.add(rule.name)
    return None


def validate_policy(policy: Policy, strict: bool = STRICT, max_depth: int = MAX_DEPTH) -> ValidationResult:
    errs: List[ValidationError] = []
    for rule in policy.rules:
        errs.extend(validate_rule(rule, strict=strict, max_depth=max_depth))

    dup = validate_unique_rule_names(policy)
    if dup is not None:
        errs.append(dup)

    log.debug("policy %r: %d rule(s), %d error(s)", policy.name, len(policy.rules), len(errs))
    return ValidationResult(errs)
