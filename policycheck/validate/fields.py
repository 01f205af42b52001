# policycheck/validate/fields.py
"""
Single-purpose checks over one field group each. Every check returns None
when the group is fine, otherwise exactly one ValidationError.
"""
from __future__ import annotations

from typing import Optional

from ..policy.model import Generation, Patch, ResourceDescription, Rule
from ..policy.selector import SelectorError, compile_selector
from .errors import ErrorKind, ValidationError

PATCH_OPERATIONS = ("add", "replace", "remove")


def validate_resource_description(rd: ResourceDescription) -> Optional[ValidationError]:
    """
    An empty description is fine (nothing to filter on).
    Otherwise:
    - kinds must be given, i.e. not ``kinds: []``
    - a selector, if present, must compile to at least one requirement
    """
    if rd.is_empty():
        return None

    if not rd.kinds:
        return ValidationError(ErrorKind.MISSING_RESOURCE_KIND, "field Kind is not specified")

    if rd.selector is not None:
        try:
            requirements = compile_selector(rd.selector)
        except SelectorError as e:
            return ValidationError(ErrorKind.INVALID_SELECTOR, f"invalid selector: {e}")
        if not requirements:
            return ValidationError(
                ErrorKind.EMPTY_SELECTOR_REQUIREMENTS,
                "the requirements are not specified in selector",
            )

    return None


def validate_overlay_pattern(rule: Rule) -> Optional[ValidationError]:
    v = rule.validation
    if not v.is_set():
        return None

    has_pattern = v.pattern is not None
    has_any = bool(v.any_pattern)
    if not has_pattern and not has_any:
        return ValidationError(
            ErrorKind.MISSING_PATTERN,
            f"neither pattern nor anyPattern found in rule '{rule.name}'",
        )
    if has_pattern and has_any:
        return ValidationError(
            ErrorKind.CONFLICTING_PATTERN_FIELDS,
            f"either pattern or anyPattern is allowed in rule '{rule.name}'",
        )
    return None


def validate_rule_type(rule: Rule) -> Optional[ValidationError]:
    defined = [rule.has_mutate(), rule.has_validate(), rule.has_generate()].count(True)
    if defined == 0:
        return ValidationError(ErrorKind.NO_RULE_TYPE_DEFINED, f"no rule defined in '{rule.name}'")
    if defined > 1:
        return ValidationError(
            ErrorKind.MULTIPLE_RULE_TYPES_DEFINED,
            f"multiple types of rule defined in rule '{rule.name}', only one type of rule is allowed per rule",
        )
    return None


def validate_generation(gen: Generation) -> Optional[ValidationError]:
    has_data = gen.data is not None
    has_clone = gen.clone.is_set()
    if not has_data and not has_clone:
        return ValidationError(
            ErrorKind.MISSING_GENERATION_SOURCE,
            f"neither data nor clone (source) of {gen.kind} is specified",
        )
    if has_data and has_clone:
        return ValidationError(
            ErrorKind.CONFLICTING_GENERATION_SOURCE,
            f"both data and clone (source) of {gen.kind} are specified",
        )
    return None


def validate_patch(patch: Patch) -> Optional[ValidationError]:
    if not patch.path:
        return ValidationError(ErrorKind.MISSING_PATCH_PATH, "JSONPatch field 'path' is mandatory")

    if patch.operation in ("add", "replace"):
        if patch.value is None:
            return ValidationError(
                ErrorKind.MISSING_PATCH_VALUE,
                f"JSONPatch field 'value' is mandatory for operation '{patch.operation}'",
            )
        return None
    if patch.operation == "remove":
        return None

    return ValidationError(
        ErrorKind.UNSUPPORTED_PATCH_OPERATION,
        f"unsupported JSONPatch operation '{patch.operation}'",
    )
