# policycheck/validate/errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    DUPLICATE_RULE_NAME = "DuplicateRuleName"
    NO_RULE_TYPE_DEFINED = "NoRuleTypeDefined"
    MULTIPLE_RULE_TYPES_DEFINED = "MultipleRuleTypesDefined"
    MISSING_RESOURCE_KIND = "MissingResourceKind"
    INVALID_SELECTOR = "InvalidSelector"
    EMPTY_SELECTOR_REQUIREMENTS = "EmptySelectorRequirements"
    MISSING_PATTERN = "MissingPattern"
    CONFLICTING_PATTERN_FIELDS = "ConflictingPatternFields"
    ANCHOR_NOT_ON_ARRAY = "AnchorNotOnArray"
    EMPTY_PATTERN_ARRAY = "EmptyPatternArray"
    UNKNOWN_TREE_NODE_TYPE = "UnknownTreeNodeType"
    PATTERN_TOO_DEEP = "PatternTooDeep"
    MISSING_PATCH_PATH = "MissingPatchPath"
    MISSING_PATCH_VALUE = "MissingPatchValue"
    UNSUPPORTED_PATCH_OPERATION = "UnsupportedPatchOperation"
    CONFLICTING_GENERATION_SOURCE = "ConflictingGenerationSource"
    MISSING_GENERATION_SOURCE = "MissingGenerationSource"


@dataclass(frozen=True)
class ValidationError:
    """One problem found in a policy.

    `path` is a slash-delimited location inside a pattern tree
    (e.g. ``/spec/containers/0/``) and is only set for pattern errors.
    `rule` names the rule the error belongs to, when there is one.
    """
    kind: ErrorKind
    message: str
    path: Optional[str] = None
    rule: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def for_rule(self, rule: str) -> "ValidationError":
        return ValidationError(self.kind, self.message, self.path, rule)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": self.path,
            "rule": self.rule,
        }


class PolicyValidationError(ValueError):
    """Raised by ValidationResult.raise_for_errors(); carries every error."""

    def __init__(self, errors: List[ValidationError]):
        self.errors = list(errors)
        super().__init__("\n".join(e.message for e in self.errors))


class PolicyLoadError(ValueError):
    """A document could not be turned into a Policy."""


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def kinds(self) -> List[ErrorKind]:
        return [e.kind for e in self.errors]

    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def raise_for_errors(self) -> None:
        if self.errors:
            raise PolicyValidationError(self.errors)
