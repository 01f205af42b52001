# policycheck/policy/model.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LabelSelectorRequirement:
    key: str = ""
    operator: str = ""
    values: List[str] = field(default_factory=list)


@dataclass
class LabelSelector:
    match_labels: Dict[str, str] = field(default_factory=dict)
    match_expressions: List[LabelSelectorRequirement] = field(default_factory=list)


@dataclass
class ResourceDescription:
    kinds: List[str] = field(default_factory=list)
    name: str = ""
    namespaces: List[str] = field(default_factory=list)
    selector: Optional[LabelSelector] = None  # present-but-empty is not the same as absent

    def is_empty(self) -> bool:
        return not (self.kinds or self.name or self.namespaces or self.selector is not None)


@dataclass
class ResourceFilter:
    resources: ResourceDescription = field(default_factory=ResourceDescription)


@dataclass
class Patch:
    path: str = ""
    operation: str = ""
    value: Any = None  # None means the field was not given


@dataclass
class Mutation:
    overlay: Any = None
    patches: List[Patch] = field(default_factory=list)

    def is_set(self) -> bool:
        return self.overlay is not None or bool(self.patches)


@dataclass
class Validation:
    message: str = ""
    pattern: Any = None
    any_pattern: List[Any] = field(default_factory=list)

    def is_set(self) -> bool:
        return bool(self.message) or self.pattern is not None or bool(self.any_pattern)


@dataclass
class CloneFrom:
    namespace: str = ""
    name: str = ""

    def is_set(self) -> bool:
        return bool(self.namespace or self.name)


@dataclass
class Generation:
    kind: str = ""
    name: str = ""
    data: Any = None
    clone: CloneFrom = field(default_factory=CloneFrom)

    def is_set(self) -> bool:
        return bool(self.kind or self.name) or self.data is not None or self.clone.is_set()


@dataclass
class Rule:
    name: str = ""
    match: ResourceFilter = field(default_factory=ResourceFilter)
    exclude: ResourceFilter = field(default_factory=ResourceFilter)
    mutation: Mutation = field(default_factory=Mutation)
    validation: Validation = field(default_factory=Validation)
    generation: Generation = field(default_factory=Generation)

    def has_mutate(self) -> bool:
        return self.mutation.is_set()

    def has_validate(self) -> bool:
        return self.validation.is_set()

    def has_generate(self) -> bool:
        return self.generation.is_set()


@dataclass
class Policy:
    name: str = ""
    rules: List[Rule] = field(default_factory=list)
    validation_failure_action: str = "audit"  # audit | enforce
