# policycheck/policy/loader.py
import os
import glob
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from ..validate.errors import PolicyLoadError
from .model import (
    CloneFrom,
    Generation,
    LabelSelector,
    LabelSelectorRequirement,
    Mutation,
    Patch,
    Policy,
    ResourceDescription,
    ResourceFilter,
    Rule,
    Validation,
)

log = logging.getLogger(__name__)

POLICY_KINDS = ("ClusterPolicy", "Policy")
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _KubeLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as strings, like a JSON round-trip would."""


_KubeLoader.yaml_implicit_resolvers = {
    ch: [(tag, rx) for tag, rx in resolvers if tag != _TIMESTAMP_TAG]
    for ch, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _mapping(obj: Any, where: str) -> Dict[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise PolicyLoadError(f"{where} must be a mapping, found {type(obj).__name__}")
    return obj


def _list(obj: Any, where: str) -> List[Any]:
    if obj is None:
        return []
    if not isinstance(obj, list):
        raise PolicyLoadError(f"{where} must be a list, found {type(obj).__name__}")
    return obj


def _str(obj: Any, where: str) -> str:
    if obj is None:
        return ""
    if not isinstance(obj, str):
        raise PolicyLoadError(f"{where} must be a string, found {type(obj).__name__}")
    return obj


def _str_list(obj: Any, where: str) -> List[str]:
    return [_str(v, f"{where}[{i}]") for i, v in enumerate(_list(obj, where))]


def _selector(raw: Any, where: str) -> Optional[LabelSelector]:
    if raw is None:
        return None
    raw = _mapping(raw, where)
    labels = _mapping(raw.get("matchLabels"), f"{where}.matchLabels")
    exprs = []
    for i, e in enumerate(_list(raw.get("matchExpressions"), f"{where}.matchExpressions")):
        e_where = f"{where}.matchExpressions[{i}]"
        e = _mapping(e, e_where)
        exprs.append(LabelSelectorRequirement(
            key=_str(e.get("key"), f"{e_where}.key"),
            operator=_str(e.get("operator"), f"{e_where}.operator"),
            values=_str_list(e.get("values"), f"{e_where}.values"),
        ))
    # label values are checked by the selector compiler, keep them as given
    return LabelSelector(match_labels=dict(labels), match_expressions=exprs)


def _resource_filter(raw: Any, where: str) -> ResourceFilter:
    raw = _mapping(raw, where)
    where = f"{where}.resources"
    res = _mapping(raw.get("resources"), where)
    return ResourceFilter(resources=ResourceDescription(
        kinds=_str_list(res.get("kinds"), f"{where}.kinds"),
        name=_str(res.get("name"), f"{where}.name"),
        namespaces=_str_list(res.get("namespaces"), f"{where}.namespaces"),
        selector=_selector(res.get("selector"), f"{where}.selector"),
    ))


def _mutation(raw: Any, where: str) -> Mutation:
    raw = _mapping(raw, where)
    patches = []
    for i, p in enumerate(_list(raw.get("patches"), f"{where}.patches")):
        p_where = f"{where}.patches[{i}]"
        p = _mapping(p, p_where)
        patches.append(Patch(
            path=_str(p.get("path"), f"{p_where}.path"),
            operation=_str(p.get("op"), f"{p_where}.op"),
            value=p.get("value"),
        ))
    return Mutation(overlay=raw.get("overlay"), patches=patches)


def _validation(raw: Any, where: str) -> Validation:
    raw = _mapping(raw, where)
    return Validation(
        message=_str(raw.get("message"), f"{where}.message"),
        pattern=raw.get("pattern"),
        any_pattern=_list(raw.get("anyPattern"), f"{where}.anyPattern"),
    )


def _generation(raw: Any, where: str) -> Generation:
    raw = _mapping(raw, where)
    clone = _mapping(raw.get("clone"), f"{where}.clone")
    return Generation(
        kind=_str(raw.get("kind"), f"{where}.kind"),
        name=_str(raw.get("name"), f"{where}.name"),
        data=raw.get("data"),
        clone=CloneFrom(
            namespace=_str(clone.get("namespace"), f"{where}.clone.namespace"),
            name=_str(clone.get("name"), f"{where}.clone.name"),
        ),
    )


def parse_rule(raw: Any, where: str = "rule") -> Rule:
    raw = _mapping(raw, where)
    return Rule(
        name=_str(raw.get("name"), f"{where}.name"),
        match=_resource_filter(raw.get("match"), f"{where}.match"),
        exclude=_resource_filter(raw.get("exclude"), f"{where}.exclude"),
        mutation=_mutation(raw.get("mutate"), f"{where}.mutate"),
        validation=_validation(raw.get("validate"), f"{where}.validate"),
        generation=_generation(raw.get("generate"), f"{where}.generate"),
    )


def parse_policy(doc: Any) -> Policy:
    """Build a Policy from one parsed document (wire field names)."""
    doc = _mapping(doc, "document")
    meta = _mapping(doc.get("metadata"), "metadata")
    spec = _mapping(doc.get("spec"), "spec")
    rules = [
        parse_rule(r, f"spec.rules[{i}]")
        for i, r in enumerate(_list(spec.get("rules"), "spec.rules"))
    ]
    return Policy(
        name=_str(meta.get("name"), "metadata.name"),
        rules=rules,
        validation_failure_action=_str(spec.get("validationFailureAction"), "spec.validationFailureAction") or "audit",
    )


def load_documents(path: str) -> List[Any]:
    """All YAML documents in a file, empty ones dropped."""
    with open(path, "r", encoding="utf-8") as fh:
        try:
            docs = list(yaml.load_all(fh, Loader=_KubeLoader))
        except yaml.YAMLError as e:
            raise PolicyLoadError(f"{path}: invalid YAML: {e}") from e
        except RecursionError as e:
            # the YAML composer recurses once per nesting level
            raise PolicyLoadError(f"{path}: document nesting too deep") from e
    return [d for d in docs if d is not None]


def is_policy_document(doc: Any) -> bool:
    if not isinstance(doc, dict):
        return False
    kind = doc.get("kind")
    return kind is None or kind in POLICY_KINDS


def load_policy_file(path: str) -> List[Policy]:
    policies = []
    for i, doc in enumerate(load_documents(path)):
        if not is_policy_document(doc):
            log.debug("skipping document %d in %s (kind=%r)", i, path, doc.get("kind") if isinstance(doc, dict) else None)
            continue
        try:
            policies.append(parse_policy(doc))
        except PolicyLoadError as e:
            raise PolicyLoadError(f"{path}: document {i}: {e}") from e
    return policies


def expand_paths(paths: Iterable[str]) -> List[str]:
    """Files as given; directories expanded to their *.yaml/*.yml files, sorted."""
    out: List[str] = []
    for p in paths:
        if os.path.isdir(p):
            found = glob.glob(os.path.join(p, "*.yaml")) + glob.glob(os.path.join(p, "*.yml"))
            out.extend(sorted(found))
        else:
            out.append(p)
    return out


def load_policies(paths: Iterable[str]) -> List[Tuple[str, Policy]]:
    return [(f, p) for f in expand_paths(paths) for p in load_policy_file(f)]
