# scripts/validate_policies.py
"""
CI gate: strictly validate every policy under policies/ (or the given paths).

Run from the repo root so the package is importable without installing it:

    python -m scripts.validate_policies [PATH ...]

or install first (pip install -e .) and run the file directly.
"""
import os, sys

from policycheck.config import POLICY_DIR
from policycheck.policy.loader import load_policies
from policycheck.validate.errors import PolicyLoadError
from policycheck.validate.policy import validate_policy


def main(argv=None):
    paths = (argv if argv is not None else sys.argv[1:]) or [POLICY_DIR]
    if not any(os.path.exists(p) for p in paths):
        print(f"[err] nothing to check under {paths}")
        sys.exit(1)
    try:
        loaded = load_policies(paths)
    except PolicyLoadError as e:
        print(f"[err] {e}")
        sys.exit(1)
    errs = 0
    for src, policy in loaded:
        result = validate_policy(policy, strict=True)
        for e in result.errors:
            print(f"[err] {src}: {policy.name}: {e.message}")
        errs += len(result.errors)
    if errs:
        sys.exit(1)
    print(f"{len(loaded)} policies look OK.")


if __name__ == "__main__":
    main()
