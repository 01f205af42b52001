import os
from dotenv import load_dotenv

load_dotenv()


def _truthy(val) -> bool:
    return bool(val and val.strip().lower() in ("1", "true", "yes", "on"))


# Recursion bound for pattern trees; documents come from untrusted submitters.
MAX_DEPTH = int(os.getenv("POLICYCHECK_MAX_DEPTH", "100"))
STRICT = _truthy(os.getenv("POLICYCHECK_STRICT", ""))
VERBOSE = _truthy(os.getenv("POLICYCHECK_VERBOSE", ""))
POLICY_DIR = os.getenv("POLICYCHECK_POLICY_DIR", "policies")
