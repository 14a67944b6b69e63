"""
Deterministic hashing and constraint signatures.

Provides:
- hash64: SHA-256 canonical hash truncated to 64-bit int
- constraint_signature: hash64 of a (structure type, substitution rule) pair

No use of Python's built-in hash() (non-deterministic across runs).
"""

import hashlib
import json
from typing import Any, Optional

from .types import Hash64, StructureType, SubstitutionRule


def hash64(obj: Any) -> Hash64:
    """
    Deterministic 64-bit hash using SHA-256 on canonical JSON.

    - Canonical JSON serialization (sorted keys, no whitespace)
    - Truncated to the first 8 bytes, big-endian

    Examples:
        >>> hash64([1, 2, 3]) == hash64([1, 2, 3])
        True
        >>> hash64({"a": 1, "b": 2}) == hash64({"b": 2, "a": 1})
        True
    """
    canonical_json = json.dumps(obj, sort_keys=True, separators=(",", ":"))
    sha = hashlib.sha256(canonical_json.encode("utf-8"))
    return Hash64(int.from_bytes(sha.digest()[:8], byteorder="big", signed=False))


def constraint_signature(
    structure_type: StructureType,
    rule: Optional[SubstitutionRule] = None,
) -> Hash64:
    """
    Signature of a classified constraint.

    Two resolutions that classify to the same type, parameters and rule
    share a signature, so tracker events can be clustered offline.
    Confidence is left out: it grades the description, not the constraint.
    """
    payload = {
        "type": structure_type.type,
        "params": structure_type.params.to_dict(),
    }
    if rule is not None:
        payload["rule"] = {
            "operator": rule.operator,
            "preserves": sorted(rule.preserves),
            "changes": sorted(rule.changes),
            "params": {str(k): v for k, v in rule.params.items()},
        }
    return hash64(payload)
