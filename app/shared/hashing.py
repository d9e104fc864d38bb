"""
Content hashing for ingredient analysis payloads.

result_hash and input_hash are "sha256:<hex>" digests of a canonical JSON
form. The canonical form accepts the values the analysis layer produces
directly: pydantic models (dumped in JSON mode), str enums (by value), sets
of symptom tags (sorted), and nested dicts/lists of those.
"""

import hashlib
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel

HASH_PREFIX = "sha256:"

# Self-referential or time-dependent keys, dropped at any depth
VOLATILE_FIELDS = frozenset([
    "result_hash",
    "analyzed_at",
    "timestamp",
])


def to_canonical(value: Any, exclude_volatile: bool = True) -> Any:
    """Reduce a payload to plain JSON types with a single, stable shape."""
    if isinstance(value, BaseModel):
        return to_canonical(value.model_dump(mode="json"), exclude_volatile)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {
            str(k): to_canonical(v, exclude_volatile)
            for k, v in value.items()
            if not (exclude_volatile and k in VOLATILE_FIELDS)
        }
    if isinstance(value, (list, tuple)):
        # order is meaningful (catalog order, input order)
        return [to_canonical(v, exclude_volatile) for v in value]
    if isinstance(value, (set, frozenset)):
        items = [to_canonical(v, exclude_volatile) for v in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True, ensure_ascii=False))
    return value


def canonical_json(value: Any, exclude_volatile: bool = True) -> str:
    return json.dumps(
        to_canonical(value, exclude_volatile),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def content_hash(value: Any, exclude_volatile: bool = True) -> str:
    """Returns: "sha256:<64-char-hex>" """
    digest = hashlib.sha256(canonical_json(value, exclude_volatile).encode("utf-8")).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def verify_hash(value: Any, expected_hash: str, exclude_volatile: bool = True) -> bool:
    return content_hash(value, exclude_volatile) == expected_hash
