"""Shared utilities"""

from .hashing import (
    canonical_json,
    content_hash,
    verify_hash,
)

__all__ = [
    "canonical_json",
    "content_hash",
    "verify_hash",
]
