"""
Text normalization shared by the matcher and the supplement recommender.
"""

import re
from typing import Optional

_WS_RE = re.compile(r"\s+")
_BRACKETS_RE = re.compile(r"[()（）]")


def normalize(text: Optional[str]) -> str:
    """
    Lowercase, drop all whitespace and remove ASCII / full-width parentheses.

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    if not text:
        return ""
    t = text.lower()
    t = _WS_RE.sub("", t)
    return _BRACKETS_RE.sub("", t)
