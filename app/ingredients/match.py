"""
Ingredient Matcher

Tests one knowledge-base entry against one product's fragments.
"""

from typing import NamedTuple, Sequence

from .knowledge import IngredientDefinition
from .normalize import normalize


class MatchOutcome(NamedTuple):
    matched: bool
    raw_text: str


NO_MATCH = MatchOutcome(False, "")


def build_haystack(fragments: Sequence[str]) -> str:
    """Normalized, joined form of all fragments."""
    return normalize(" ".join(fragments))


def match_definition(
    definition: IngredientDefinition,
    fragments: Sequence[str],
) -> MatchOutcome:
    """
    First pattern (in listed order) contained in the haystack wins.

    raw_text is the first individual fragment containing that pattern, so the
    report can show the user what on the label triggered the match. It falls
    back to the pattern itself when no single fragment contains it.
    """
    haystack = build_haystack(fragments)
    if not haystack:
        return NO_MATCH

    for pattern in definition.patterns:
        needle = normalize(pattern)
        if not needle or needle not in haystack:
            continue
        for fragment in fragments:
            if needle in normalize(fragment):
                return MatchOutcome(True, fragment)
        return MatchOutcome(True, pattern)

    return NO_MATCH
