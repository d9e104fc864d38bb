"""
Supplement Recommender

Evaluates the conditional supplement rules against the pet's symptoms and the
combined ingredient corpus of every supplied product.

Per rule, in catalog order:
1. Symptom gate: non-empty trigger set must intersect the pet's symptom tags
2. Species guard: optional per-rule exception (see SpeciesGuard)
3. Already-satisfied check: any missing_pattern present in the combined
   corpus means the nutrient is already provided
A rule fires when 1 and 2 pass and 3 finds nothing. Output is stably sorted
by priority (high, medium, low).
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .knowledge import SupplementRule
from .match import build_haystack
from .models import SupplementRecommendation
from .normalize import normalize

logger = logging.getLogger(__name__)


def passes_symptom_gate(rule: SupplementRule, symptom_tags: Iterable[str]) -> bool:
    """Empty trigger set always passes (species-essential nutrients)."""
    if not rule.symptom_triggers:
        return True
    return bool(rule.symptom_triggers & set(symptom_tags))


def is_already_satisfied(rule: SupplementRule, corpus: str) -> bool:
    """True when any of the rule's patterns occurs in the normalized corpus."""
    for pattern in rule.missing_patterns:
        needle = normalize(pattern)
        if needle and needle in corpus:
            return True
    return False


def to_recommendation(rule: SupplementRule) -> SupplementRecommendation:
    return SupplementRecommendation(
        name=rule.name,
        reason=rule.reason,
        examples=rule.examples,
        symptom_triggers=sorted(rule.symptom_triggers),
        missing_patterns=list(rule.missing_patterns),
        priority=rule.priority,
    )


def recommend_supplements(
    rules: Sequence[SupplementRule],
    fragments: Sequence[str],
    symptom_tags: Iterable[str] = (),
    species: Optional[str] = None,
) -> List[SupplementRecommendation]:
    """
    Evaluate every rule and return the ones that fire, highest priority first.

    Args:
        rules: Supplement rules in catalog order
        fragments: All fragments of all supplied products
        symptom_tags: Pet's symptom tags (set semantics)
        species: Free-form species label

    Returns:
        Fired rules, stably sorted by priority
    """
    tags = set(symptom_tags)
    corpus = build_haystack(fragments)
    fired: List[SupplementRule] = []

    for rule in rules:
        if not passes_symptom_gate(rule, tags):
            continue

        if rule.species_guard is not None and rule.species_guard.blocks(species, tags):
            logger.debug(f"SPECIES_GUARD: skipped '{rule.name}' for species '{species}'")
            continue

        if is_already_satisfied(rule, corpus):
            continue

        fired.append(rule)

    # sorted() is stable: catalog order is kept within a priority
    fired = sorted(fired, key=lambda r: r.priority.rank)
    return [to_recommendation(r) for r in fired]
