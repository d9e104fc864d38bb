"""
Ingredient Classifier / Aggregator

Runs every knowledge-base entry against every product, records cross-product
provenance, and partitions the matches into risk tiers.

ORDERING: `matched` follows catalog order (harmful entries first). Tier lists
are stable filters of `matched`, never re-sorted.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from .knowledge import IngredientDefinition, RiskLevel
from .match import match_definition
from .models import AnalysisStats, MatchedIngredient, ProductInput

# (product, its extracted fragments) in caller order
ProductFragments = Sequence[Tuple[ProductInput, List[str]]]


def to_matched(
    definition: IngredientDefinition,
    found_in: List[str],
    raw_text: str,
) -> MatchedIngredient:
    return MatchedIngredient(
        display_name=definition.display_name,
        patterns=list(definition.patterns),
        category=definition.category,
        risk_level=definition.risk_level,
        effect=definition.effect,
        related_symptoms=sorted(definition.related_symptoms),
        tip=definition.tip,
        found_in=found_in,
        matched_raw_text=raw_text,
    )


def classify_products(
    definitions: Sequence[IngredientDefinition],
    product_fragments: ProductFragments,
) -> List[MatchedIngredient]:
    """
    Match each definition against each product.

    found_in lists every product (display name, input order) where the
    definition matched; matched_raw_text comes from the first of them.
    """
    matched: List[MatchedIngredient] = []

    for definition in definitions:
        found_in: List[str] = []
        first_raw: Optional[str] = None

        for product, fragments in product_fragments:
            outcome = match_definition(definition, fragments)
            if not outcome.matched:
                continue
            found_in.append(product.display_name)
            if first_raw is None:
                first_raw = outcome.raw_text

        if found_in:
            matched.append(to_matched(definition, found_in, first_raw or ""))

    return matched


def split_by_risk(matched: List[MatchedIngredient]) -> Dict[RiskLevel, List[MatchedIngredient]]:
    """Stable per-tier views of the matched list."""
    return {
        level: [m for m in matched if m.risk_level == level]
        for level in RiskLevel
    }


def compute_stats(tiers: Dict[RiskLevel, List[MatchedIngredient]], total: int) -> AnalysisStats:
    return AnalysisStats(
        total_ingredients=total,
        toxic_count=len(tiers[RiskLevel.TOXIC]),
        warning_count=len(tiers[RiskLevel.WARNING]),
        caution_count=len(tiers[RiskLevel.CAUTION]),
        safe_count=len(tiers[RiskLevel.SAFE]),
    )


def max_risk_level(matched: List[MatchedIngredient]) -> Optional[RiskLevel]:
    """Highest risk tier present in a report, or None when nothing matched."""
    if not matched:
        return None
    return max((m.risk_level for m in matched), key=lambda level: level.severity)
