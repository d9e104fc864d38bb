"""
Ingredient Analysis Pipeline

products + symptom tags + species
  -> extract fragments per product
  -> match every catalog entry against every product
  -> tier split + stats
  -> supplement rules over the combined fragment corpus
  -> AnalysisResult

This is a pure function over its inputs: no I/O beyond the one-time catalog
load, no shared mutable state, and identical inputs produce identical results
(including result_hash).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from app.shared.hashing import content_hash

from .classify import classify_products, compute_stats, split_by_risk
from .extract import extract_fragments
from .knowledge import IngredientKnowledgeLoader, RiskLevel, get_knowledge
from .models import AnalysisResult, ProductInput, ProductSummary
from .recommend import recommend_supplements

logger = logging.getLogger(__name__)

ProductLike = Union[ProductInput, Dict[str, Any]]

DEFAULT_SPECIES = "犬"


def coerce_products(products: Iterable[ProductLike]) -> List[ProductInput]:
    """Validate plain dicts into ProductInput; ValidationError propagates."""
    return [
        p if isinstance(p, ProductInput) else ProductInput.model_validate(p)
        for p in products
    ]


def input_hash(
    products: Sequence[ProductLike],
    symptom_tags: Iterable[str] = (),
    species: str = DEFAULT_SPECIES,
) -> str:
    """Deterministic hash of an analysis call."""
    return content_hash({
        "products": coerce_products(products),
        "symptom_tags": set(symptom_tags),
        "species": species,
    })


def analyze_ingredients(
    products: Sequence[ProductLike],
    symptom_tags: Iterable[str] = (),
    species: Optional[str] = DEFAULT_SPECIES,
    knowledge: Optional[IngredientKnowledgeLoader] = None,
) -> AnalysisResult:
    """
    Analyze the ingredients of a set of products for one pet.

    Args:
        products: Product records (ProductInput or dicts of the same shape)
        symptom_tags: Recent symptom types; duplicates are ignored
        species: Free-form species label; unknown labels behave like dogs
        knowledge: Catalog to use (defaults to the shared loader)

    Returns:
        AnalysisResult with matches in catalog order, tier views, fired
        supplement rules, per-product summaries and counts
    """
    knowledge = knowledge or get_knowledge()
    items = coerce_products(products)
    tags = sorted(set(symptom_tags))

    product_fragments = [(product, extract_fragments(product)) for product in items]
    summaries = [
        ProductSummary(
            id=product.id,
            name=product.name,
            brand=product.brand,
            type=product.type,
            ingredient_count=len(fragments),
        )
        for product, fragments in product_fragments
    ]

    matched = classify_products(knowledge.definitions, product_fragments)
    tiers = split_by_risk(matched)

    all_fragments: List[str] = []
    for _, fragments in product_fragments:
        all_fragments.extend(fragments)

    supplements = recommend_supplements(
        knowledge.rules,
        all_fragments,
        symptom_tags=tags,
        species=species,
    )

    result = AnalysisResult(
        matched=matched,
        toxic_items=tiers[RiskLevel.TOXIC],
        warning_items=tiers[RiskLevel.WARNING],
        caution_items=tiers[RiskLevel.CAUTION],
        safe_items=tiers[RiskLevel.SAFE],
        active_supplements=supplements,
        product_summaries=summaries,
        stats=compute_stats(tiers, len(matched)),
        knowledge_version=knowledge.version,
    )
    result.result_hash = content_hash(result)

    logger.info(
        f"ANALYSIS: {len(items)} products, {len(matched)} matched "
        f"({result.stats.toxic_count} toxic, {result.stats.warning_count} warning), "
        f"{len(supplements)} supplements"
    )
    return result
