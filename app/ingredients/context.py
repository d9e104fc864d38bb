"""
Caller-side helpers around the analysis engine.

- Preparing inputs: product de-duplication, symptom tag merging
- Re-wrapping results for the LLM-backed product lookup collaborator
- Passing nutritional facts through for display
- Display labels for symptom and product types
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .extract import parse_ingredient_json
from .models import AnalysisResult, NutritionFact, ProductInput, ProductNutrition

logger = logging.getLogger(__name__)

SYMPTOM_TYPE_LABELS: Dict[str, str] = {
    "tear": "淚腺/淚痕",
    "skin": "皮膚搔癢",
    "digestive": "腸胃敏感",
    "oral": "口臭牙結石",
    "ear": "耳朵發炎",
    "joint": "關節",
    "other": "其他",
}

PRODUCT_TYPE_LABELS: Dict[str, str] = {
    "feed": "飼料",
    "can": "罐頭",
    "snack": "零食",
    "supplement": "保健品",
    "dental": "牙膏牙粉",
    "shampoo": "洗毛精",
    "other": "其他",
}


def symptom_type_label(tag: str) -> str:
    return SYMPTOM_TYPE_LABELS.get(tag, tag)


def product_type_label(product_type: str) -> str:
    return PRODUCT_TYPE_LABELS.get(product_type, product_type)


def dedupe_products(products: Sequence[ProductInput]) -> List[ProductInput]:
    """Keep the first record of each product id, preserving order."""
    seen = set()
    unique: List[ProductInput] = []
    for product in products:
        if product.id in seen:
            continue
        seen.add(product.id)
        unique.append(product)
    return unique


def merge_symptom_tags(*groups: Iterable[str]) -> List[str]:
    """Ordered union of symptom tags; blanks are dropped."""
    merged: List[str] = []
    for group in groups:
        for tag in group:
            tag = (tag or "").strip()
            if tag and tag not in merged:
                merged.append(tag)
    return merged


def build_lookup_context(result: AnalysisResult) -> Dict[str, List[Dict[str, Any]]]:
    """
    Subset of a report handed to the product lookup / preview feature.

    Only these fields are part of that contract; ordering follows `matched`
    and `active_supplements`.
    """
    return {
        "ingredients": [
            {
                "display_name": m.display_name,
                "category": m.category.value,
                "risk_level": m.risk_level.value,
                "effect": m.effect,
                "tip": m.tip,
            }
            for m in result.matched
        ],
        "supplements": [
            {
                "name": s.name,
                "reason": s.reason,
                "priority": s.priority.value,
            }
            for s in result.active_supplements
        ],
    }


def _to_fact(raw: Any) -> Optional[NutritionFact]:
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        return None
    try:
        value = float(raw.get("value"))
    except (TypeError, ValueError):
        return None
    unit = raw.get("unit") if isinstance(raw.get("unit"), str) else ""
    return NutritionFact(name=raw["name"], value=value, unit=unit)


def collect_nutrition_facts(products: Sequence[ProductInput]) -> List[ProductNutrition]:
    """
    Guaranteed-analysis values per product, as found in ingredient_json.

    Products without any usable fact are left out. Values are passed through
    unchanged; nothing is compared against feeding guidelines here.
    """
    out: List[ProductNutrition] = []
    for product in products:
        raw_facts = parse_ingredient_json(product.ingredient_json).get("nutritional_facts")
        if not isinstance(raw_facts, list):
            continue
        facts = [f for f in (_to_fact(r) for r in raw_facts) if f is not None]
        if len(facts) < len(raw_facts):
            logger.warning(f"Skipped {len(raw_facts) - len(facts)} malformed nutritional facts on product {product.id}")
        if facts:
            out.append(ProductNutrition(
                product_id=product.id,
                product_name=product.display_name,
                facts=facts,
            ))
    return out
