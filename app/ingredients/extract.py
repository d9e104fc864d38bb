"""
Ingredient Extractor

Pulls candidate ingredient text fragments out of a product record.

POLICY: structured arrays win. When a product carries any structured
ingredient data, its raw label text is ignored entirely. Label text often
says "does not contain X" or "less X than ...", which a substring matcher
would read as a positive detection.
"""

import json
import logging
from typing import Any, Dict, List

from .models import ProductInput

logger = logging.getLogger(__name__)

# Concatenation order of the structured arrays.
STRUCTURED_FIELDS = (
    "ingredients",
    "protein_sources",
    "additives",
    "functional_ingredients",
)


def parse_ingredient_json(raw: Any) -> Dict[str, Any]:
    """
    Tolerant parser for ingredient_json.

    Returns {} for None, malformed JSON or anything that is not an object.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        logger.warning(f"ingredient_json is a {type(raw).__name__}, expected object; ignored")
        return {}
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Malformed ingredient_json ignored")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"ingredient_json is a {type(parsed).__name__}, expected object; ignored")
        return {}
    return parsed


def _string_items(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def extract_structured(data: Dict[str, Any]) -> List[str]:
    """Concatenate the four structured arrays in their fixed order."""
    fragments: List[str] = []
    for field_name in STRUCTURED_FIELDS:
        fragments.extend(_string_items(data.get(field_name)))
    return fragments


def extract_fragments(product: ProductInput) -> List[str]:
    """
    Extract text fragments from a product.

    Structured arrays if any are present, otherwise the raw label text as a
    single fragment, otherwise nothing.
    """
    fragments = extract_structured(parse_ingredient_json(product.ingredient_json))
    if fragments:
        return fragments

    if product.ingredient_text:
        logger.debug(f"FALLBACK: product {product.id} has no structured arrays, using label text")
        return [product.ingredient_text]

    return []
