"""
Ingredient Analysis Endpoints

GET  /api/v1/ingredients/health            - Health check
GET  /api/v1/ingredients/knowledge         - Catalog listing (catalog order)
GET  /api/v1/ingredients/supplement-rules  - Supplement rule listing
POST /api/v1/ingredients/analyze           - Run the analysis for one pet

Version: ingredient_analysis_v1
"""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from .analyzer import analyze_ingredients
from .context import collect_nutrition_facts, dedupe_products, merge_symptom_tags
from .knowledge import KnowledgeBaseError, get_knowledge
from .models import AnalyzeRequest, AnalyzeResponse, IngredientsHealthResponse

logger = logging.getLogger(__name__)

NO_PRODUCTS_MESSAGE = "尚無使用中的食品/用品記錄，請先在「日誌」中新增產品。"

router = APIRouter(
    prefix="/api/v1/ingredients",
    tags=["ingredients"],
)


@router.get("/health", response_model=IngredientsHealthResponse)
async def ingredients_health():
    """Health check for the ingredient analysis module."""
    try:
        knowledge = get_knowledge()
    except KnowledgeBaseError as e:
        raise HTTPException(status_code=503, detail=f"Knowledge base unavailable: {e}")
    return IngredientsHealthResponse(
        knowledge_version=knowledge.version,
        entry_count=len(knowledge.definitions),
        rule_count=len(knowledge.rules),
        timestamp=datetime.utcnow().isoformat(),
    )


@router.get("/knowledge")
async def list_knowledge():
    """
    List the ingredient catalog.

    Entries are returned in catalog order, which is also the order matches
    appear in analysis reports.
    """
    knowledge = get_knowledge()
    return {
        "version": knowledge.version,
        "count": len(knowledge.definitions),
        "entries": [
            {
                "display_name": d.display_name,
                "category": d.category.value,
                "risk_level": d.risk_level.value,
                "patterns": list(d.patterns),
                "related_symptoms": sorted(d.related_symptoms),
            }
            for d in knowledge.definitions
        ],
    }


@router.get("/supplement-rules")
async def list_supplement_rules():
    """List supplement rules in catalog order."""
    knowledge = get_knowledge()
    return {
        "version": knowledge.version,
        "count": len(knowledge.rules),
        "rules": [
            {
                "name": r.name,
                "priority": r.priority.value,
                "symptom_triggers": sorted(r.symptom_triggers),
                "missing_patterns": list(r.missing_patterns),
                "species_guard": (
                    {
                        "species": sorted(r.species_guard.species),
                        "required_symptoms": sorted(r.species_guard.required_symptoms),
                    }
                    if r.species_guard else None
                ),
            }
            for r in knowledge.rules
        ],
    }


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_endpoint(request: AnalyzeRequest):
    """
    Analyze the products a pet has recently used.

    The caller supplies the products and symptom history from its own
    recency window; duplicated product records are collapsed and declared
    main problems are merged into the symptom tags.
    """
    products = dedupe_products(request.products)
    if not products:
        raise HTTPException(status_code=422, detail=NO_PRODUCTS_MESSAGE)

    symptom_tags = merge_symptom_tags(request.symptom_tags, request.main_problems)

    try:
        result = analyze_ingredients(products, symptom_tags, request.species)
    except (KnowledgeBaseError, ValidationError) as e:
        logger.error(f"Ingredient analysis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis error: {str(e)}")

    return AnalyzeResponse(
        success=True,
        result=result,
        nutrition_by_product=collect_nutrition_facts(products),
    )
