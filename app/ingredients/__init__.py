"""
Pet Ingredient Analysis

Rule-based ingredient risk report and supplement recommendations for pet
food and care products. Matching runs against a static, versioned knowledge
base; no external AI service is involved.

Usage:
    from app.ingredients import analyze_ingredients

    result = analyze_ingredients(products, symptom_tags=["tear"], species="貓")

Version: ingredient_analysis_v1
"""

from .knowledge import (
    IngredientCategory,
    IngredientDefinition,
    IngredientKnowledgeLoader,
    KnowledgeBaseError,
    RiskLevel,
    SpeciesGuard,
    SupplementPriority,
    SupplementRule,
    get_knowledge,
)
from .models import (
    AnalysisResult,
    AnalysisStats,
    MatchedIngredient,
    ProductInput,
    ProductSummary,
    SupplementRecommendation,
)
from .normalize import normalize
from .extract import extract_fragments
from .match import match_definition
from .classify import max_risk_level
from .recommend import recommend_supplements
from .analyzer import analyze_ingredients, input_hash
from .context import build_lookup_context

__all__ = [
    "IngredientCategory",
    "IngredientDefinition",
    "IngredientKnowledgeLoader",
    "KnowledgeBaseError",
    "RiskLevel",
    "SpeciesGuard",
    "SupplementPriority",
    "SupplementRule",
    "get_knowledge",
    "AnalysisResult",
    "AnalysisStats",
    "MatchedIngredient",
    "ProductInput",
    "ProductSummary",
    "SupplementRecommendation",
    "normalize",
    "extract_fragments",
    "match_definition",
    "max_risk_level",
    "recommend_supplements",
    "analyze_ingredients",
    "input_hash",
    "build_lookup_context",
]

__version__ = "ingredient_analysis_v1"
