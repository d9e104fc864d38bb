"""
Ingredient Analysis Models

Pydantic models for analysis inputs, outputs and API payloads.

Version: ingredient_analysis_v1
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .knowledge import IngredientCategory, RiskLevel, SupplementPriority


class ProductInput(BaseModel):
    """
    A product record supplied by the caller for one analysis call.

    ingredient_json is usually a dict or its serialized form carrying the
    structured arrays ingredients / protein_sources / additives /
    functional_ingredients (and optionally nutritional_facts). Any other
    shape is accepted here and treated as absent by the extractor.
    """
    id: str
    name: str
    brand: Optional[str] = None
    type: str = "other"
    ingredient_text: Optional[str] = Field(
        default=None,
        description="Raw label text, used only when no structured arrays exist"
    )
    ingredient_json: Optional[Any] = Field(
        default=None,
        description="Structured ingredient arrays (object or JSON string)"
    )

    class Config:
        extra = "ignore"
        frozen = True

    @property
    def display_name(self) -> str:
        """'brand name', brand omitted when absent."""
        return f"{self.brand} {self.name}" if self.brand else self.name


class MatchedIngredient(BaseModel):
    """A knowledge-base entry that matched at least one product."""
    display_name: str
    patterns: List[str]
    category: IngredientCategory
    risk_level: RiskLevel
    effect: str
    related_symptoms: List[str] = Field(default_factory=list)
    tip: Optional[str] = None
    found_in: List[str] = Field(
        description="Display names of products where found, in input order"
    )
    matched_raw_text: str = Field(
        description="First fragment that triggered the match"
    )

    class Config:
        extra = "forbid"


class SupplementRecommendation(BaseModel):
    """A supplement rule that fired."""
    name: str
    reason: str
    examples: str
    symptom_triggers: List[str] = Field(default_factory=list)
    missing_patterns: List[str] = Field(default_factory=list)
    priority: SupplementPriority

    class Config:
        extra = "forbid"


class ProductSummary(BaseModel):
    id: str
    name: str
    brand: Optional[str] = None
    type: str
    ingredient_count: int = Field(
        ge=0,
        description="Number of text fragments extracted from the product"
    )


class AnalysisStats(BaseModel):
    total_ingredients: int = 0
    toxic_count: int = 0
    warning_count: int = 0
    caution_count: int = 0
    safe_count: int = 0


class AnalysisResult(BaseModel):
    """
    Complete output of one analysis call.

    The tier lists are stable filters of `matched`. No timestamps are
    included, so identical inputs serialize identically.
    """
    matched: List[MatchedIngredient]
    toxic_items: List[MatchedIngredient]
    warning_items: List[MatchedIngredient]
    caution_items: List[MatchedIngredient]
    safe_items: List[MatchedIngredient]
    active_supplements: List[SupplementRecommendation]
    product_summaries: List[ProductSummary]
    stats: AnalysisStats
    knowledge_version: str
    result_hash: str = ""

    class Config:
        extra = "forbid"


# Response models for API endpoints

class NutritionFact(BaseModel):
    name: str
    value: float
    unit: str = ""


class ProductNutrition(BaseModel):
    product_id: str
    product_name: str
    facts: List[NutritionFact]


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/v1/ingredients/analyze."""
    products: List[ProductInput] = Field(default_factory=list)
    symptom_tags: List[str] = Field(
        default_factory=list,
        description="Symptom types observed in the caller's recency window"
    )
    main_problems: List[str] = Field(
        default_factory=list,
        description="Pet's declared main problems, merged into symptom_tags"
    )
    species: str = "犬"


class AnalyzeResponse(BaseModel):
    success: bool = True
    result: AnalysisResult
    nutrition_by_product: List[ProductNutrition] = Field(default_factory=list)
    analyzed_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class IngredientsHealthResponse(BaseModel):
    status: str = "ok"
    module: str = "ingredient_analysis"
    version: str = "ingredient_analysis_v1"
    knowledge_version: str
    entry_count: int
    rule_count: int
    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
