"""
Pet Ingredient Knowledge Base v1.0
==================================
Static catalog of ingredient definitions and supplement rules.

This module:
- Defines the immutable knowledge-base types
- Loads the versioned JSON resources once and caches them in memory
- Validates every entry at load time

This module MUST NOT:
- Match text against patterns (see match.py)
- Mutate the catalog after load
- Reorder entries (catalog order decides which rule sees a token first)
"""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent / "data"
DATA_DIR = Path(os.getenv("INGREDIENT_DATA_DIR", str(DEFAULT_DATA_DIR)))

KNOWLEDGE_FILE = "ingredient_knowledge_v1_0.json"
RULES_FILE = "supplement_rules_v1_0.json"

# Species label the callers store for cats; guards compare labels literally.
CAT_SPECIES = "貓"


# ============================================================
# ENUMS
# ============================================================

class IngredientCategory(str, Enum):
    """Nutritional / functional family of an ingredient."""
    PROTEIN = "protein"
    CARB = "carb"
    FAT = "fat"
    FIBER = "fiber"
    VITAMIN = "vitamin"
    MINERAL = "mineral"
    PROBIOTIC = "probiotic"
    FUNCTIONAL = "functional"
    ADDITIVE = "additive"
    PRESERVATIVE = "preservative"
    HARMFUL = "harmful"
    OTHER = "other"


class RiskLevel(str, Enum):
    """Ordered severity scale: safe < caution < warning < toxic."""
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    TOXIC = "toxic"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self]


_RISK_SEVERITY = {
    RiskLevel.SAFE: 0,
    RiskLevel.CAUTION: 1,
    RiskLevel.WARNING: 2,
    RiskLevel.TOXIC: 3,
}


class SupplementPriority(str, Enum):
    """Output ordering of supplement recommendations (high first)."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    SupplementPriority.HIGH: 0,
    SupplementPriority.MEDIUM: 1,
    SupplementPriority.LOW: 2,
}


class KnowledgeBaseError(Exception):
    """Raised when a knowledge-base resource is missing or invalid."""


# ============================================================
# DATA CLASSES
# ============================================================

@dataclass(frozen=True)
class IngredientDefinition:
    """One knowledge-base entry."""
    display_name: str
    patterns: Tuple[str, ...]
    category: IngredientCategory
    risk_level: RiskLevel
    effect: str
    related_symptoms: FrozenSet[str] = frozenset()
    tip: Optional[str] = None


@dataclass(frozen=True)
class SpeciesGuard:
    """
    Per-rule species exception.

    A rule carrying a guard is skipped for the listed species unless at least
    one of the required symptom tags was observed. Species labels are compared
    exactly as stored; no aliases are folded.
    """
    species: FrozenSet[str]
    required_symptoms: FrozenSet[str]

    def blocks(self, species: Optional[str], symptom_tags: Iterable[str]) -> bool:
        if species not in self.species:
            return False
        return not (self.required_symptoms & set(symptom_tags))


@dataclass(frozen=True)
class SupplementRule:
    """A conditional supplement recommendation."""
    name: str
    reason: str
    examples: str
    symptom_triggers: FrozenSet[str]
    missing_patterns: Tuple[str, ...]
    priority: SupplementPriority
    species_guard: Optional[SpeciesGuard] = None


# ============================================================
# BUILDERS
# ============================================================

def build_definition(raw: Dict[str, Any]) -> IngredientDefinition:
    """Build an IngredientDefinition from its JSON form."""
    try:
        patterns = tuple(raw["patterns"])
        if not patterns:
            raise KnowledgeBaseError(f"Ingredient '{raw.get('display_name')}' has no patterns")
        return IngredientDefinition(
            display_name=raw["display_name"],
            patterns=patterns,
            category=IngredientCategory(raw["category"]),
            risk_level=RiskLevel(raw["risk_level"]),
            effect=raw["effect"],
            related_symptoms=frozenset(raw.get("related_symptoms", [])),
            tip=raw.get("tip"),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise KnowledgeBaseError(f"Invalid ingredient entry {raw.get('display_name')!r}: {e}") from e


def build_rule(raw: Dict[str, Any]) -> SupplementRule:
    """Build a SupplementRule from its JSON form."""
    try:
        guard = None
        if raw.get("species_guard"):
            guard_raw = raw["species_guard"]
            guard = SpeciesGuard(
                species=frozenset(guard_raw["species"]),
                required_symptoms=frozenset(guard_raw.get("required_symptoms", [])),
            )
        return SupplementRule(
            name=raw["name"],
            reason=raw["reason"],
            examples=raw.get("examples", ""),
            symptom_triggers=frozenset(raw.get("symptom_triggers", [])),
            missing_patterns=tuple(raw["missing_patterns"]),
            priority=SupplementPriority(raw["priority"]),
            species_guard=guard,
        )
    except (KeyError, ValueError, TypeError) as e:
        raise KnowledgeBaseError(f"Invalid supplement rule {raw.get('name')!r}: {e}") from e


# ============================================================
# DATA LOADER (SINGLETON CACHE)
# ============================================================

class IngredientKnowledgeLoader:
    """
    Singleton loader for the ingredient catalog and supplement rules.
    Loads data once at startup and caches it in memory.
    """
    _instance = None
    _loaded = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not IngredientKnowledgeLoader._loaded:
            self._knowledge_version = "?"
            self._rules_version = "?"
            self._definitions: Tuple[IngredientDefinition, ...] = ()
            self._rules: Tuple[SupplementRule, ...] = ()
            self._load_data(DATA_DIR)
            IngredientKnowledgeLoader._loaded = True

    @classmethod
    def reset(cls):
        """Reset the singleton for testing purposes."""
        cls._instance = None
        cls._loaded = False

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.error(f"Knowledge resource not found: {path}")
            raise KnowledgeBaseError(f"Knowledge resource not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _load_data(self, data_dir: Path):
        """Load JSON data files from disk."""
        knowledge = self._read_json(data_dir / KNOWLEDGE_FILE)
        definitions: List[IngredientDefinition] = []
        for section in knowledge.get("sections", []):
            for raw in section.get("entries", []):
                definitions.append(build_definition(raw))
        self._definitions = tuple(definitions)
        self._knowledge_version = knowledge.get("version", "?")
        logger.info(f"Loaded ingredient knowledge v{self._knowledge_version} ({len(self._definitions)} entries)")

        rules = self._read_json(data_dir / RULES_FILE)
        self._rules = tuple(build_rule(raw) for raw in rules.get("rules", []))
        self._rules_version = rules.get("version", "?")
        logger.info(f"Loaded supplement rules v{self._rules_version} ({len(self._rules)} rules)")

        self._validate()

    def _validate(self):
        """Warn about duplicated names; these make provenance ambiguous in reports."""
        seen = set()
        for definition in self._definitions:
            if definition.display_name in seen:
                logger.warning(f"VALIDATION_WARNING: duplicate ingredient '{definition.display_name}'")
            seen.add(definition.display_name)
        rule_names = [r.name for r in self._rules]
        if len(rule_names) != len(set(rule_names)):
            logger.warning("VALIDATION_WARNING: duplicate supplement rule names")

    @property
    def definitions(self) -> Tuple[IngredientDefinition, ...]:
        """Ingredient definitions in catalog order."""
        return self._definitions

    @property
    def rules(self) -> Tuple[SupplementRule, ...]:
        """Supplement rules in catalog order."""
        return self._rules

    @property
    def version(self) -> str:
        """Combined version string of both resources."""
        return f"knowledge_v{self._knowledge_version}+rules_v{self._rules_version}"

    def get_definition(self, display_name: str) -> Optional[IngredientDefinition]:
        for definition in self._definitions:
            if definition.display_name == display_name:
                return definition
        return None

    def get_rule(self, name: str) -> Optional[SupplementRule]:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None


def get_knowledge() -> IngredientKnowledgeLoader:
    """Get the singleton knowledge loader."""
    return IngredientKnowledgeLoader()
