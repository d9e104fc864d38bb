"""
Ingredient Knowledge Base Tests

Tests validate:
- Shipped resources load with the expected shape
- Catalog order (harmful entries first)
- Species guard declared as data
- Load-time validation and custom data directories
"""

import json

import pytest

from app.ingredients.knowledge import (
    IngredientCategory,
    IngredientKnowledgeLoader,
    KnowledgeBaseError,
    KNOWLEDGE_FILE,
    RULES_FILE,
    RiskLevel,
    SupplementPriority,
    build_definition,
    build_rule,
    get_knowledge,
)


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset the knowledge loader singleton before each test."""
    IngredientKnowledgeLoader.reset()
    yield
    IngredientKnowledgeLoader.reset()


@pytest.fixture
def loader():
    return get_knowledge()


class TestShippedKnowledge:

    def test_entry_and_rule_counts(self, loader):
        assert len(loader.definitions) == 48
        assert len(loader.rules) == 8

    def test_version(self, loader):
        assert loader.version == "knowledge_v1.0+rules_v1.0"

    def test_singleton(self, loader):
        assert get_knowledge() is loader

    def test_every_entry_has_patterns(self, loader):
        assert all(d.patterns for d in loader.definitions)

    def test_harmful_section_first(self, loader):
        first_four = loader.definitions[:4]
        assert all(d.category == IngredientCategory.HARMFUL for d in first_four)
        assert first_four[0].risk_level == RiskLevel.TOXIC

    def test_harmful_before_benign_with_shared_tokens(self, loader):
        names = [d.display_name for d in loader.definitions]
        # harmful entries are evaluated before benign ones
        assert names.index("木糖醇") < names.index("維生素 E")
        assert names.index("咖啡因") < names.index("雞肉")

    def test_sugar_patterns_avoid_bare_sugar_character(self, loader):
        sugar = loader.get_definition("糖 / 甜味劑")
        assert "糖" not in sugar.patterns
        assert "葡萄糖" not in sugar.patterns

    def test_joint_rule_has_cat_guard(self, loader):
        rule = loader.get_rule("葡萄糖胺 + 軟骨素")
        assert rule.species_guard is not None
        assert rule.species_guard.species == frozenset(["貓"])
        assert rule.species_guard.required_symptoms == frozenset(["joint"])

    def test_taurine_rule_is_not_symptom_gated(self, loader):
        rule = loader.get_rule("牛磺酸（貓咪必需）")
        assert rule.symptom_triggers == frozenset()
        assert rule.priority == SupplementPriority.HIGH

    def test_unknown_lookups(self, loader):
        assert loader.get_definition("unobtainium") is None
        assert loader.get_rule("unobtainium") is None


class TestRiskOrdering:

    def test_severity_scale(self):
        ordered = sorted(RiskLevel, key=lambda level: level.severity)
        assert ordered == [RiskLevel.SAFE, RiskLevel.CAUTION, RiskLevel.WARNING, RiskLevel.TOXIC]

    def test_priority_rank(self):
        assert SupplementPriority.HIGH.rank < SupplementPriority.MEDIUM.rank < SupplementPriority.LOW.rank


class TestValidation:

    def test_empty_patterns_rejected(self):
        with pytest.raises(KnowledgeBaseError):
            build_definition({
                "display_name": "nothing",
                "patterns": [],
                "category": "other",
                "risk_level": "safe",
                "effect": "",
            })

    def test_unknown_risk_level_rejected(self):
        with pytest.raises(KnowledgeBaseError):
            build_definition({
                "display_name": "x",
                "patterns": ["x"],
                "category": "other",
                "risk_level": "deadly",
                "effect": "",
            })

    def test_rule_missing_priority_rejected(self):
        with pytest.raises(KnowledgeBaseError):
            build_rule({"name": "x", "reason": "", "missing_patterns": ["x"]})

    def test_missing_resources(self, tmp_path, monkeypatch):
        monkeypatch.setattr("app.ingredients.knowledge.DATA_DIR", tmp_path)
        with pytest.raises(KnowledgeBaseError):
            get_knowledge()


class TestCustomDataDir:

    def test_loads_from_override_directory(self, tmp_path, monkeypatch):
        (tmp_path / KNOWLEDGE_FILE).write_text(json.dumps({
            "version": "9.9",
            "sections": [{
                "section": "harmful",
                "entries": [{
                    "display_name": "Grapes",
                    "patterns": ["grape", "raisin"],
                    "category": "harmful",
                    "risk_level": "toxic",
                    "effect": "Kidney damage",
                }],
            }],
        }), encoding="utf-8")
        (tmp_path / RULES_FILE).write_text(json.dumps({
            "version": "9.9",
            "rules": [],
        }), encoding="utf-8")
        monkeypatch.setattr("app.ingredients.knowledge.DATA_DIR", tmp_path)

        loader = get_knowledge()

        assert loader.version == "knowledge_v9.9+rules_v9.9"
        assert [d.display_name for d in loader.definitions] == ["Grapes"]
        assert loader.definitions[0].related_symptoms == frozenset()
        assert loader.rules == ()
