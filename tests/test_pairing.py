"""
Tests for food classification, rule-based scoring and the hybrid blend.
"""

import pytest

from cellar.models.enums import Body, FoodCategory, Level, Sweetness, WineType
from cellar.models.wine import EnrichmentPayload
from cellar.services.embeddings import InvalidEmbeddingError
from cellar.services.pairing import (
    HybridPairingScorer,
    PairingService,
    calculate_rule_based_score,
    classify_food,
    closest_pairing_first,
    generate_pairing_explanation,
    total_from_breakdown,
)


class TestClassifyFood:
    @pytest.mark.parametrize("dish,expected", [
        ("grilled steak", FoodCategory.RED_MEAT),
        ("Roast chicken with thyme", FoodCategory.WHITE_MEAT),
        ("Grilled salmon", FoodCategory.FISH_SEAFOOD),
        ("pasta carbonara with bacon", FoodCategory.PASTA),
        ("Camembert and crackers", FoodCategory.CHEESE),
        ("BBQ pulled pork", FoodCategory.WHITE_MEAT),
        ("Rökt lax", FoodCategory.GRILLED_SMOKED),
        ("truffle risotto", FoodCategory.RICH_FATTY),
        ("spicy thai curry", FoodCategory.SPICY),
        ("green salad", FoodCategory.VEGETABLES),
        ("chocolate cake", FoodCategory.DESSERT),
        ("steaks with fries", FoodCategory.RED_MEAT),
        ("apple pies", FoodCategory.DESSERT),
        ("vegetable curries", FoodCategory.SPICY),
        ("something unusual", FoodCategory.UNKNOWN),
        ("", FoodCategory.UNKNOWN),
    ])
    def test_categories(self, dish, expected):
        assert classify_food(dish) == expected

    def test_first_match_wins(self):
        # Both red meat and grilled keywords; red meat is checked first
        assert classify_food("grilled lamb") == FoodCategory.RED_MEAT

    @pytest.mark.parametrize("dish", [
        "a shot of espresso",
        "a piece of toast",
        "start with bread",
        "gamey broth",
    ])
    def test_keywords_match_whole_words(self, dish):
        assert classify_food(dish) == FoodCategory.UNKNOWN


class TestRuleBasedScore:
    def test_red_beats_sparkling_for_steak(self, make_wine):
        red = make_wine(wine_type=WineType.RED)
        sparkling = make_wine(wine_type=WineType.SPARKLING)
        category = classify_food("grilled steak")
        assert calculate_rule_based_score(red, category).score > calculate_rule_based_score(sparkling, category).score

    def test_unknown_attributes_are_neutral(self, make_wine):
        result = calculate_rule_based_score(make_wine(wine_type=WineType.RED), FoodCategory.RED_MEAT)
        assert result.wine_type_match == 100
        assert result.body_match == 50
        assert result.tannin_match == 50
        assert result.acidity_match == 50
        assert result.score == pytest.approx(70.0)

    def test_unknown_wine_type_low_baseline(self, make_wine):
        result = calculate_rule_based_score(make_wine(wine_type=None), FoodCategory.RED_MEAT)
        assert result.wine_type_match == 40

    def test_full_structure_red_with_red_meat(self, make_wine):
        wine = make_wine(wine_type=WineType.RED, body=Body.FULL, tannin_level=Level.HIGH,
                         acidity_level=Level.MEDIUM, sweetness_level=Sweetness.DRY)
        assert calculate_rule_based_score(wine, FoodCategory.RED_MEAT).score == pytest.approx(97.0)

    def test_light_white_with_fish(self, make_wine):
        wine = make_wine(wine_type=WineType.WHITE, body=Body.LIGHT, tannin_level=Level.LOW,
                         acidity_level=Level.HIGH)
        assert calculate_rule_based_score(wine, FoodCategory.FISH_SEAFOOD).score == pytest.approx(100.0)

    def test_sweet_wine_bonus_for_dessert(self, make_wine):
        wine = make_wine(wine_type=WineType.DESSERT, sweetness_level=Sweetness.VERY_SWEET)
        result = calculate_rule_based_score(wine, FoodCategory.DESSERT)
        assert result.sweetness_adjustment == 10
        assert result.score == pytest.approx(80.0)

    def test_dry_wine_penalty_for_dessert(self, make_wine):
        wine = make_wine(wine_type=WineType.DESSERT, sweetness_level=Sweetness.DRY)
        assert calculate_rule_based_score(wine, FoodCategory.DESSERT).sweetness_adjustment == -10

    def test_sweet_wine_penalty_elsewhere(self, make_wine):
        wine = make_wine(wine_type=WineType.RED, sweetness_level=Sweetness.SWEET)
        assert calculate_rule_based_score(wine, FoodCategory.RED_MEAT).sweetness_adjustment == -10

    def test_score_stays_in_range(self, make_wine):
        wine = make_wine(wine_type=WineType.DESSERT, body=Body.MEDIUM, tannin_level=Level.LOW,
                         acidity_level=Level.MEDIUM, sweetness_level=Sweetness.SWEET)
        result = calculate_rule_based_score(wine, FoodCategory.DESSERT)
        assert result.score == pytest.approx(100.0)
        assert result.sweetness_adjustment == pytest.approx(0.0)

    @pytest.mark.parametrize("category", list(FoodCategory))
    @pytest.mark.parametrize("wine_type", [*WineType, None])
    def test_every_combination_in_range(self, make_wine, category, wine_type):
        for sweetness in [*Sweetness, None]:
            wine = make_wine(wine_type=wine_type, body=Body.FULL, tannin_level=Level.HIGH,
                             acidity_level=Level.LOW, sweetness_level=sweetness)
            assert 0 <= calculate_rule_based_score(wine, category).score <= 100


class TestExplanation:
    def test_red_meat_rules(self, make_wine):
        wine = make_wine(wine_type=WineType.RED, body=Body.FULL, tannin_level=Level.HIGH)
        explanation = generate_pairing_explanation(wine, FoodCategory.RED_MEAT, 95)
        assert explanation == (
            "Classic pairing - red wine complements red meat beautifully. "
            "Full body matches the richness of the dish. "
            "Tannins cut through fat and complement protein"
        )

    def test_seafood_rules(self, make_wine):
        wine = make_wine(wine_type=WineType.WHITE, body=Body.LIGHT)
        explanation = generate_pairing_explanation(wine, FoodCategory.FISH_SEAFOOD, 95)
        assert "white wine enhances delicate seafood flavors" in explanation
        assert "Light body won't overpower delicate flavors" in explanation

    def test_generic_good_pairing(self, make_wine):
        wine = make_wine(wine_type=WineType.ROSE)
        assert generate_pairing_explanation(wine, FoodCategory.UNKNOWN, 75) == \
            "Good pairing based on wine characteristics and food type"

    def test_generic_weak_pairing(self, make_wine):
        wine = make_wine(wine_type=WineType.ROSE)
        assert generate_pairing_explanation(wine, FoodCategory.UNKNOWN, 50) == \
            "This wine could work depending on preparation and personal taste"


class TestPairingService:
    def test_varietal_lookup(self):
        assert PairingService().get_pairing("Merlot", WineType.RED) == "Roast chicken, mushroom dishes, pasta"

    def test_wine_type_fallback(self):
        assert PairingService().get_pairing("Unknown Grape", WineType.WHITE) == "Seafood, poultry, light dishes"

    def test_no_match(self):
        assert PairingService().get_pairing(None, None) is None


class TestHybridPairingScorer:
    @pytest.fixture
    def scorer(self):
        return HybridPairingScorer()

    def test_unembedded_wine_uses_rules_only(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.RED, body=Body.FULL)
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine, dish_embedding=[1.0, 0.0])
        assert score.semantic_score == 0
        assert score.semantic_available is False
        assert score.total == score.rule_based_score
        assert score.breakdown["semantic_weight"] == 0

    def test_no_dish_embedding_uses_rules_only(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.RED, embedding=[1.0, 0.0])
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine, dish_embedding=None)
        assert score.semantic_available is False
        assert score.total == score.rule_based_score

    def test_blend_with_embedding(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.RED, embedding=[1.0, 0.0])
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine, dish_embedding=[1.0, 0.0])
        assert score.semantic_available is True
        assert score.semantic_score == pytest.approx(100.0)
        assert score.total == pytest.approx(0.4 * 70.0 + 0.6 * 100.0)

    def test_orthogonal_embedding_is_midpoint(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.RED, embedding=[0.0, 1.0])
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine, dish_embedding=[1.0, 0.0])
        assert score.semantic_score == pytest.approx(50.0)

    def test_total_reconstructable_from_breakdown(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.DESSERT, sweetness_level=Sweetness.SWEET, embedding=[0.6, 0.8])
        for embedding in ([1.0, 0.0], None):
            score = scorer.score("chocolate cake", FoodCategory.DESSERT, wine, dish_embedding=embedding)
            assert total_from_breakdown(score.breakdown) == pytest.approx(score.total)

    def test_semantic_note_when_semantic_dominates(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.ROSE, embedding=[1.0, 0.0])
        score = scorer.score("something unusual", FoodCategory.UNKNOWN, wine, dish_embedding=[1.0, 0.0])
        assert "Strong similarity to your dish description" in score.explanation

    def test_no_semantic_note_without_embedding(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.ROSE)
        score = scorer.score("something unusual", FoodCategory.UNKNOWN, wine)
        assert "Strong similarity" not in score.explanation

    def test_dimension_mismatch_raises(self, scorer, make_wine):
        wine = make_wine(embedding=[1.0, 0.0, 0.0])
        with pytest.raises(InvalidEmbeddingError):
            scorer.score("steak", FoodCategory.RED_MEAT, wine, dish_embedding=[1.0, 0.0])

    def test_idempotent(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.WHITE, body=Body.LIGHT, embedding=[0.3, 0.4])
        first = scorer.score("grilled salmon", FoodCategory.FISH_SEAFOOD, wine, dish_embedding=[0.5, 0.1])
        second = scorer.score("grilled salmon", FoodCategory.FISH_SEAFOOD, wine, dish_embedding=[0.5, 0.1])
        assert first == second

    def test_pairing_reason_uses_enrichment_pairings(self, scorer, make_wine):
        wine = make_wine(
            wine_type=WineType.RED,
            enrichment=EnrichmentPayload(food_pairings=["Grilled steak", "Lamb chops", "Aged cheddar"]),
        )
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine)
        assert score.pairing_reason.startswith("Traditionally pairs with: Grilled steak, Lamb chops. ")
        assert "Aged cheddar" not in score.pairing_reason

    def test_pairing_reason_leads_with_pairing_closest_to_dish(self, scorer, make_wine):
        wine = make_wine(
            wine_type=WineType.RED,
            enrichment=EnrichmentPayload(food_pairings=["Lamb chops", "Grilled steak", "Aged cheddar"]),
        )
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine)
        assert score.pairing_reason.startswith("Traditionally pairs with: Grilled steak, Lamb chops. ")

    def test_pairing_reason_depends_on_dish(self, scorer, make_wine):
        wine = make_wine(
            wine_type=WineType.RED,
            enrichment=EnrichmentPayload(food_pairings=["Grilled steak", "Lamb chops", "Aged cheddar"]),
        )
        steak = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine)
        cheese = scorer.score("aged cheddar", FoodCategory.CHEESE, wine)
        assert cheese.pairing_reason.startswith("Traditionally pairs with: Aged cheddar, Grilled steak")
        assert steak.pairing_reason != cheese.pairing_reason

    def test_closest_pairing_first_keeps_order_on_ties(self):
        assert closest_pairing_first("zzz", ["Oysters", "Sushi"]) == ["Oysters", "Sushi"]
        assert closest_pairing_first("sushi", ["Oysters", "Sushi", "Crab"]) == ["Sushi", "Oysters", "Crab"]
        assert closest_pairing_first("anything", []) == []

    def test_pairing_reason_falls_back_to_varietal_table(self, scorer, make_wine):
        wine = make_wine(wine_type=WineType.RED, grape="Merlot")
        score = scorer.score("grilled steak", FoodCategory.RED_MEAT, wine)
        assert score.pairing_reason.startswith("Traditionally pairs with: Roast chicken, mushroom dishes, pasta")

    @pytest.mark.parametrize("rule_weight,semantic_weight", [(0.5, 0.6), (0.7, 0.3)])
    def test_invalid_weights_rejected(self, rule_weight, semantic_weight):
        with pytest.raises(ValueError):
            HybridPairingScorer(rule_weight=rule_weight, semantic_weight=semantic_weight)
