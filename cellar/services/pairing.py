"""
Hybrid food-wine pairing scorer.

Tier 1: Rule-based affinity (static table of classic pairing principles):
- Wine type vs food category
- Body vs richness of the dish
- Tannin vs protein/fat
- Acidity vs richness
- Sweetness adjustment (dessert wants sweet, red meat doesn't)

Tier 2: Semantic similarity between the dish embedding and the wine
embedding, rescaled to 0-100.

Wines with an embedding get a weighted blend; wines without one are
scored on rules alone (absence is neutral, never a zero penalty). The
rule rationale is always kept as explanation text. The dish text itself
is only a lexical signal: the stored food pairing closest to it leads the
"traditionally pairs with" reason.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..config import Config
from ..models.enums import Body, FoodCategory, Level, Sweetness, WineType
from ..models.wine import CatalogWine
from .embeddings import cosine_similarity, similarity_to_score
from .similarity import string_similarity


def _keywords(*words: str) -> re.Pattern:
    """Whole-word pattern for keywords and their plurals ("pie" matches "pies", not "piece")."""
    return re.compile(r"\b(?:%s)(?:e?s)?\b" % "|".join(map(re.escape, words)))


# First matching pattern wins; order encodes priority ("grilled steak" is red meat)
FOOD_CATEGORY_PATTERNS: list[tuple[FoodCategory, re.Pattern]] = [
    (FoodCategory.RED_MEAT, _keywords(
        "beef", "steak", "lamb", "venison", "game", "red meat", "brisket", "ribs")),
    (FoodCategory.WHITE_MEAT, _keywords("chicken", "turkey", "pork", "veal", "white meat")),
    (FoodCategory.FISH_SEAFOOD, _keywords(
        "fish", "salmon", "tuna", "cod", "seafood", "shrimp", "lobster", "crab", "oyster", "mussel", "clam")),
    (FoodCategory.PASTA, _keywords(
        "pasta", "spaghetti", "linguine", "penne", "carbonara", "bolognese", "lasagna", "ravioli", "gnocchi")),
    (FoodCategory.CHEESE, _keywords("cheese", "camembert", "brie", "cheddar", "gouda", "parmesan")),
    (FoodCategory.GRILLED_SMOKED, _keywords("grilled", "grillad", "bbq", "barbecue", "smoked", "rökt")),
    (FoodCategory.RICH_FATTY, _keywords(
        "cream", "butter", "buttery", "fried", "creamy", "rich", "fatty", "truffle")),
    (FoodCategory.SPICY, _keywords("spicy", "curry", "curries", "chili", "hot", "thai", "indian", "mexican")),
    (FoodCategory.VEGETABLES, _keywords("vegetable", "salad", "greens", "mushroom", "vegetarian")),
    (FoodCategory.DESSERT, _keywords("dessert", "cake", "chocolate", "pie", "tart", "sweet")),
]


WINE_TYPE_RULES: dict[FoodCategory, dict[WineType, float]] = {
    FoodCategory.RED_MEAT: {
        WineType.RED: 100, WineType.FORTIFIED: 70, WineType.ROSE: 40,
        WineType.WHITE: 20, WineType.SPARKLING: 30, WineType.DESSERT: 10,
    },
    FoodCategory.WHITE_MEAT: {
        WineType.WHITE: 90, WineType.ROSE: 85, WineType.RED: 50,
        WineType.SPARKLING: 80, WineType.FORTIFIED: 30, WineType.DESSERT: 10,
    },
    FoodCategory.FISH_SEAFOOD: {
        WineType.WHITE: 100, WineType.SPARKLING: 90, WineType.ROSE: 70,
        WineType.RED: 20, WineType.FORTIFIED: 30, WineType.DESSERT: 10,
    },
    FoodCategory.PASTA: {
        WineType.RED: 85, WineType.WHITE: 75, WineType.ROSE: 70,
        WineType.SPARKLING: 60, WineType.FORTIFIED: 40, WineType.DESSERT: 10,
    },
    FoodCategory.CHEESE: {
        WineType.RED: 80, WineType.WHITE: 75, WineType.FORTIFIED: 85,
        WineType.SPARKLING: 70, WineType.ROSE: 65, WineType.DESSERT: 80,
    },
    FoodCategory.VEGETABLES: {
        WineType.WHITE: 90, WineType.ROSE: 85, WineType.SPARKLING: 80,
        WineType.RED: 50, WineType.FORTIFIED: 30, WineType.DESSERT: 10,
    },
    FoodCategory.SPICY: {
        WineType.WHITE: 85, WineType.ROSE: 80, WineType.SPARKLING: 75,
        WineType.DESSERT: 70, WineType.RED: 40, WineType.FORTIFIED: 30,
    },
    FoodCategory.RICH_FATTY: {
        WineType.RED: 90, WineType.SPARKLING: 85, WineType.WHITE: 70,
        WineType.ROSE: 65, WineType.FORTIFIED: 75, WineType.DESSERT: 50,
    },
    FoodCategory.GRILLED_SMOKED: {
        WineType.RED: 95, WineType.FORTIFIED: 70, WineType.ROSE: 60,
        WineType.WHITE: 40, WineType.SPARKLING: 45, WineType.DESSERT: 20,
    },
    FoodCategory.DESSERT: {
        WineType.DESSERT: 100, WineType.FORTIFIED: 85, WineType.SPARKLING: 70,
        WineType.WHITE: 50, WineType.ROSE: 40, WineType.RED: 20,
    },
    FoodCategory.UNKNOWN: {
        WineType.RED: 60, WineType.WHITE: 60, WineType.ROSE: 60,
        WineType.SPARKLING: 60, WineType.FORTIFIED: 50, WineType.DESSERT: 40,
    },
}

RICH_FOODS = {FoodCategory.RED_MEAT, FoodCategory.RICH_FATTY, FoodCategory.GRILLED_SMOKED, FoodCategory.CHEESE}
LIGHT_FOODS = {FoodCategory.FISH_SEAFOOD, FoodCategory.VEGETABLES, FoodCategory.WHITE_MEAT}
LOW_PROTEIN_FOODS = {FoodCategory.FISH_SEAFOOD, FoodCategory.VEGETABLES, FoodCategory.SPICY, FoodCategory.DESSERT}
ACIDITY_CUTS_RICHNESS = {FoodCategory.RED_MEAT, FoodCategory.RICH_FATTY, FoodCategory.CHEESE, FoodCategory.WHITE_MEAT}
ACIDIC_FOODS = {FoodCategory.FISH_SEAFOOD, FoodCategory.VEGETABLES}

VARIETAL_PAIRINGS: dict[str, str] = {
    "cabernet sauvignon": "Steak, lamb, aged cheese",
    "merlot": "Roast chicken, mushroom dishes, pasta",
    "pinot noir": "Salmon, duck, grilled vegetables",
    "chardonnay": "Lobster, creamy pasta, roast chicken",
    "sauvignon blanc": "Goat cheese, seafood, salads",
    "pinot grigio": "Light fish, sushi, antipasto",
    "pinot gris": "Light fish, sushi, antipasto",
    "riesling": "Thai food, spicy dishes, pork",
    "syrah": "BBQ ribs, stew, smoked meats",
    "shiraz": "BBQ ribs, stew, smoked meats",
    "malbec": "Grilled steak, empanadas, blue cheese",
    "tempranillo": "Tapas, chorizo, manchego",
    "zinfandel": "Pizza, burgers, BBQ",
    "sangiovese": "Pasta with red sauce, pizza, salami",
    "grenache": "Mediterranean dishes, roasted vegetables",
    "viognier": "Rich fish, apricot dishes, mild curry",
    "gewürztraminer": "Asian cuisine, foie gras, spicy food",
    "gewurztraminer": "Asian cuisine, foie gras, spicy food",
    "nebbiolo": "Truffle dishes, braised meat, risotto",
    "gamay": "Charcuterie, light chicken, picnic food",
    "chenin blanc": "Sushi, Thai food, fruit desserts",
    "muscadet": "Oysters, mussels, light seafood",
    "albariño": "Ceviche, grilled shrimp, paella",
    "albarino": "Ceviche, grilled shrimp, paella",
    "cabernet franc": "Roasted vegetables, pork, goat cheese",
    "barbera": "Tomato-based pasta, pizza, grilled meats",
    "primitivo": "Pizza, burgers, BBQ",
    "nero d'avola": "Grilled meats, eggplant, rich pasta",
    "vermentino": "Seafood, pesto, light salads",
    "prosecco": "Appetizers, light seafood, brunch",
    "moscato": "Fruit desserts, spicy food, brunch",
    "port": "Blue cheese, dark chocolate, nuts",
    "sherry": "Tapas, nuts, cured meats",
    # Wine type fallbacks
    "red": "Red meat, aged cheese, hearty dishes",
    "white": "Seafood, poultry, light dishes",
    "rose": "Salads, light appetizers, grilled fish",
    "sparkling": "Appetizers, oysters, celebration food",
    "dessert": "Fruit tarts, blue cheese, dark chocolate",
    "fortified": "Nuts, aged cheese, dark chocolate",
}


def classify_food(dish: str) -> FoodCategory:
    """Classify a dish description into a food category by keyword lookup."""
    lower = (dish or "").lower()
    for category, pattern in FOOD_CATEGORY_PATTERNS:
        if pattern.search(lower):
            return category
    return FoodCategory.UNKNOWN


def score_wine_type_match(wine_type: Optional[WineType], category: FoodCategory) -> float:
    if wine_type is None:
        return Config.UNKNOWN_WINE_TYPE_SCORE
    return float(WINE_TYPE_RULES[category].get(wine_type, Config.UNKNOWN_WINE_TYPE_SCORE))


def score_body_match(body: Optional[Body], category: FoodCategory) -> float:
    """Lighter foods need lighter wines, rich foods need full-bodied wines."""
    if body is None:
        return Config.NEUTRAL_ATTRIBUTE_SCORE
    if category in RICH_FOODS:
        return {Body.FULL: 100.0, Body.MEDIUM: 70.0, Body.LIGHT: 40.0}[body]
    if category in LIGHT_FOODS:
        return {Body.LIGHT: 100.0, Body.MEDIUM: 70.0, Body.FULL: 40.0}[body]
    # Pasta, spicy, dessert, unknown: medium body usually works
    return 100.0 if body == Body.MEDIUM else 75.0


def score_tannin_match(tannin: Optional[Level], category: FoodCategory) -> float:
    """High tannin cuts through fat and complements protein."""
    if tannin is None:
        return Config.NEUTRAL_ATTRIBUTE_SCORE
    if category in RICH_FOODS:
        return {Level.HIGH: 100.0, Level.MEDIUM: 70.0, Level.LOW: 40.0}[tannin]
    if category in LOW_PROTEIN_FOODS:
        return {Level.LOW: 100.0, Level.MEDIUM: 60.0, Level.HIGH: 20.0}[tannin]
    return {Level.MEDIUM: 100.0, Level.LOW: 80.0, Level.HIGH: 60.0}[tannin]


def score_acidity_match(acidity: Optional[Level], category: FoodCategory) -> float:
    """High acidity balances richness and fat."""
    if acidity is None:
        return Config.NEUTRAL_ATTRIBUTE_SCORE
    if category in ACIDITY_CUTS_RICHNESS:
        return {Level.HIGH: 100.0, Level.MEDIUM: 80.0, Level.LOW: 50.0}[acidity]
    if category in ACIDIC_FOODS:
        return {Level.HIGH: 100.0, Level.MEDIUM: 90.0, Level.LOW: 60.0}[acidity]
    return {Level.HIGH: 90.0, Level.MEDIUM: 100.0, Level.LOW: 60.0}[acidity]


def sweetness_bonus(sweetness: Optional[Sweetness], category: FoodCategory) -> float:
    """Points added to (or removed from) the weighted rule score."""
    if sweetness is None:
        return 0.0
    if category == FoodCategory.DESSERT:
        # Wine should be at least as sweet as the dessert
        return {
            Sweetness.VERY_SWEET: 10.0, Sweetness.SWEET: 10.0, Sweetness.MEDIUM: 5.0,
            Sweetness.OFF_DRY: 0.0, Sweetness.DRY: -10.0,
        }[sweetness]
    if category == FoodCategory.SPICY:
        # A touch of sugar tames heat
        return 5.0 if sweetness in (Sweetness.OFF_DRY, Sweetness.MEDIUM) else 0.0
    if sweetness in (Sweetness.SWEET, Sweetness.VERY_SWEET):
        return -10.0
    return 0.0


@dataclass(frozen=True)
class RuleBasedResult:
    score: float
    wine_type_match: float
    body_match: float
    tannin_match: float
    acidity_match: float
    sweetness_adjustment: float


def calculate_rule_based_score(wine: CatalogWine, category: FoodCategory) -> RuleBasedResult:
    """
    Rule-based score (0-100) for a wine/food-category pair.

    Weighted average of the four structural sub-scores (wine type weighs
    most), plus a sweetness adjustment bounded so the score stays in range.
    """
    wine_type_match = score_wine_type_match(wine.wine_type, category)
    body_match = score_body_match(wine.body, category)
    tannin_match = score_tannin_match(wine.tannin_level, category)
    acidity_match = score_acidity_match(wine.acidity_level, category)

    weighted = (
        wine_type_match * Config.WEIGHT_WINE_TYPE
        + body_match * Config.WEIGHT_BODY
        + tannin_match * Config.WEIGHT_TANNIN
        + acidity_match * Config.WEIGHT_ACIDITY
    )
    adjustment = max(-weighted, min(100.0 - weighted, sweetness_bonus(wine.sweetness_level, category)))

    return RuleBasedResult(
        score=weighted + adjustment,
        wine_type_match=wine_type_match,
        body_match=body_match,
        tannin_match=tannin_match,
        acidity_match=acidity_match,
        sweetness_adjustment=adjustment,
    )


def generate_pairing_explanation(wine: CatalogWine, category: FoodCategory, rule_score: float) -> str:
    """Human-readable rationale from the rules that fired."""
    explanations: list[str] = []

    if category == FoodCategory.RED_MEAT and wine.wine_type == WineType.RED:
        explanations.append("Classic pairing - red wine complements red meat beautifully")
    elif category == FoodCategory.FISH_SEAFOOD and wine.wine_type == WineType.WHITE:
        explanations.append("Perfect match - white wine enhances delicate seafood flavors")
    elif category == FoodCategory.PASTA and wine.wine_type in (WineType.RED, WineType.WHITE):
        explanations.append("Italian classic - pairs wonderfully with pasta dishes")
    elif category == FoodCategory.DESSERT and wine.wine_type in (WineType.DESSERT, WineType.FORTIFIED):
        explanations.append("Sweet wine stands up to the sweetness of the dessert")

    if wine.body == Body.FULL and category in (
        FoodCategory.RED_MEAT, FoodCategory.RICH_FATTY, FoodCategory.GRILLED_SMOKED
    ):
        explanations.append("Full body matches the richness of the dish")
    elif wine.body == Body.LIGHT and category in (FoodCategory.FISH_SEAFOOD, FoodCategory.VEGETABLES):
        explanations.append("Light body won't overpower delicate flavors")

    if wine.tannin_level == Level.HIGH and category in (FoodCategory.RED_MEAT, FoodCategory.RICH_FATTY):
        explanations.append("Tannins cut through fat and complement protein")

    if wine.acidity_level == Level.HIGH and category in (FoodCategory.RICH_FATTY, FoodCategory.CHEESE):
        explanations.append("High acidity balances richness perfectly")

    if not explanations:
        if rule_score >= Config.GOOD_PAIRING_THRESHOLD:
            return "Good pairing based on wine characteristics and food type"
        return "This wine could work depending on preparation and personal taste"

    return ". ".join(explanations)


class PairingService:
    """Food pairing lookup. Varietal first, wine_type fallback."""

    def get_pairing(self, varietal: Optional[str], wine_type: Optional[WineType]) -> Optional[str]:
        """Return food pairing string, or None if no match."""
        if varietal:
            result = VARIETAL_PAIRINGS.get(varietal.lower())
            if result:
                return result

        if wine_type:
            return VARIETAL_PAIRINGS.get(wine_type.value)

        return None


@dataclass(frozen=True)
class PairingScore:
    """
    Scored wine for one dish query. Scores are on a 0-100 scale.

    breakdown holds every sub-score and weight, so total can be rebuilt
    with total_from_breakdown().
    """
    total: float
    rule_based_score: float
    semantic_score: float
    breakdown: dict[str, float] = field(default_factory=dict)
    explanation: str = ""
    pairing_reason: str = ""
    semantic_available: bool = False


def closest_pairing_first(dish: str, pairings: Sequence[str]) -> list[str]:
    """Food pairings with the one lexically closest to the dish moved to the front."""
    if not pairings:
        return []
    best = max(
        range(len(pairings)),
        key=lambda i: (string_similarity(dish, pairings[i], fold=Config.FOLD_ACCENTS), -i),
    )
    return [pairings[best]] + [p for i, p in enumerate(pairings) if i != best]


def total_from_breakdown(breakdown: dict[str, float]) -> float:
    """Recompute the blended total from a PairingScore breakdown."""
    rule = (
        breakdown["wine_type_match"] * breakdown["wine_type_weight"]
        + breakdown["body_match"] * breakdown["body_weight"]
        + breakdown["tannin_match"] * breakdown["tannin_weight"]
        + breakdown["acidity_match"] * breakdown["acidity_weight"]
        + breakdown["sweetness_adjustment"]
    )
    if breakdown["semantic_weight"] == 0:
        return rule
    return breakdown["rule_weight"] * rule + breakdown["semantic_weight"] * breakdown["semantic_similarity"]


class HybridPairingScorer:
    """
    Blends rule-based and semantic scores for a single wine.

    Stateless after construction: safe to call from many threads.
    """

    def __init__(
        self,
        rule_weight: Optional[float] = None,
        semantic_weight: Optional[float] = None,
        pairing_service: Optional[PairingService] = None,
    ):
        self.rule_weight = Config.RULE_WEIGHT if rule_weight is None else rule_weight
        self.semantic_weight = Config.SEMANTIC_WEIGHT if semantic_weight is None else semantic_weight
        if abs(self.rule_weight + self.semantic_weight - 1.0) > 1e-9:
            raise ValueError("rule_weight and semantic_weight must sum to 1")
        if self.semantic_weight < self.rule_weight:
            raise ValueError("semantic_weight must be at least rule_weight")
        self.pairing_service = pairing_service or PairingService()

    def score(
        self,
        dish: str,
        category: FoodCategory,
        wine: CatalogWine,
        dish_embedding: Optional[Sequence[float]] = None,
    ) -> PairingScore:
        """
        Score one wine against a dish.

        Args:
            dish: Dish description (already validated by the caller)
            category: classify_food(dish), computed once per query
            wine: Catalog wine to score
            dish_embedding: Embedding of the dish; None for rules-only scoring

        Raises:
            InvalidEmbeddingError: mismatched dimensions or non-finite values
        """
        rules = calculate_rule_based_score(wine, category)

        semantic_available = wine.has_embedding and dish_embedding is not None
        if semantic_available:
            semantic_score = similarity_to_score(cosine_similarity(dish_embedding, wine.embedding))
            total = self.rule_weight * rules.score + self.semantic_weight * semantic_score
            rule_weight, semantic_weight = self.rule_weight, self.semantic_weight
        else:
            semantic_score = 0.0
            total = rules.score
            rule_weight, semantic_weight = 1.0, 0.0

        breakdown = {
            "wine_type_match": rules.wine_type_match,
            "body_match": rules.body_match,
            "tannin_match": rules.tannin_match,
            "acidity_match": rules.acidity_match,
            "sweetness_adjustment": rules.sweetness_adjustment,
            "wine_type_weight": Config.WEIGHT_WINE_TYPE,
            "body_weight": Config.WEIGHT_BODY,
            "tannin_weight": Config.WEIGHT_TANNIN,
            "acidity_weight": Config.WEIGHT_ACIDITY,
            "semantic_similarity": semantic_score,
            "rule_weight": rule_weight,
            "semantic_weight": semantic_weight,
        }

        explanation = generate_pairing_explanation(wine, category, rules.score)
        if semantic_available and semantic_score - rules.score >= Config.SEMANTIC_DOMINANCE_MARGIN:
            explanation += ". Strong similarity to your dish description contributed to this match"

        return PairingScore(
            total=total,
            rule_based_score=rules.score,
            semantic_score=semantic_score,
            breakdown=breakdown,
            explanation=explanation,
            pairing_reason=self._pairing_reason(dish, wine, explanation),
            semantic_available=semantic_available,
        )

    def _pairing_reason(self, dish: str, wine: CatalogWine, explanation: str) -> str:
        reasons: list[str] = []

        if wine.food_pairings:
            pairings = closest_pairing_first(dish, wine.food_pairings)
            reasons.append(f"Traditionally pairs with: {', '.join(pairings[:2])}")
        else:
            fallback = self.pairing_service.get_pairing(wine.grape, wine.wine_type)
            if fallback:
                reasons.append(f"Traditionally pairs with: {fallback}")

        if explanation:
            reasons.append(explanation)

        if not reasons:
            return "This wine matches your dish based on flavor profiles and characteristics"
        return ". ".join(reasons)
