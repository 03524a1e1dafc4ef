"""
Food pairing search: dish description -> ranked wines from a cellar.

Per query:
1. Validate and classify the dish
2. Load candidate wines (user's cellar, or every embedded catalog wine)
3. Embed the dish once, only if some candidate carries an embedding
4. Score every candidate in parallel (ThreadPoolExecutor), join, rank

A failing embedding provider degrades the search to rule-based scoring
unless Config.degrade_on_provider_error() is off, in which case the
provider error propagates to the caller.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from ..config import Config
from ..models.enums import FoodCategory
from .embeddings import EmbeddingProviderError
from .pairing import HybridPairingScorer, classify_food
from .protocols import CatalogStore, EmbeddingProvider, InventoryStore, WineFilter
from .ranking import ScoredWine, rank_recommendations

logger = logging.getLogger(__name__)


class PairingValidationError(ValueError):
    """Dish description is missing or too long."""


@dataclass(frozen=True)
class PairingQuery:
    dish: str
    limit: int


@dataclass
class FoodPairingSearchResult:
    query: str
    food_category: FoodCategory
    recommendations: list[ScoredWine] = field(default_factory=list)
    total_wines_scanned: int = 0
    semantic_search_used: bool = False


def validate_pairing_query(dish: Optional[str], limit: Optional[int] = None) -> PairingQuery:
    """
    Normalize a pairing request.

    Raises PairingValidationError for an empty or over-long dish. An
    out-of-range limit falls back to the default instead of failing.
    """
    if not isinstance(dish, str) or not dish.strip():
        raise PairingValidationError("Dish description is required")

    dish = dish.strip()
    if len(dish) > Config.MAX_DISH_LENGTH:
        raise PairingValidationError(
            f"Dish description too long (max {Config.MAX_DISH_LENGTH} characters)"
        )

    if (
        not isinstance(limit, int)
        or isinstance(limit, bool)
        or not 1 <= limit <= Config.MAX_PAIRING_LIMIT
    ):
        limit = Config.DEFAULT_PAIRING_LIMIT

    return PairingQuery(dish=dish, limit=limit)


class FoodPairingSearch:
    """
    Orchestrates one pairing query across the catalog collaborators.

    The executor is reused across calls; scoring is CPU-bound numpy work.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        inventory: InventoryStore,
        provider: EmbeddingProvider,
        scorer: Optional[HybridPairingScorer] = None,
        max_workers: Optional[int] = None,
    ):
        self.catalog = catalog
        self.inventory = inventory
        self.provider = provider
        self.scorer = scorer or HybridPairingScorer()
        self._executor = ThreadPoolExecutor(max_workers=max_workers or Config.SCORING_WORKERS)

    async def search(
        self,
        dish: Optional[str],
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        semantic_enabled: bool = True,
    ) -> FoodPairingSearchResult:
        """
        Rank candidate wines for a dish.

        Args:
            dish: Free-text dish description
            user_id: Restrict to wines in this user's cellar
            limit: Max recommendations (1-50, default 10)
            semantic_enabled: False forces rule-based scoring

        Raises:
            PairingValidationError: bad dish description
            EmbeddingProviderError: provider failed and degradation is off
        """
        query = validate_pairing_query(dish, limit)
        category = classify_food(query.dish)
        logger.info(f"Classified '{query.dish}' as: {category.value}")

        if user_id:
            wines = self.inventory.get_user_wines(user_id)
        else:
            wines = self.catalog.get_wines_with_embeddings(WineFilter())

        if not wines:
            return FoodPairingSearchResult(query=query.dish, food_category=category)

        dish_embedding = None
        if semantic_enabled and any(w.has_embedding for w in wines):
            dish_embedding = await self._embed_dish(query.dish)
        elif semantic_enabled:
            logger.info("No embeddings available for candidate wines - using rule-based scoring only")

        loop = asyncio.get_running_loop()
        scores = await asyncio.gather(*[
            loop.run_in_executor(
                self._executor, self.scorer.score, query.dish, category, wine, dish_embedding
            )
            for wine in wines
        ])
        scored = [ScoredWine(wine=wine, score=score) for wine, score in zip(wines, scores)]
        recommendations = rank_recommendations(scored, query.limit)

        logger.info(
            f"Scored {len(wines)} wines for '{query.dish}', "
            f"returning {len(recommendations)} (semantic={dish_embedding is not None})"
        )

        return FoodPairingSearchResult(
            query=query.dish,
            food_category=category,
            recommendations=recommendations,
            total_wines_scanned=len(wines),
            semantic_search_used=dish_embedding is not None,
        )

    async def _embed_dish(self, dish: str) -> Optional[list[float]]:
        try:
            return await self.provider.embed(dish)
        except EmbeddingProviderError as e:
            if not Config.degrade_on_provider_error():
                logger.error(f"Dish embedding failed: {type(e).__name__}: {e}")
                raise
            logger.warning(f"Dish embedding failed, falling back to rule-based: {e}")
            return None
