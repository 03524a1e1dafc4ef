from .similarity import string_similarity
from .wine_matcher import WineEntityResolver, NO_MATCH
from .embedding_readiness import is_ready_for_embedding
from .pairing import HybridPairingScorer, classify_food
from .ranking import rank_recommendations
from .pairing_search import FoodPairingSearch
from .embedding_batch import generate_all_embeddings
from .catalog_repository import CatalogRepository

__all__ = [
    "string_similarity",
    "WineEntityResolver",
    "NO_MATCH",
    "is_ready_for_embedding",
    "HybridPairingScorer",
    "classify_food",
    "rank_recommendations",
    "FoodPairingSearch",
    "generate_all_embeddings",
    "CatalogRepository",
]
