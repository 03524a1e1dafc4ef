"""
Shared FastAPI dependencies (singletons via lru_cache).

Tests swap these out with app.dependency_overrides.
"""

from functools import lru_cache

from ..services.catalog_repository import CatalogRepository
from ..services.embeddings import get_embedding_provider
from ..services.pairing_search import FoodPairingSearch
from ..services.protocols import EmbeddingProvider


@lru_cache(maxsize=1)
def get_repository() -> CatalogRepository:
    """Get or create the catalog repository (migrates the database on first use)."""
    return CatalogRepository()


@lru_cache(maxsize=1)
def get_provider() -> EmbeddingProvider:
    return get_embedding_provider()


@lru_cache(maxsize=1)
def get_pairing_search() -> FoodPairingSearch:
    repo = get_repository()
    return FoodPairingSearch(catalog=repo, inventory=repo, provider=get_provider())
