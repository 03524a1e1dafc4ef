"""
Protocols for the collaborators the matching/pairing engine calls into.

The engine owns no persistence. A catalog store, an inventory store and an
embedding provider are reached only through these interfaces;
catalog_repository.CatalogRepository and embeddings.*Provider are the
shipped implementations.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..models.enums import WineType
from ..models.wine import CatalogWine, EnrichmentPayload, WineDescriptor


@dataclass(frozen=True)
class WineFilter:
    """Restricts which catalog wines are returned for pairing."""
    user_id: Optional[str] = None       # Only wines this user has in the cellar
    wine_type: Optional[WineType] = None
    limit: Optional[int] = None


class DuplicateWineError(ValueError):
    """A wine with the same name, producer and vintage is already in the catalog."""

    def __init__(self, wine_id: int):
        super().__init__(f"Wine already in catalog as {wine_id}")
        self.wine_id = wine_id


class CatalogStore(Protocol):
    """Keyed lookup/insert of wine records and their embeddings."""

    def find_candidates(
        self,
        name_hint: str,
        producer_hint: str = "",
        vintage: Optional[int] = None,
    ) -> list[CatalogWine]:
        """Catalog wines plausibly matching a scanned wine (blocking step for resolution)."""
        ...

    def get_wines_with_embeddings(self, wine_filter: WineFilter) -> list[CatalogWine]:
        """Wines that already carry an embedding."""
        ...

    def save_embedding(self, wine_id: int, vector: Sequence[float]) -> None:
        """Persist an embedding. Raises on failure."""
        ...

    def get_wines_for_embedding(
        self,
        force_regenerate: bool = False,
        limit: Optional[int] = None,
    ) -> list[CatalogWine]:
        """Enriched wines needing an embedding (all enriched wines when forced)."""
        ...

    def add_wine(
        self,
        descriptor: WineDescriptor,
        wine_type: Optional[WineType] = None,
        enrichment: Optional[EnrichmentPayload] = None,
    ) -> int:
        """
        Insert a new catalog wine and return its id.

        Raises DuplicateWineError when the identity is already stored.
        """
        ...


class InventoryStore(Protocol):
    """Which wines a user owns."""

    def get_user_wines(self, user_id: str) -> list[CatalogWine]:
        """Wines with at least one bottle in the user's cellar."""
        ...

    def add_bottle(self, user_id: str, wine_id: int, quantity: int = 1) -> int:
        """Record bottles of a wine in a user's cellar. Returns bottle id."""
        ...


class EmbeddingProvider(Protocol):
    """Text -> fixed-length vector."""

    async def embed(self, text: str) -> list[float]:
        """Raises ProviderUnavailable or RateLimited on provider failure."""
        ...
