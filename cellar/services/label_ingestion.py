"""
Label-scan ingestion: link a scanned wine to the catalog or create it.

The resolver decides; this module acts on the decision. A scan that
resolves to an existing wine never creates a duplicate catalog row, and
neither does a concurrent scan of the same label: the catalog rejects the
second insert and the scan is linked to the stored wine.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models.enums import WineType
from ..models.wine import WineDescriptor
from .protocols import CatalogStore, DuplicateWineError, InventoryStore
from .wine_matcher import WineEntityResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    wine_id: int
    created: bool
    score: Optional[float] = None      # Match score when linked by the resolver
    bottle_id: Optional[int] = None


def ingest_scanned_wine(
    catalog: CatalogStore,
    descriptor: WineDescriptor,
    wine_type: Optional[WineType] = None,
    inventory: Optional[InventoryStore] = None,
    user_id: Optional[str] = None,
    quantity: int = 1,
    resolver: Optional[WineEntityResolver] = None,
) -> IngestionResult:
    """
    Resolve a scanned wine against catalog candidates.

    Links to the best match when one clears the threshold, otherwise
    creates a new catalog wine. Adds bottles when a user is given.
    """
    resolver = resolver or WineEntityResolver()
    candidates = catalog.find_candidates(
        descriptor.name, descriptor.producer_name, descriptor.vintage
    )
    match = resolver.resolve(descriptor, candidates)

    if match:
        wine_id, created, score = match.wine.id, False, match.score
        logger.info(f"Linked scan '{descriptor.name}' to wine {wine_id} (score={score:.3f})")
    else:
        try:
            wine_id = catalog.add_wine(descriptor, wine_type=wine_type)
            created = True
        except DuplicateWineError as e:
            wine_id, created = e.wine_id, False
            logger.info(f"Scan '{descriptor.name}' already stored as wine {wine_id}")
        score = None

    bottle_id = None
    if inventory is not None and user_id:
        bottle_id = inventory.add_bottle(user_id, wine_id, quantity=quantity)

    return IngestionResult(wine_id=wine_id, created=created, score=score, bottle_id=bottle_id)
