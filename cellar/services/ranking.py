"""
Deterministic ordering of scored pairing recommendations.

Order: total desc, semantic score desc, catalog id asc. The id tiebreak
makes the ordering total, so the same input always ranks the same way.
"""

from dataclasses import dataclass
from typing import Iterable

from ..models.wine import CatalogWine
from .pairing import PairingScore


@dataclass(frozen=True)
class ScoredWine:
    """A catalog wine paired with its score for one dish query."""
    wine: CatalogWine
    score: PairingScore


def _rank_key(item: ScoredWine) -> tuple[float, float, int]:
    return (-item.score.total, -item.score.semantic_score, item.wine.id)


def rank_recommendations(scored: Iterable[ScoredWine], limit: int) -> list[ScoredWine]:
    """
    Sort and truncate scored wines.

    limit is applied as given; validation happens at the request boundary.
    """
    ranked = sorted(scored, key=_rank_key)
    return ranked[:max(0, limit)]
