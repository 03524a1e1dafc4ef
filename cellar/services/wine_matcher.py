"""
Entity resolution for scanned wines against catalog candidates.

Decides whether a freshly observed wine (label scan, manual entry) is the
same wine as an existing catalog entry:

1. Score name and producer separately with normalized edit distance
2. Average the two into a combined score
3. Require combined > threshold and an exact vintage match when the
   observed wine carries a vintage
4. Best combined score wins; ties keep the first candidate in input order

NO_MATCH means "create a new catalog entry". The resolver never writes
to the catalog; linking or merging is the caller's decision.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, Protocol, Sequence, TypeVar, Union

from ..config import Config
from .similarity import string_similarity

logger = logging.getLogger(__name__)


class WineLike(Protocol):
    """Anything with a wine identity (WineDescriptor, CatalogWine)."""
    @property
    def name(self) -> str: ...

    @property
    def producer_name(self) -> str: ...

    @property
    def vintage(self) -> Optional[int]: ...


W = TypeVar("W", bound=WineLike)


class NoMatch:
    """Sentinel for "no existing catalog entry matches"."""
    _instance: Optional["NoMatch"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()


@dataclass(frozen=True)
class MatchResult(Generic[W]):
    """The matched candidate and its combined similarity score (0-1)."""
    wine: W
    score: float


@dataclass(frozen=True)
class CandidateScore:
    """Per-candidate scores, kept for diagnostics."""
    name_score: float
    producer_score: float
    combined: float
    vintage_ok: bool


@dataclass
class NearMiss:
    """A candidate that was considered but didn't make the final match."""
    wine_name: str
    producer_name: str
    score: float
    rejection_reason: str  # "below_threshold", "vintage_mismatch", "not_best"


@dataclass
class ResolutionDebugResult:
    """Result from resolve_with_debug() with diagnostic info."""
    match: Union[MatchResult, NoMatch]
    near_misses: list[NearMiss]
    candidates_count: int
    rejection_reason: Optional[str]  # "no_candidates", "below_threshold", "vintage_mismatch"


class WineEntityResolver:
    """
    Resolves an observed wine to the best catalog candidate.

    Stateless: one instance may be shared across threads.
    """

    def __init__(self, threshold: Optional[float] = None, fold_accents: Optional[bool] = None):
        """
        Initialize resolver.

        Args:
            threshold: Combined score that must be strictly exceeded.
                       Defaults to Config.RESOLVER_THRESHOLD (0.85).
            fold_accents: Compare names with accents stripped.
                          Defaults to Config.FOLD_ACCENTS.
        """
        self.threshold = Config.RESOLVER_THRESHOLD if threshold is None else threshold
        self.fold_accents = Config.FOLD_ACCENTS if fold_accents is None else fold_accents

    def score_candidate(self, target: WineLike, candidate: WineLike) -> CandidateScore:
        name_score = string_similarity(candidate.name, target.name, fold=self.fold_accents)
        producer_score = string_similarity(
            candidate.producer_name, target.producer_name, fold=self.fold_accents
        )
        vintage_ok = target.vintage is None or candidate.vintage == target.vintage
        return CandidateScore(
            name_score=name_score,
            producer_score=producer_score,
            combined=(name_score + producer_score) / 2,
            vintage_ok=vintage_ok,
        )

    def resolve(
        self,
        target: WineLike,
        candidates: Sequence[W],
        threshold: Optional[float] = None,
    ) -> Union[MatchResult[W], NoMatch]:
        """
        Find the best existing match for target.

        Args:
            target: Observed wine (name, producer, optional vintage)
            candidates: Catalog candidates, in retrieval order
            threshold: Override for this call

        Returns:
            MatchResult for the winning candidate, or NO_MATCH
        """
        limit = self.threshold if threshold is None else threshold
        best: Optional[W] = None
        best_score = 0.0

        for candidate in candidates:
            scores = self.score_candidate(target, candidate)
            if not scores.vintage_ok or scores.combined <= limit:
                continue
            # Strictly greater: first candidate wins ties
            if best is None or scores.combined > best_score:
                best = candidate
                best_score = scores.combined

        if best is None:
            return NO_MATCH
        return MatchResult(wine=best, score=best_score)

    def resolve_with_debug(
        self,
        target: WineLike,
        candidates: Sequence[W],
        threshold: Optional[float] = None,
    ) -> ResolutionDebugResult:
        """
        Resolve with full diagnostics (near-misses, rejection reasons).

        The decision is identical to resolve(); only the reporting differs.
        """
        limit = self.threshold if threshold is None else threshold
        match = self.resolve(target, candidates, threshold=limit)

        if not candidates:
            return ResolutionDebugResult(
                match=match, near_misses=[], candidates_count=0, rejection_reason="no_candidates"
            )

        near_misses: list[NearMiss] = []
        saw_vintage_mismatch = False
        for candidate in candidates:
            if match and candidate is match.wine:
                continue
            scores = self.score_candidate(target, candidate)
            if scores.combined <= limit:
                reason = "below_threshold"
            elif not scores.vintage_ok:
                reason = "vintage_mismatch"
                saw_vintage_mismatch = True
            else:
                reason = "not_best"
            near_misses.append(NearMiss(
                wine_name=candidate.name,
                producer_name=candidate.producer_name,
                score=scores.combined,
                rejection_reason=reason,
            ))

        near_misses.sort(key=lambda x: x.score, reverse=True)

        rejection_reason = None
        if not match:
            rejection_reason = "vintage_mismatch" if saw_vintage_mismatch else "below_threshold"
            logger.debug(
                f"No catalog match for '{target.name}' / '{target.producer_name}' "
                f"({len(candidates)} candidates, reason={rejection_reason})"
            )

        return ResolutionDebugResult(
            match=match,
            near_misses=near_misses[:Config.NEAR_MISS_LIMIT],
            candidates_count=len(candidates),
            rejection_reason=rejection_reason,
        )
