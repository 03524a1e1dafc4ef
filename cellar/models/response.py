"""
Pydantic models for the Cellar Pairing API requests and responses.

Scores are rounded here (one decimal place) and nowhere else.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..services.embedding_batch import BatchResult
from ..services.pairing_search import FoodPairingSearchResult
from ..services.ranking import ScoredWine
from ..services.wine_matcher import ResolutionDebugResult
from .enums import FoodCategory, WineType
from .wine import CatalogWine, WineDescriptor


# === Wine resolution ===

class ResolveRequest(BaseModel):
    """Observed wine to resolve against the catalog."""
    name: str = Field(..., max_length=300, description="Wine name as read from the label")
    producer_name: str = Field("", max_length=300, description="Producer / winery")
    vintage: Optional[int] = Field(None, ge=1800, le=2100)
    threshold: Optional[float] = Field(None, ge=0, le=1, description="Override match threshold")

    def to_descriptor(self) -> WineDescriptor:
        return WineDescriptor(name=self.name, producer_name=self.producer_name, vintage=self.vintage)


class NearMissResponse(BaseModel):
    wine_name: str
    producer_name: str
    score: float
    rejection_reason: str


class ResolveResponse(BaseModel):
    matched: bool
    wine_id: Optional[int] = None
    score: Optional[float] = Field(None, description="Combined name/producer similarity (0-1)")
    candidates_count: int = 0
    rejection_reason: Optional[str] = None
    near_misses: list[NearMissResponse] = Field(default_factory=list)

    @classmethod
    def from_debug(cls, result: ResolutionDebugResult) -> "ResolveResponse":
        match = result.match
        return cls(
            matched=bool(match),
            wine_id=match.wine.id if match else None,
            score=round(match.score, 4) if match else None,
            candidates_count=result.candidates_count,
            rejection_reason=result.rejection_reason,
            near_misses=[
                NearMissResponse(
                    wine_name=nm.wine_name,
                    producer_name=nm.producer_name,
                    score=round(nm.score, 4),
                    rejection_reason=nm.rejection_reason,
                )
                for nm in result.near_misses
            ],
        )


class FromScanRequest(BaseModel):
    """Scanned label data: link to an existing wine or create one."""
    name: str = Field(..., min_length=1, max_length=300)
    producer_name: str = Field("", max_length=300)
    vintage: Optional[int] = Field(None, ge=1800, le=2100)
    country: Optional[str] = None
    region: Optional[str] = None
    grape: Optional[str] = None
    wine_type: Optional[str] = Field(None, description="red, white, rose, sparkling, dessert, fortified")
    user_id: Optional[str] = Field(None, description="Add bottles to this user's cellar")
    quantity: int = Field(1, ge=1, le=1000)

    def to_descriptor(self) -> WineDescriptor:
        return WineDescriptor(
            name=self.name,
            producer_name=self.producer_name,
            vintage=self.vintage,
            country=self.country,
            region=self.region,
            grape=self.grape,
        )

    def parsed_wine_type(self) -> Optional[WineType]:
        return WineType.parse(self.wine_type)


class FromScanResponse(BaseModel):
    wine_id: int
    created: bool
    score: Optional[float] = None
    bottle_id: Optional[int] = None


# === Food pairing ===

class PairingSearchRequest(BaseModel):
    # Validated by validate_pairing_query so errors map to 400 with a specific message
    dish: Optional[str] = None
    user_id: Optional[str] = None
    limit: Optional[int] = None


class WineSummary(BaseModel):
    id: int
    name: str
    producer_name: str
    vintage: Optional[int] = None
    wine_type: Optional[str] = None
    grape: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_wine(cls, wine: CatalogWine) -> "WineSummary":
        return cls(
            id=wine.id,
            name=wine.name,
            producer_name=wine.producer_name,
            vintage=wine.vintage,
            wine_type=wine.wine_type.value if wine.wine_type else None,
            grape=wine.grape,
            region=wine.descriptor.region,
            country=wine.descriptor.country,
        )


class ScoreResponse(BaseModel):
    total: float = Field(..., ge=0, le=100)
    rule_based_score: float = Field(..., ge=0, le=100)
    semantic_score: float = Field(..., ge=0, le=100)
    semantic_available: bool
    breakdown: dict[str, float]


class RecommendationResponse(BaseModel):
    wine: WineSummary
    score: ScoreResponse
    explanation: str
    pairing_reason: str

    @classmethod
    def from_scored(cls, item: ScoredWine) -> "RecommendationResponse":
        s = item.score
        return cls(
            wine=WineSummary.from_wine(item.wine),
            score=ScoreResponse(
                total=round(s.total, 1),
                rule_based_score=round(s.rule_based_score, 1),
                semantic_score=round(s.semantic_score, 1),
                semantic_available=s.semantic_available,
                breakdown={k: round(v, 4) for k, v in s.breakdown.items()},
            ),
            explanation=s.explanation,
            pairing_reason=s.pairing_reason,
        )


class PairingSearchResponse(BaseModel):
    success: bool = True
    query: str
    food_category: FoodCategory
    recommendations: list[RecommendationResponse] = Field(default_factory=list)
    total_wines_scanned: int = 0
    semantic_search_used: bool = False

    @classmethod
    def from_result(cls, result: FoodPairingSearchResult) -> "PairingSearchResponse":
        return cls(
            query=result.query,
            food_category=result.food_category,
            recommendations=[RecommendationResponse.from_scored(r) for r in result.recommendations],
            total_wines_scanned=result.total_wines_scanned,
            semantic_search_used=result.semantic_search_used,
        )


# === Embedding generation ===

class BatchItemErrorResponse(BaseModel):
    wine_id: int
    wine_name: str
    reason: str


class BatchResultResponse(BaseModel):
    success: bool = True
    message: str
    processed: int
    skipped: int
    failed: int
    errors: list[BatchItemErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultResponse":
        return cls(
            message=result.message,
            processed=result.processed,
            skipped=result.skipped,
            failed=result.failed,
            errors=[
                BatchItemErrorResponse(wine_id=e.wine_id, wine_name=e.wine_name, reason=e.reason)
                for e in result.errors
            ],
        )
