from .enums import (
    FoodCategory,
    WineType,
    Body,
    Level,
    Sweetness,
    BottleStatus,
)
from .wine import (
    WineDescriptor,
    TastingNotes,
    EnrichmentPayload,
    CatalogWine,
)

__all__ = [
    "FoodCategory",
    "WineType",
    "Body",
    "Level",
    "Sweetness",
    "BottleStatus",
    "WineDescriptor",
    "TastingNotes",
    "EnrichmentPayload",
    "CatalogWine",
]
