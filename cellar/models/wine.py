"""
Wine identity, enrichment and catalog models.

WineDescriptor and CatalogWine are plain frozen dataclasses used inside the
matching/pairing engine. EnrichmentPayload is a pydantic model because it
arrives as loosely-shaped JSON (camelCase from the enrichment agent,
snake_case from older rows) and is validated once at the storage boundary.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .enums import Body, Level, Sweetness, WineType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WineDescriptor:
    """Observed or catalog wine identity."""
    name: str
    producer_name: str
    vintage: Optional[int] = None
    country: Optional[str] = None
    region: Optional[str] = None
    grape: Optional[str] = None


class TastingNotes(BaseModel):
    """Aroma, palate and finish notes."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    nose: Optional[str] = None
    palate: Optional[str] = None
    finish: Optional[str] = None

    def non_blank(self) -> list[str]:
        return [n.strip() for n in (self.nose, self.palate, self.finish) if n and n.strip()]


class EnrichmentPayload(BaseModel):
    """Structured tasting/pairing attributes produced by the enrichment agent."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    summary: Optional[str] = None
    overview: Optional[str] = None
    terroir: Optional[str] = None
    winemaking: Optional[str] = None
    tasting_notes: Optional[TastingNotes] = None
    serving: Optional[str] = None
    food_pairings: list[str] = Field(default_factory=list)
    signature_traits: Optional[str] = None
    inferred_country: Optional[str] = None
    inferred_region: Optional[str] = None

    @field_validator("food_pairings", mode="before")
    @classmethod
    def coerce_food_pairings(cls, v: Any) -> list[str]:
        """Accept null, a single string, or a list with blanks."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    @classmethod
    def from_raw(cls, raw: Union[str, dict, None]) -> Optional["EnrichmentPayload"]:
        """
        Parse stored enrichment JSON.

        Returns None for missing or malformed payloads so that callers treat
        them exactly like "not enriched".
        """
        if raw is None or raw == "":
            return None
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
            if not isinstance(data, dict):
                logger.warning(f"Ignoring enrichment payload of type {type(data).__name__}")
                return None
            return cls.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring malformed enrichment payload: {e}")
            return None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class CatalogWine:
    """
    A persisted catalog entity.

    The embedding, when present, was generated from enrichment that passed
    the readiness gate at generation time.
    """
    id: int
    descriptor: WineDescriptor
    wine_type: Optional[WineType] = None
    body: Optional[Body] = None
    tannin_level: Optional[Level] = None
    acidity_level: Optional[Level] = None
    sweetness_level: Optional[Sweetness] = None
    enrichment: Optional[EnrichmentPayload] = None
    embedding: Optional[tuple[float, ...]] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def producer_name(self) -> str:
        return self.descriptor.producer_name

    @property
    def vintage(self) -> Optional[int]:
        return self.descriptor.vintage

    @property
    def grape(self) -> Optional[str]:
        return self.descriptor.grape

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and len(self.embedding) > 0

    @property
    def food_pairings(self) -> list[str]:
        if self.enrichment is None:
            return []
        return list(self.enrichment.food_pairings)
