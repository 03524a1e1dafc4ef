"""
Embedding readiness gate and embedding text builder.

Embedding generation costs a provider call and every stored vector lands
in the similarity index, so wines whose enrichment is near-empty are kept
out of it.
"""

from typing import Optional

from ..models.wine import CatalogWine, EnrichmentPayload


def _present(text: Optional[str]) -> bool:
    return bool(text and text.strip())


def is_ready_for_embedding(enrichment: Optional[EnrichmentPayload]) -> bool:
    """
    Check that enrichment data has enough descriptive text to embed.

    Requires a non-blank summary, or at least one tasting note together
    with at least one food pairing. Never raises.
    """
    if enrichment is None:
        return False

    if _present(enrichment.summary):
        return True

    has_tasting_notes = bool(enrichment.tasting_notes and enrichment.tasting_notes.non_blank())
    has_food_pairings = any(_present(p) for p in enrichment.food_pairings)
    return has_tasting_notes and has_food_pairings


def build_wine_embedding_text(wine: CatalogWine) -> str:
    """
    Build the text representation of a wine that gets embedded.

    Sections, in order: identity line, summary, overview, tasting notes,
    food pairings, signature traits, terroir.
    """
    sections: list[str] = []

    wine_type = wine.wine_type.value if wine.wine_type else None
    basic_info = " • ".join(
        part for part in (wine.name, wine.producer_name, wine_type, wine.grape) if part
    )
    if basic_info:
        sections.append(basic_info)

    enrichment = wine.enrichment
    if enrichment is None:
        return "\n\n".join(sections)

    for text in (enrichment.summary, enrichment.overview):
        if _present(text):
            sections.append(text.strip())

    if enrichment.tasting_notes:
        notes = enrichment.tasting_notes.non_blank()
        if notes:
            sections.append(f"Tasting: {' '.join(notes)}")

    if enrichment.food_pairings:
        sections.append(f"Pairs with: {', '.join(enrichment.food_pairings)}")

    for text in (enrichment.signature_traits, enrichment.terroir):
        if _present(text):
            sections.append(text.strip())

    return "\n\n".join(sections)
