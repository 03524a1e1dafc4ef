"""
Wine resolution endpoints.

POST /wines/resolve    - match an observed wine against the catalog (read-only)
POST /wines/from-scan  - link a scanned label to a catalog wine or create one
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..feature_flags import FeatureFlags, get_feature_flags
from ..models.response import FromScanRequest, FromScanResponse, ResolveRequest, ResolveResponse
from ..services.catalog_repository import CatalogRepository
from ..services.label_ingestion import ingest_scanned_wine
from ..services.wine_matcher import WineEntityResolver
from .dependencies import get_repository

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_resolution(flags: FeatureFlags) -> None:
    if not flags.feature_label_resolution:
        raise HTTPException(status_code=404, detail="Label resolution is disabled")


@router.post("/wines/resolve", response_model=ResolveResponse)
async def resolve_wine(
    request: ResolveRequest,
    repo: CatalogRepository = Depends(get_repository),
    flags: FeatureFlags = Depends(get_feature_flags),
) -> ResolveResponse:
    """
    Find the catalog wine an observed descriptor refers to.

    Never writes. No match is a normal response (matched=false).
    """
    _require_resolution(flags)

    candidates = repo.find_candidates(request.name, request.producer_name, request.vintage)
    result = WineEntityResolver().resolve_with_debug(
        request.to_descriptor(), candidates, threshold=request.threshold
    )
    return ResolveResponse.from_debug(result)


@router.post("/wines/from-scan", response_model=FromScanResponse)
async def wine_from_scan(
    request: FromScanRequest,
    repo: CatalogRepository = Depends(get_repository),
    flags: FeatureFlags = Depends(get_feature_flags),
) -> FromScanResponse:
    """Link a scanned label to an existing wine, or create a new catalog entry."""
    _require_resolution(flags)

    try:
        result = ingest_scanned_wine(
            repo,
            request.to_descriptor(),
            wine_type=request.parsed_wine_type(),
            inventory=repo,
            user_id=request.user_id,
            quantity=request.quantity,
        )
    except Exception as e:
        logger.error(f"Failed to ingest scanned wine '{request.name}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save wine")

    return FromScanResponse(
        wine_id=result.wine_id,
        created=result.created,
        score=round(result.score, 4) if result.score is not None else None,
        bottle_id=result.bottle_id,
    )
