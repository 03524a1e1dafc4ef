"""
/embeddings/generate-all endpoint.

Batch-generates embeddings for enriched wines that pass the readiness gate.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..feature_flags import FeatureFlags, get_feature_flags
from ..models.response import BatchResultResponse
from ..services.catalog_repository import CatalogRepository
from ..services.embedding_batch import generate_all_embeddings
from ..services.protocols import EmbeddingProvider
from .dependencies import get_provider, get_repository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/embeddings/generate-all", response_model=BatchResultResponse)
async def generate_all(
    limit: Optional[int] = Query(None, ge=1, description="Process at most this many wines"),
    force_regenerate: bool = Query(False, description="Re-embed wines that already have an embedding"),
    repo: CatalogRepository = Depends(get_repository),
    provider: EmbeddingProvider = Depends(get_provider),
    flags: FeatureFlags = Depends(get_feature_flags),
) -> BatchResultResponse:
    """
    Generate embeddings for enriched wines.

    Per-wine failures are reported in `errors`; they do not fail the request.
    """
    if not flags.feature_embedding_generation:
        raise HTTPException(status_code=404, detail="Embedding generation is disabled")

    try:
        result = await generate_all_embeddings(
            repo, provider, force_regenerate=force_regenerate, limit=limit
        )
    except Exception as e:
        logger.error(f"Embedding generation error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to generate embeddings")

    return BatchResultResponse.from_result(result)
