"""
/food-pairing/search endpoint.

Ranks wines in a cellar for a free-text dish description using
rule-based and semantic scoring.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..config import Config
from ..feature_flags import FeatureFlags, get_feature_flags
from ..models.response import PairingSearchRequest, PairingSearchResponse
from ..services.embeddings import ProviderUnavailable, RateLimited
from ..services.pairing_search import FoodPairingSearch, PairingValidationError
from .dependencies import get_pairing_search

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/food-pairing/search", response_model=PairingSearchResponse)
async def search_food_pairing(
    request: PairingSearchRequest,
    search: FoodPairingSearch = Depends(get_pairing_search),
    flags: FeatureFlags = Depends(get_feature_flags),
) -> PairingSearchResponse:
    """
    Search for wine recommendations for a dish.

    Returns recommendations sorted by hybrid score with explanations.
    """
    logger.info(f"Food pairing search: '{request.dish}' for user {request.user_id}")

    try:
        result = await search.search(
            request.dish,
            user_id=request.user_id,
            limit=request.limit,
            semantic_enabled=flags.feature_semantic_pairing,
        )
    except PairingValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RateLimited:
        raise HTTPException(status_code=429, detail="Too many requests. Please try again in a moment.")
    except ProviderUnavailable:
        raise HTTPException(status_code=503, detail="AI service temporarily unavailable")
    except Exception as e:
        logger.error(f"Food pairing search error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to search food pairings")

    logger.info(f"Found {len(result.recommendations)} recommendations")
    return PairingSearchResponse.from_result(result)


@router.get("/food-pairing/search")
async def describe_food_pairing():
    """Endpoint description."""
    return {
        "endpoint": "/food-pairing/search",
        "method": "POST",
        "description": "Search for wine pairings based on food/dish description",
        "parameters": {
            "dish": f"string (required) - Food or dish description, max {Config.MAX_DISH_LENGTH} characters",
            "user_id": "string (optional) - Only consider wines in this user's cellar",
            "limit": (
                f"number (optional) - Max results, default {Config.DEFAULT_PAIRING_LIMIT}, "
                f"max {Config.MAX_PAIRING_LIMIT}"
            ),
        },
        "example": {
            "dish": "pasta carbonara with bacon",
            "limit": 10,
        },
    }
