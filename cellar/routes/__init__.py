from .wines import router as wines_router
from .pairing import router as pairing_router
from .embeddings import router as embeddings_router

__all__ = ["wines_router", "pairing_router", "embeddings_router"]
