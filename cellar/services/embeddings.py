"""
Text embedding provider and vector similarity.

The provider is swappable via EmbeddingProvider (see protocols.py):
- LiteLLMEmbeddingProvider: hosted embedding model through LiteLLM
- MockEmbeddingProvider: deterministic hashed bag-of-words vectors for
  tests and offline development

Provider failures are normalized into two caller-visible errors:
ProviderUnavailable (connection, timeout, auth, server errors) and
RateLimited. Malformed vectors raise InvalidEmbeddingError.
"""

import hashlib
import logging
import re
from typing import Optional, Sequence

import numpy as np

from ..config import Config

logger = logging.getLogger(__name__)

# Lazy import for litellm to avoid slow network requests during module load
_litellm = None


def _get_litellm():
    """Lazy-load litellm to avoid startup delays from network requests."""
    global _litellm
    if _litellm is None:
        import litellm
        litellm.set_verbose = False
        _litellm = litellm
    return _litellm


class EmbeddingProviderError(Exception):
    """Base class for embedding provider failures."""


class ProviderUnavailable(EmbeddingProviderError):
    """Provider cannot be reached or is not configured."""


class RateLimited(EmbeddingProviderError):
    """Provider rejected the call because of rate limits."""


class InvalidEmbeddingError(ValueError):
    """Vector is empty, non-finite, or has the wrong dimensionality."""


def as_vector(values: Sequence[float], expected_dimensions: Optional[int] = None) -> np.ndarray:
    """Validate and convert an embedding to a float64 array."""
    try:
        vec = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidEmbeddingError(f"Embedding is not numeric: {e}") from e

    if vec.ndim != 1 or vec.size == 0:
        raise InvalidEmbeddingError(f"Embedding must be a non-empty 1-D vector, got shape {vec.shape}")
    if expected_dimensions is not None and vec.size != expected_dimensions:
        raise InvalidEmbeddingError(
            f"Unexpected embedding dimensions: expected {expected_dimensions}, got {vec.size}"
        )
    if not np.all(np.isfinite(vec)):
        raise InvalidEmbeddingError("Embedding contains NaN or infinite values")
    return vec


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity in [-1, 1].

    Raises InvalidEmbeddingError on dimension mismatch, non-finite values
    or zero-length vectors.
    """
    va = as_vector(a)
    vb = as_vector(b, expected_dimensions=va.size)

    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        raise InvalidEmbeddingError("Cannot compare a zero vector")

    cos = float(np.dot(va, vb) / denom)
    return max(-1.0, min(1.0, cos))


def similarity_to_score(cos: float) -> float:
    """Rescale cosine similarity from [-1, 1] to [0, 100]."""
    return max(0.0, min(100.0, (cos + 1.0) / 2.0 * 100.0))


class LiteLLMEmbeddingProvider:
    """
    Embedding provider using LiteLLM's unified interface.

    Default model: text-embedding-3-small (1536 dimensions).
    """

    def __init__(
        self,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: Optional[float] = None,
        api_key: Optional[str] = None,
    ):
        self.model = model or Config.embedding_model()
        self.dimensions = dimensions or Config.embedding_dimensions()
        self.timeout = timeout if timeout is not None else Config.embedding_timeout()
        self.api_key = api_key or Config.openai_api_key()

    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for text.

        Raises:
            ValueError: text is empty
            RateLimited: provider rate limit hit
            ProviderUnavailable: any other provider/transport failure
            InvalidEmbeddingError: provider returned a malformed vector
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        if not self.api_key:
            raise ProviderUnavailable("Embedding API key not configured")

        litellm = _get_litellm()

        try:
            response = await litellm.aembedding(
                model=self.model,
                input=[text.strip()],
                timeout=self.timeout,
                api_key=self.api_key,
            )
        except litellm.RateLimitError as e:
            logger.warning(f"Embedding provider rate limited: {e}")
            raise RateLimited(str(e)) from e
        except (
            litellm.APIConnectionError,
            litellm.Timeout,
            litellm.ServiceUnavailableError,
            litellm.AuthenticationError,
            litellm.APIError,
        ) as e:
            logger.warning(f"Embedding provider unavailable: {type(e).__name__}: {e}")
            raise ProviderUnavailable(str(e)) from e

        item = response.data[0]
        values = item["embedding"] if isinstance(item, dict) else item.embedding
        vec = as_vector(values, expected_dimensions=self.dimensions)
        return vec.tolist()


_TOKEN_RE = re.compile(r"[a-zà-ÿ]+")


class MockEmbeddingProvider:
    """
    Deterministic embedding provider for tests and offline development.

    Each token is hashed into a bucket; texts sharing vocabulary get
    positive cosine similarity. Same text, same vector.
    """

    def __init__(self, dimensions: Optional[int] = None):
        self.dimensions = dimensions or Config.embedding_dimensions()
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")
        self.calls.append(text)

        vec = np.zeros(self.dimensions, dtype=np.float64)
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "little") % self.dimensions
            vec[bucket] += 1.0

        norm = np.linalg.norm(vec)
        if norm == 0:
            # No word tokens: fixed unit vector keeps cosine defined
            vec[0] = 1.0
            norm = 1.0
        return (vec / norm).tolist()


def get_embedding_provider(use_mock: Optional[bool] = None):
    """
    Factory function for embedding providers.

    Args:
        use_mock: If True, return the mock provider. Defaults to
                  Config.use_mock_embeddings().
    """
    if use_mock is None:
        use_mock = Config.use_mock_embeddings()
    if use_mock:
        logger.info("Using mock embedding provider")
        return MockEmbeddingProvider()
    logger.info(f"Using LiteLLM embedding provider ({Config.embedding_model()})")
    return LiteLLMEmbeddingProvider()
