"""
Centralized configuration for the Cellar Pairing backend.

All constants are defined here to avoid scattered magic numbers
and enable easy configuration management.
"""

import os
from pathlib import Path
from typing import Optional


class Config:
    """Application configuration constants."""

    # === Entity Resolution ===
    RESOLVER_THRESHOLD = 0.85   # Combined name/producer similarity must exceed this
    FOLD_ACCENTS = False        # "Château" vs "Chateau" compared as-is by default
    MAX_CANDIDATES = 50         # Catalog rows handed to the resolver per lookup
    CANDIDATE_PREFIX_LENGTH = 2 # Blocking prefix for candidate retrieval
    NEAR_MISS_LIMIT = 5

    # === Hybrid Pairing Blend ===
    # Semantic weighted at least as heavily as rules; the two must sum to 1
    RULE_WEIGHT = 0.4
    SEMANTIC_WEIGHT = 0.6
    # Semantic score must exceed the rule score by this much to be called out
    SEMANTIC_DOMINANCE_MARGIN = 10.0

    # === Rule-Based Sub-Weights ===
    WEIGHT_WINE_TYPE = 0.40
    WEIGHT_BODY = 0.25
    WEIGHT_TANNIN = 0.20
    WEIGHT_ACIDITY = 0.15
    UNKNOWN_WINE_TYPE_SCORE = 40.0  # Low neutral baseline for missing wine type
    NEUTRAL_ATTRIBUTE_SCORE = 50.0  # Missing body/tannin/acidity
    GOOD_PAIRING_THRESHOLD = 70.0

    # === Pairing Query Validation ===
    MAX_DISH_LENGTH = 500
    DEFAULT_PAIRING_LIMIT = 10
    MAX_PAIRING_LIMIT = 50

    # === Performance ===
    SCORING_WORKERS = 4

    # === Environment ===
    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR)."""
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def use_mock_embeddings() -> bool:
        """Use the deterministic mock embedding provider (no API calls)."""
        return os.getenv("USE_MOCK_EMBEDDINGS", "false").lower() == "true"

    @staticmethod
    def openai_api_key() -> Optional[str]:
        """Get OpenAI API key from environment."""
        return os.getenv("OPENAI_API_KEY")

    @staticmethod
    def embedding_model() -> str:
        """Embedding model name (LiteLLM routing). Default: text-embedding-3-small."""
        return os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

    @staticmethod
    def embedding_dimensions() -> int:
        """Expected embedding vector length."""
        try:
            return int(os.getenv("EMBEDDING_DIMENSIONS", "1536"))
        except ValueError:
            return 1536

    @staticmethod
    def embedding_timeout() -> float:
        """Timeout in seconds for a single embedding call. Default: 15.0."""
        try:
            return float(os.getenv("EMBEDDING_TIMEOUT", "15.0"))
        except ValueError:
            return 15.0

    @staticmethod
    def embedding_batch_concurrency() -> int:
        """Max concurrent embedding calls in the batch job."""
        try:
            return max(1, int(os.getenv("EMBEDDING_BATCH_CONCURRENCY", "2")))
        except ValueError:
            return 2

    @staticmethod
    def embedding_batch_interval() -> float:
        """Minimum seconds between embedding calls in the batch job."""
        try:
            return max(0.0, float(os.getenv("EMBEDDING_BATCH_INTERVAL", "0.1")))
        except ValueError:
            return 0.1

    @staticmethod
    def degrade_on_provider_error() -> bool:
        """Fall back to rule-based pairing when the dish embedding fails. Default: True."""
        return os.getenv("DEGRADE_ON_PROVIDER_ERROR", "true").lower() == "true"

    # === Database Persistence ===
    @staticmethod
    def database_path() -> str:
        """Path to SQLite database file.
        Default: cellar/data/cellar.db (relative to package).
        Override with DATABASE_PATH env var for container deployments.
        """
        default = str(Path(__file__).parent / "data" / "cellar.db")
        return os.getenv("DATABASE_PATH", default)
