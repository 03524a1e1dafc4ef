"""
Batch embedding generation for enriched catalog wines.

Wines failing the readiness gate are skipped before any provider call.
Provider calls run on a bounded asyncio worker pool and are spaced by a
FixedIntervalThrottle. One wine failing never aborts the batch: the
failure lands in BatchResult.errors and the rest continue.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from ..config import Config
from ..models.wine import CatalogWine
from .embedding_readiness import build_wine_embedding_text, is_ready_for_embedding
from .protocols import CatalogStore, EmbeddingProvider

logger = logging.getLogger(__name__)


class FixedIntervalThrottle:
    """
    Spaces successive acquire() calls at least `interval` seconds apart.

    clock and sleep are injectable so tests can run without real delays.
    """

    def __init__(
        self,
        interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.interval = Config.embedding_batch_interval() if interval is None else interval
        self._clock = clock
        self._sleep = sleep
        self._next_at: Optional[float] = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = self._clock()
            if self._next_at is not None and now < self._next_at:
                await self._sleep(self._next_at - now)
                now = self._next_at
            self._next_at = now + self.interval


@dataclass(frozen=True)
class BatchItemError:
    wine_id: int
    wine_name: str
    reason: str


@dataclass
class BatchResult:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[BatchItemError] = field(default_factory=list)

    @property
    def message(self) -> str:
        if not (self.processed or self.skipped or self.failed):
            return "No wines to process"
        return f"Processed {self.processed} wines successfully"


# Per-wine outcomes, aggregated in input order
_PROCESSED = "processed"
_SKIPPED = "skipped"


async def generate_all_embeddings(
    catalog: CatalogStore,
    provider: EmbeddingProvider,
    force_regenerate: bool = False,
    limit: Optional[int] = None,
    concurrency: Optional[int] = None,
    throttle: Optional[FixedIntervalThrottle] = None,
) -> BatchResult:
    """
    Generate and store embeddings for enriched wines.

    Args:
        catalog: Source of wines and sink for vectors
        provider: Embedding provider
        force_regenerate: Re-embed wines that already have an embedding
        limit: Max wines to fetch
        concurrency: Max in-flight provider calls
        throttle: Spacing between provider calls

    Returns:
        BatchResult with processed/skipped/failed counts and per-wine errors
    """
    wines = catalog.get_wines_for_embedding(force_regenerate=force_regenerate, limit=limit)
    result = BatchResult()
    if not wines:
        logger.info("No wines to process")
        return result

    logger.info(
        f"Starting embedding generation for {len(wines)} wines "
        f"(limit={limit or 'none'}, force_regenerate={force_regenerate})"
    )

    semaphore = asyncio.Semaphore(concurrency or Config.embedding_batch_concurrency())
    throttle = throttle or FixedIntervalThrottle()

    async def process(wine: CatalogWine):
        if not is_ready_for_embedding(wine.enrichment):
            logger.debug(f"Skipping wine {wine.id} ({wine.name}): insufficient enrichment data")
            return _SKIPPED

        async with semaphore:
            await throttle.acquire()
            try:
                vector = await provider.embed(build_wine_embedding_text(wine))
                catalog.save_embedding(wine.id, vector)
            except Exception as e:
                logger.error(f"Error processing wine {wine.id} ({wine.name}): {type(e).__name__}: {e}")
                return BatchItemError(wine_id=wine.id, wine_name=wine.name, reason=str(e) or type(e).__name__)

        logger.debug(f"Generated embedding for {wine.name} by {wine.producer_name}")
        return _PROCESSED

    outcomes = await asyncio.gather(*[process(wine) for wine in wines])

    for outcome in outcomes:
        if outcome == _PROCESSED:
            result.processed += 1
        elif outcome == _SKIPPED:
            result.skipped += 1
        else:
            result.failed += 1
            result.errors.append(outcome)

    logger.info(
        f"Embedding generation complete: processed={result.processed}, "
        f"skipped={result.skipped}, failed={result.failed}"
    )
    return result
