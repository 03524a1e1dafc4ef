#!/usr/bin/env python3
"""
Embedding Generation CLI

Generates embeddings for enriched catalog wines (same job as
POST /embeddings/generate-all, without the HTTP server).

Usage:
    python -m scripts.generate_embeddings
    python -m scripts.generate_embeddings --limit 100
    python -m scripts.generate_embeddings --force-regenerate --mock
    python -m scripts.generate_embeddings --db /tmp/cellar.db --concurrency 4 --interval 0.2
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from cellar.config import Config
from cellar.services.catalog_repository import CatalogRepository
from cellar.services.embedding_batch import FixedIntervalThrottle, generate_all_embeddings
from cellar.services.embeddings import get_embedding_provider


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate wine embeddings for food pairing search")
    parser.add_argument("--db", help="SQLite database path (default: Config.database_path())")
    parser.add_argument("--limit", type=int, help="Process at most N wines")
    parser.add_argument("--force-regenerate", action="store_true",
                        help="Re-embed wines that already have an embedding")
    parser.add_argument("--mock", action="store_true", help="Use the deterministic mock provider")
    parser.add_argument("--concurrency", type=int, default=Config.embedding_batch_concurrency(),
                        help="Max concurrent provider calls")
    parser.add_argument("--interval", type=float, default=Config.embedding_batch_interval(),
                        help="Minimum seconds between provider calls")
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, Config.log_level(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    repo = CatalogRepository(args.db)
    provider = get_embedding_provider(use_mock=True if args.mock else None)

    result = asyncio.run(generate_all_embeddings(
        repo,
        provider,
        force_regenerate=args.force_regenerate,
        limit=args.limit,
        concurrency=args.concurrency,
        throttle=FixedIntervalThrottle(interval=args.interval),
    ))

    print(result.message)
    print(f"  Processed: {result.processed}")
    print(f"  Skipped:   {result.skipped}")
    print(f"  Failed:    {result.failed}")
    for error in result.errors:
        print(f"    - {error.wine_id} ({error.wine_name}): {error.reason}")

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
