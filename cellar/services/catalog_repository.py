"""
Catalog and inventory repository with SQLite backend.

Implements CatalogStore and InventoryStore (see protocols.py):
- Candidate retrieval for entity resolution (name prefix, metaphone, producer)
- Embedding storage (JSON arrays), only for wines that pass the readiness gate
- Enrichment storage, validated through EnrichmentPayload on read
- User bottles
"""

import json
import logging
import sqlite3
from enum import Enum
from typing import Optional, Sequence, Type, TypeVar

import jellyfish

from ..config import Config
from ..db import BaseRepository, ensure_schema
from ..models.enums import Body, BottleStatus, Level, Sweetness, WineType
from ..models.wine import CatalogWine, EnrichmentPayload, WineDescriptor
from .embedding_readiness import is_ready_for_embedding
from .embeddings import as_vector
from .protocols import DuplicateWineError, WineFilter
from .similarity import string_similarity

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

WINE_COLUMNS = """
    w.id, w.name, w.producer_name, w.vintage, w.country, w.region, w.primary_grape,
    w.wine_type, w.body, w.tannin_level, w.acidity_level, w.sweetness_level,
    w.enrichment_data, w.embedding
"""


def name_metaphone(name: str) -> str:
    """Phonetic blocking key for a wine name."""
    return jellyfish.metaphone((name or "").lower()[:20])


def _like_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _like_prefix(prefix: str) -> str:
    return f"{_like_escape(prefix)}%"


def _enum_or_none(enum_cls: Type[E], value: Optional[str]) -> Optional[E]:
    if not value:
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} value: {value!r}")
        return None


class CatalogRepository(BaseRepository):
    """
    Thread-safe SQLite repository for catalog wines and user bottles.

    Schema is migrated to head on construction.
    """

    def __init__(self, db_path: Optional[str] = None):
        super().__init__(db_path, use_wal=True)
        ensure_schema(self.db_path)

    def _row_to_wine(self, row: sqlite3.Row) -> CatalogWine:
        embedding = None
        if row["embedding"]:
            try:
                embedding = tuple(json.loads(row["embedding"]))
            except (json.JSONDecodeError, TypeError) as e:
                logger.warning(f"Ignoring malformed embedding for wine {row['id']}: {e}")

        return CatalogWine(
            id=row["id"],
            descriptor=WineDescriptor(
                name=row["name"],
                producer_name=row["producer_name"] or "",
                vintage=row["vintage"],
                country=row["country"],
                region=row["region"],
                grape=row["primary_grape"],
            ),
            wine_type=WineType.parse(row["wine_type"]),
            body=_enum_or_none(Body, row["body"]),
            tannin_level=_enum_or_none(Level, row["tannin_level"]),
            acidity_level=_enum_or_none(Level, row["acidity_level"]),
            sweetness_level=_enum_or_none(Sweetness, row["sweetness_level"]),
            enrichment=EnrichmentPayload.from_raw(row["enrichment_data"]),
            embedding=embedding,
        )

    def _wines(self, sql: str, params: Sequence = ()) -> list[CatalogWine]:
        return [self._row_to_wine(row) for row in self._fetch_all(sql, params)]

    # === Catalog ===

    def add_wine(
        self,
        descriptor: WineDescriptor,
        wine_type: Optional[WineType] = None,
        enrichment: Optional[EnrichmentPayload] = None,
        body: Optional[Body] = None,
        tannin_level: Optional[Level] = None,
        acidity_level: Optional[Level] = None,
        sweetness_level: Optional[Sweetness] = None,
    ) -> int:
        """
        Insert a catalog wine. Returns the new wine id.

        Raises:
            DuplicateWineError: name, producer and vintage already stored
                (case-insensitive; the unique identity index decides)
        """
        try:
            with self._transaction() as cursor:
                cursor.execute("""
                    INSERT INTO wines (
                        name, producer_name, vintage, country, region, primary_grape,
                        wine_type, body, tannin_level, acidity_level, sweetness_level,
                        enrichment_data, name_metaphone
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    descriptor.name,
                    descriptor.producer_name,
                    descriptor.vintage,
                    descriptor.country,
                    descriptor.region,
                    descriptor.grape,
                    wine_type.value if wine_type else None,
                    body.value if body else None,
                    tannin_level.value if tannin_level else None,
                    acidity_level.value if acidity_level else None,
                    sweetness_level.value if sweetness_level else None,
                    enrichment.to_json() if enrichment else None,
                    name_metaphone(descriptor.name),
                ))
                wine_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            existing = self._find_identity(descriptor)
            if existing is None:
                raise
            raise DuplicateWineError(existing) from None

        logger.info(f"Created catalog wine {wine_id}: {descriptor.name} ({descriptor.producer_name})")
        return wine_id

    def get_wine(self, wine_id: int) -> Optional[CatalogWine]:
        row = self._fetch_one(f"SELECT {WINE_COLUMNS} FROM wines w WHERE w.id = ?", (wine_id,))
        return self._row_to_wine(row) if row else None

    def _find_identity(self, descriptor: WineDescriptor) -> Optional[int]:
        row = self._fetch_one("""
            SELECT id FROM wines
            WHERE LOWER(name) = LOWER(?) AND LOWER(producer_name) = LOWER(?)
              AND IFNULL(vintage, 0) = IFNULL(?, 0)
        """, (descriptor.name, descriptor.producer_name, descriptor.vintage))
        return row["id"] if row else None

    def set_enrichment(self, wine_id: int, enrichment: Optional[EnrichmentPayload]) -> None:
        """Replace a wine's enrichment. Its embedding is dropped and regenerated by the next batch."""
        with self._transaction() as cursor:
            cursor.execute("""
                UPDATE wines
                SET enrichment_data = ?, embedding = NULL, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            """, (enrichment.to_json() if enrichment else None, wine_id))
            if cursor.rowcount == 0:
                raise ValueError(f"Wine {wine_id} not found")

    def find_candidates(
        self,
        name_hint: str,
        producer_hint: str = "",
        vintage: Optional[int] = None,
    ) -> list[CatalogWine]:
        """
        Catalog wines plausibly matching a scanned wine, in id order.

        The pool is every wine sharing the name's leading characters, its
        metaphone prefix ("Chateau" / "Shateau") or containing the producer.
        A pool larger than Config.MAX_CANDIDATES keeps the wines closest to
        the hints: same vintage first, then the resolver's name/producer
        average. A crowded prefix never hides the wine being rescanned.
        """
        hint = (name_hint or "").strip().lower()
        producer = (producer_hint or "").strip().lower()
        prefix = hint[:Config.CANDIDATE_PREFIX_LENGTH]
        phonetic = name_metaphone(hint)[:3]

        clauses = ["LOWER(w.name) LIKE ? ESCAPE '\\'"]
        params: list = [_like_prefix(prefix)]
        if phonetic:
            clauses.append("w.name_metaphone LIKE ? ESCAPE '\\'")
            params.append(_like_prefix(phonetic))
        if producer:
            clauses.append("LOWER(w.producer_name) LIKE ? ESCAPE '\\'")
            params.append(f"%{_like_escape(producer)}%")

        pool = self._wines(
            f"SELECT {WINE_COLUMNS} FROM wines w WHERE {' OR '.join(clauses)} ORDER BY w.id", params
        )
        if len(pool) <= Config.MAX_CANDIDATES:
            logger.debug(f"Found {len(pool)} candidates for '{name_hint}'")
            return pool

        def closeness(wine: CatalogWine) -> tuple:
            combined = (
                string_similarity(wine.name, name_hint, fold=Config.FOLD_ACCENTS)
                + string_similarity(wine.producer_name, producer_hint, fold=Config.FOLD_ACCENTS)
            ) / 2
            other_vintage = vintage is not None and wine.vintage != vintage
            return (other_vintage, -combined, wine.id)

        kept = sorted(pool, key=closeness)[:Config.MAX_CANDIDATES]
        logger.debug(f"Kept {len(kept)} of {len(pool)} candidates for '{name_hint}'")
        return sorted(kept, key=lambda w: w.id)

    def get_wines_with_embeddings(self, wine_filter: WineFilter) -> list[CatalogWine]:
        """Embedded wines, optionally restricted to a user's cellar and wine type."""
        clauses = ["w.embedding IS NOT NULL"]
        params: list = []

        if wine_filter.user_id:
            clauses.append("""w.id IN (
                SELECT wine_id FROM bottles
                WHERE user_id = ? AND status = ? AND quantity > 0
            )""")
            params.extend([wine_filter.user_id, BottleStatus.IN_CELLAR.value])
        if wine_filter.wine_type:
            clauses.append("w.wine_type = ?")
            params.append(wine_filter.wine_type.value)

        sql = f"SELECT {WINE_COLUMNS} FROM wines w WHERE {' AND '.join(clauses)} ORDER BY w.id"
        if wine_filter.limit:
            sql += " LIMIT ?"
            params.append(wine_filter.limit)
        return self._wines(sql, params)

    def get_wines_for_embedding(
        self,
        force_regenerate: bool = False,
        limit: Optional[int] = None,
    ) -> list[CatalogWine]:
        """Enriched wines without an embedding (all enriched wines when forced)."""
        sql = f"SELECT {WINE_COLUMNS} FROM wines w WHERE w.enrichment_data IS NOT NULL"
        params: list = []
        if not force_regenerate:
            sql += " AND w.embedding IS NULL"
        sql += " ORDER BY w.id"
        if limit:
            sql += " LIMIT ?"
            params.append(limit)
        return self._wines(sql, params)

    def save_embedding(self, wine_id: int, vector: Sequence[float]) -> None:
        """
        Store an embedding.

        Raises:
            InvalidEmbeddingError: wrong dimensions or non-finite values
            ValueError: wine does not exist, or its enrichment fails the
                readiness gate
        """
        vec = as_vector(vector, expected_dimensions=Config.embedding_dimensions())
        with self._transaction() as cursor:
            row = cursor.execute(
                "SELECT enrichment_data FROM wines WHERE id = ?", (wine_id,)
            ).fetchone()
            if row is None:
                raise ValueError(f"Wine {wine_id} not found")
            if not is_ready_for_embedding(EnrichmentPayload.from_raw(row["enrichment_data"])):
                raise ValueError(f"Wine {wine_id} has too little enrichment to embed")

            cursor.execute("""
                UPDATE wines SET embedding = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            """, (json.dumps(vec.tolist()), wine_id))

    def count_wines(self) -> int:
        return self._fetch_one("SELECT COUNT(*) FROM wines")[0]

    # === Inventory ===

    def add_bottle(self, user_id: str, wine_id: int, quantity: int = 1) -> int:
        """Record bottles of a wine in a user's cellar. Returns bottle id."""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        with self._transaction() as cursor:
            cursor.execute("""
                INSERT INTO bottles (user_id, wine_id, quantity, status)
                VALUES (?, ?, ?, ?)
            """, (user_id, wine_id, quantity, BottleStatus.IN_CELLAR.value))
            return cursor.lastrowid

    def get_user_wines(self, user_id: str) -> list[CatalogWine]:
        """Distinct wines with at least one bottle in the user's cellar."""
        return self._wines(f"""
            SELECT {WINE_COLUMNS} FROM wines w
            WHERE w.id IN (
                SELECT wine_id FROM bottles
                WHERE user_id = ? AND status = ? AND quantity > 0
            )
            ORDER BY w.id
        """, (user_id, BottleStatus.IN_CELLAR.value))
