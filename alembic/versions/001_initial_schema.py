"""Initial schema - catalog wines and user bottles.

Revision ID: 001
Revises: None
Create Date: 2026-10-19

Creates core tables: wines (identity, structure, enrichment JSON,
embedding JSON, metaphone blocking key) and bottles (user inventory).
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Schema SQL inlined so this migration always creates the same tables.
SCHEMA_SQL = """
-- Catalog wines
CREATE TABLE IF NOT EXISTS wines (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    producer_name TEXT NOT NULL DEFAULT '',
    vintage INTEGER,
    country TEXT,
    region TEXT,
    primary_grape TEXT,
    wine_type TEXT,
    body TEXT,
    tannin_level TEXT,
    acidity_level TEXT,
    sweetness_level TEXT,
    enrichment_data TEXT,
    embedding TEXT,
    name_metaphone TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Bottles in user cellars
CREATE TABLE IF NOT EXISTS bottles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    wine_id INTEGER NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1,
    status TEXT NOT NULL DEFAULT 'in_cellar',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (wine_id) REFERENCES wines(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_wines_name_lower ON wines(LOWER(name));
CREATE INDEX IF NOT EXISTS idx_wines_name_metaphone ON wines(name_metaphone);
CREATE INDEX IF NOT EXISTS idx_wines_wine_type ON wines(wine_type);
CREATE INDEX IF NOT EXISTS idx_bottles_user_id ON bottles(user_id);
CREATE INDEX IF NOT EXISTS idx_bottles_wine_id ON bottles(wine_id);
"""


def upgrade() -> None:
    # Raw DBAPI connection for multi-statement SQL
    conn = op.get_bind()
    raw_conn = conn.connection.dbapi_connection
    raw_conn.executescript(SCHEMA_SQL)


def downgrade() -> None:
    conn = op.get_bind()
    raw_conn = conn.connection.dbapi_connection
    for table in ("bottles", "wines"):
        raw_conn.execute(f"DROP TABLE IF EXISTS {table}")
